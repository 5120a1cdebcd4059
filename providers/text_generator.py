"""
Creative concept text generation on top of the provider router.
"""

import logging
from typing import Optional, Dict, Any, Sequence

from models import Domain, PaletteEntry
from prompts import build_ideas_prompt
from .base import TextGenerationService, BackendResponse, GenerationConfig, TaskType
from .router import ProviderRouter, get_router

logger = logging.getLogger(__name__)


class RouterTextGenerator(TextGenerationService):

    def __init__(self, router: Optional[ProviderRouter] = None):
        self.router = router or get_router()
        self.config = GenerationConfig(max_tokens=1500)

    async def generate(
        self,
        domain: Domain,
        palette: Sequence[PaletteEntry],
        customizations: Dict[str, Any],
        instructions: Optional[str] = None
    ) -> BackendResponse:
        prompt = build_ideas_prompt(domain, palette, customizations, instructions)
        logger.info(f"Generating ideas for {domain.value} ({len(prompt)} char prompt)")

        response = await self.router.generate_text(prompt, TaskType.TEXT_GENERATION, config=self.config)
        if not response.error and not response.text.strip():
            response.error = "empty_response"

        return BackendResponse(
            provider=response.provider,
            text=response.text.strip(),
            model_used=response.model_used,
            error=response.error,
        )
