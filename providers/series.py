"""
Ordered series generation.

Runs one backend call per prompt, strictly in order, collecting whatever
succeeds. Used for both the multi-part video and the image series.
"""

import asyncio
import logging
from typing import Optional, Sequence, Union

from .base import SeriesGenerationService, SeriesResponse, ImageGenerationService, VideoGenerationService

logger = logging.getLogger(__name__)


class OrderedSeriesGenerator(SeriesGenerationService):

    def __init__(self, backend: Union[ImageGenerationService, VideoGenerationService]):
        self.backend = backend

    @property
    def name(self) -> str:
        return f"series:{self.backend.name}"

    async def generate_ordered(
        self,
        prompts: Sequence[str],
        aspect_ratio: str,
        timeout: Optional[float] = None
    ) -> SeriesResponse:
        """
        Generate every part in prompt order.

        Failed parts are skipped in `urls` and reported in `errors`;
        later parts still run. With a timeout, the deadline covers the whole
        series: parts finished before it are kept, the part in flight is
        cancelled and parts not yet started are reported as timed out.
        """
        result = SeriesResponse(provider=self.name)
        total = len(prompts)
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout if timeout is not None else None

        for i, prompt in enumerate(prompts):
            logger.info(f"Generating series part {i + 1}/{total} via {self.backend.name}")

            if deadline is None:
                response = await self.backend.generate(prompt, aspect_ratio)
            else:
                remaining = deadline - loop.time()
                try:
                    if remaining <= 0:
                        raise asyncio.TimeoutError()
                    response = await asyncio.wait_for(self.backend.generate(prompt, aspect_ratio), remaining)
                except asyncio.TimeoutError:
                    logger.warning(f"Series part {i + 1}/{total} timed out after {timeout:g}s")
                    result.errors.append(f"part {i + 1}: timed out after {timeout:g}s")
                    continue

            if response.error or not response.url:
                error = response.error or "no_output"
                logger.warning(f"Series part {i + 1}/{total} failed: {error}")
                result.errors.append(f"part {i + 1}: {error}")
                continue

            result.urls.append(response.url)

        logger.info(f"Series finished: {len(result.urls)}/{total} parts")
        return result
