"""
API key rotation shared by the Google-backed providers.

Each call takes the current key. A key that hits its quota is marked failed
and the next call moves on; the failed call itself is not repeated.
"""

import logging
from typing import Optional, List

logger = logging.getLogger(__name__)


class KeyRing:

    def __init__(self, api_keys: List[str]):
        self.api_keys = [k for k in api_keys if k]
        self._current_key_idx = 0
        self._failed_keys: set = set()

    def __len__(self) -> int:
        return len(self.api_keys)

    def current(self) -> Optional[str]:
        """Get current API key, skipping keys marked as failed."""
        available_keys = [k for k in self.api_keys if k not in self._failed_keys]
        if not available_keys:
            # Everything failed at some point; start over
            self._failed_keys.clear()
            available_keys = self.api_keys

        if not available_keys:
            return None

        self._current_key_idx = self._current_key_idx % len(available_keys)
        return available_keys[self._current_key_idx]

    def rotate(self):
        self._current_key_idx += 1
        logger.info(f"Rotated to key index {self._current_key_idx}")

    def mark_failed(self, key: str):
        """Mark a key as failed (rate limited) and move on."""
        self._failed_keys.add(key)
        self.rotate()
        logger.warning(f"Marked key ...{key[-6:]} as failed")


def is_quota_error(error: Exception) -> bool:
    text = str(error)
    return "429" in text or "quota" in text.lower()
