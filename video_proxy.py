"""
Gemini file downloads for generated videos.

Veo can return a file URI instead of inline bytes. Those URIs only resolve
with an API key, so clients get a local /video/{file_id} path and the
server fetches the file on their behalf.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

import httpx

from exceptions import BackendError, ValidationError
from settings import get_settings

logger = logging.getLogger(__name__)

FILES_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/files"

FILE_ID_IN_URI = re.compile(r"files/([^:/?]+):")
SAFE_FILE_ID = re.compile(r"^[A-Za-z0-9_-]+$")

PROXY_PATH = "/video/{file_id}"


@dataclass
class VideoFile:
    content: bytes
    mime_type: str = "video/mp4"


def extract_file_id(uri: str) -> Optional[str]:
    match = FILE_ID_IN_URI.search(uri or "")
    return match.group(1) if match else None


def proxy_url(uri: str) -> str:
    """Local proxy path for a Gemini file URI; other URIs pass through."""
    file_id = extract_file_id(uri)
    return PROXY_PATH.format(file_id=file_id) if file_id else uri


async def fetch_video_file(
    file_id: str,
    api_key: Optional[str] = None,
    timeout: float = 60.0,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> VideoFile:
    """
    Download a generated video from the Gemini files API.

    Raises:
        ValidationError: malformed file id
        BackendError: no API key, or the download failed. HTTP failures carry
            the upstream status in context["status_code"].
    """
    if not SAFE_FILE_ID.match(file_id or ""):
        raise ValidationError(f"Invalid file id: {file_id!r}")

    if api_key is None:
        keys = get_settings().google_api_keys
        api_key = keys[0] if keys else None
    if not api_key:
        raise BackendError("video", "No Google API key configured")

    url = f"{FILES_BASE_URL}/{file_id}:download"
    logger.info(f"Fetching video file {file_id}")

    try:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True, transport=transport) as client:
            response = await client.get(url, params={"alt": "media", "key": api_key})
            response.raise_for_status()
    except httpx.HTTPStatusError as e:
        status = e.response.status_code
        logger.error(f"Video download failed ({status}): {e.response.text[:200]}")
        raise BackendError(
            "video", f"download failed with status {status}",
            cause=e, context={"status_code": status},
        )
    except httpx.HTTPError as e:
        logger.error(f"Video download error: {e}")
        raise BackendError("video", f"download failed: {e}", cause=e)

    mime_type = response.headers.get("content-type", "video/mp4")
    logger.info(f"Fetched video file {file_id}: {len(response.content)} bytes ({mime_type})")
    return VideoFile(content=response.content, mime_type=mime_type)
