"""Delivery of finished shorts to the channel backend.

The backend owns channel authentication; this client only posts the video
and its metadata as a multipart form.
"""

import asyncio
import json
from typing import Any, Dict, List, Optional

import aiohttp

from ..content_generation.providers import Uploader
from ..errors import DeliveryError
from ..utils.config import UploadConfig
from ..utils.logger import LoggerMixin

MIME_TYPES = {"mp4": "video/mp4", "webm": "video/webm", "mov": "video/quicktime", "mkv": "video/x-matroska"}


class BackendUploader(Uploader, LoggerMixin):

    def __init__(self, config: Optional[UploadConfig] = None):
        self.config = config or UploadConfig()

    def build_form(self,
                   video: bytes,
                   title: str,
                   description: str,
                   tags: List[str],
                   container: str) -> aiohttp.FormData:
        form = aiohttp.FormData()
        form.add_field(
            'video', video,
            filename=f"video.{container}",
            content_type=MIME_TYPES.get(container, "application/octet-stream")
        )
        form.add_field('title', title)
        form.add_field('description', description)
        form.add_field('tags', json.dumps(tags))
        return form

    async def upload(self,
                     video: bytes,
                     title: str,
                     description: str = "",
                     tags: Optional[List[str]] = None,
                     container: str = "mp4") -> Dict[str, Any]:
        form = self.build_form(video, title, description, tags or [], container)
        timeout = aiohttp.ClientTimeout(total=self.config.timeout_seconds)
        self.logger.info(f"Uploading '{title}' ({len(video) / (1024 ** 2):.1f} MB) to {self.config.endpoint}")

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(self.config.endpoint, data=form) as response:
                    if response.status >= 300:
                        raise DeliveryError(await _error_details(response))
                    body = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise DeliveryError(f"Upload failed: {e}") from e
        except ValueError as e:
            raise DeliveryError(f"Backend accepted the upload but sent an unreadable response: {e}") from e

        if not isinstance(body, dict):
            raise DeliveryError(f"Backend response was not a JSON object: {body!r}")
        return body


async def _error_details(response: aiohttp.ClientResponse) -> str:
    """The backend reports failures as JSON with a 'details' field"""
    try:
        body = await response.json(content_type=None)
    except (aiohttp.ContentTypeError, ValueError):
        body = None
    if isinstance(body, dict) and body.get('details'):
        return str(body['details'])
    return f"Upload failed via backend (HTTP {response.status})"
