"""
Stock footage lookup via the Pexels video search API.

Without an API key, or when the search fails or finds nothing, a fixed set
of generic clips is returned so a render always has footage to work with.
"""

import asyncio
from typing import Any, Dict, List, Optional

import aiohttp

from ..content_generation.providers import FootageProvider
from ..utils.config import FootageConfig
from ..utils.logger import LoggerMixin

PEXELS_BASE_URL = "https://api.pexels.com/videos/search"

FALLBACK_VIDEOS = [
    "https://cdn.pixabay.com/vimeo/328940142/neon-21368.mp4?width=720&hash=85e8392131238682057790858e39145695861110",
    "https://cdn.pixabay.com/vimeo/382103328/particles-31367.mp4?width=720&hash=ef410651859c76b00b0051e5058721c5b8e96720",
    "https://cdn.pixabay.com/vimeo/452367154/network-47206.mp4?width=720&hash=d1e2e921d7023158022806307374007604500570",
    "https://cdn.pixabay.com/vimeo/518606403/cloud-65778.mp4?width=720&hash=648f322316e6f9d3434676518175787784013063",
]

MIN_FILE_HEIGHT = 720
MAX_FILE_HEIGHT = 1280


def pick_video_file(video: Dict[str, Any]) -> Optional[str]:
    """Prefer an HD rendition (720p to 1280p), else the first one listed"""
    files = video.get('video_files') or []
    if not files:
        return None
    for file_info in files:
        try:
            height = int(file_info.get('height') or 0)
        except (TypeError, ValueError):
            continue
        if MIN_FILE_HEIGHT <= height <= MAX_FILE_HEIGHT:
            return file_info.get('link')
    return files[0].get('link')


def extract_links(payload: Any) -> List[str]:
    if not isinstance(payload, dict):
        return []
    links = []
    for video in payload.get('videos') or []:
        if not isinstance(video, dict):
            continue
        link = pick_video_file(video)
        if link:
            links.append(link)
    return links


class PexelsFootageProvider(FootageProvider, LoggerMixin):

    def __init__(self, config: Optional[FootageConfig] = None):
        self.config = config or FootageConfig()

    async def find_clips(self, keywords: List[str]) -> List[str]:
        if not self.config.pexels_api_key:
            self.logger.warning("No Pexels API key provided, using fallback videos")
            return list(FALLBACK_VIDEOS)

        params = {
            'query': " ".join(keywords),
            'per_page': str(self.config.per_page),
            'orientation': self.config.orientation,
            'size': self.config.size,
        }
        headers = {'Authorization': self.config.pexels_api_key}
        timeout = aiohttp.ClientTimeout(total=self.config.timeout_seconds)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(PEXELS_BASE_URL, params=params, headers=headers) as response:
                    if response.status != 200:
                        self.logger.error(f"Pexels API error: HTTP {response.status}")
                        return list(FALLBACK_VIDEOS)
                    payload = await response.json()
            links = extract_links(payload)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError,
                AttributeError, TypeError, KeyError) as e:
            self.logger.error(f"Failed to fetch stock videos: {e}")
            return list(FALLBACK_VIDEOS)

        if not links:
            self.logger.warning(f"Pexels found no videos for '{params['query']}', using fallback videos")
            return list(FALLBACK_VIDEOS)

        self.logger.info(f"Pexels returned {len(links)} clips for '{params['query']}'")
        return links


class StaticFootageProvider(FootageProvider):
    """Fixed clip list, for renders from footage chosen by hand"""

    def __init__(self, locators: List[str]):
        if not locators:
            raise ValueError("StaticFootageProvider needs at least one locator")
        self.locators = list(locators)

    async def find_clips(self, keywords: List[str]) -> List[str]:
        return list(self.locators)
