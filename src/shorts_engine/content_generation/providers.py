"""
Port interfaces for the collaborators around the renderer.
The pipeline depends only on these abstractions; adapters implement them.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from .content_models import Script


class ScriptProvider(ABC):
    """Script generation from a niche and a narration language"""

    @abstractmethod
    async def generate_script(self, niche: str, language: str = "English") -> Script:
        """Return a script or raise ScriptGenerationError."""


class NarrationSynthesizer(ABC):
    """Text-to-speech producing raw 16-bit mono PCM"""

    @abstractmethod
    async def synthesize(self, text: str) -> bytes:
        """Return s16le PCM at the engine's sample rate or raise NarrationError."""


class FootageProvider(ABC):
    """Stock footage search"""

    @abstractmethod
    async def find_clips(self, keywords: List[str]) -> List[str]:
        """Return clip locators; never empty."""


class Uploader(ABC):
    """Publish the finished video"""

    @abstractmethod
    async def upload(self,
                     video: bytes,
                     title: str,
                     description: str = "",
                     tags: Optional[List[str]] = None,
                     container: str = "mp4") -> Dict[str, Any]:
        """Deliver the video; raise DeliveryError on a non-success response."""
