"""File-backed script and narration adapters for offline renders."""

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from ..errors import NarrationError, ScriptGenerationError
from .content_models import Script
from .providers import NarrationSynthesizer, ScriptProvider

logger = logging.getLogger(__name__)


class StaticScriptProvider(ScriptProvider):
    """Serves a script stored as JSON, whatever niche is asked for"""

    def __init__(self, script_path: Path):
        self.script_path = Path(script_path)

    async def generate_script(self, niche: str, language: str = "English") -> Script:
        try:
            data = json.loads(self.script_path.read_text(encoding='utf-8'))
            script = Script.model_validate(data)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            raise ScriptGenerationError(f"Could not read script {self.script_path}: {e}") from e

        logger.info(f"Loaded script '{script.title}' from {self.script_path}")
        return script


class PcmFileSynthesizer(NarrationSynthesizer):
    """Returns pre-recorded PCM instead of synthesizing"""

    def __init__(self, pcm_path: Path):
        self.pcm_path = Path(pcm_path)

    async def synthesize(self, text: str) -> bytes:
        try:
            return self.pcm_path.read_bytes()
        except OSError as e:
            raise NarrationError(f"Could not read narration {self.pcm_path}: {e}") from e
