"""
End-to-end production of one short: script, footage, narration, render, upload.
"""

import time
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel

from ..content_generation.content_models import Script
from ..content_generation.providers import (
    FootageProvider, NarrationSynthesizer, ScriptProvider, Uploader
)
from ..errors import FootageError
from ..utils.logger import LoggerMixin
from ..video_assembly.frame_clock import CancellationToken
from ..video_assembly.video_assembler import ShortVideoAssembler
from ..video_assembly.video_models import VideoAssemblyResult

ProgressCallback = Callable[[str], None]


class PipelineResult(BaseModel):
    """Everything one pipeline run produced"""
    niche: str
    script: Script
    render: VideoAssemblyResult
    upload_response: Optional[Dict[str, Any]] = None
    elapsed_seconds: float = 0.0

    @property
    def uploaded(self) -> bool:
        return self.upload_response is not None


class ShortsPipeline(LoggerMixin):
    """Coordinates the collaborators around the renderer, one step at a time"""

    def __init__(self,
                 script_provider: ScriptProvider,
                 narration_synthesizer: NarrationSynthesizer,
                 footage_provider: FootageProvider,
                 assembler: ShortVideoAssembler,
                 uploader: Optional[Uploader] = None):
        self.script_provider = script_provider
        self.narration_synthesizer = narration_synthesizer
        self.footage_provider = footage_provider
        self.assembler = assembler
        self.uploader = uploader

    async def run(self,
                  niche: str,
                  language: str = "English",
                  progress_callback: Optional[ProgressCallback] = None,
                  cancel_token: Optional[CancellationToken] = None,
                  upload: bool = True) -> PipelineResult:
        """
        Produce and optionally publish one short.

        Errors from the script, narration, footage and upload collaborators
        propagate unchanged. A render that did not complete is returned
        without uploading.
        """
        start_time = time.time()
        notify = progress_callback or (lambda message: None)

        notify(f"Step 1: Generating script for '{niche}' ({language})...")
        script = await self.script_provider.generate_script(niche, language)
        self.logger.info(f"Script ready: '{script.title}' (mood: {script.mood.value})")

        notify("Step 2: Searching stock footage...")
        keywords = script.visual_keywords or [niche]
        clip_locators = await self.footage_provider.find_clips(keywords)
        if not clip_locators:
            raise FootageError(f"No footage found for {keywords}")
        self.logger.info(f"{len(clip_locators)} clip candidates for {keywords}")

        notify("Step 3: Synthesizing voiceover...")
        narration_pcm = await self.narration_synthesizer.synthesize(script.narration_text)

        notify("Step 4: Rendering video...")
        render = await self.assembler.render(
            script, narration_pcm, clip_locators,
            progress_callback=notify,
            cancel_token=cancel_token
        )

        result = PipelineResult(niche=niche, script=script, render=render)

        if not render.success:
            self.logger.warning(f"Render {render.outcome.value}, skipping upload")
        elif upload and self.uploader is not None:
            notify("Step 5: Uploading to channel...")
            result.upload_response = await self.uploader.upload(
                render.video_bytes,
                script.title,
                description=script.description,
                tags=list(script.tags),
                container=render.container
            )
            self.logger.info(f"Uploaded '{script.title}'")

        result.elapsed_seconds = time.time() - start_time
        return result
