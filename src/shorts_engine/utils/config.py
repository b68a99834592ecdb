"""Configuration management for the shorts engine"""

import os
import yaml
from pathlib import Path
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


# Royalty-free background music, one track per script mood
DEFAULT_MUSIC_TRACKS: Dict[str, str] = {
    "energetic": "https://cdn.pixabay.com/download/audio/2022/05/27/audio_1808fbf07a.mp3",
    "scary": "https://cdn.pixabay.com/download/audio/2022/01/18/audio_d0a13f69d2.mp3",
    "dramatic": "https://cdn.pixabay.com/download/audio/2022/03/24/audio_344db72820.mp3",
    "calm": "https://cdn.pixabay.com/download/audio/2022/05/17/audio_370213d2f3.mp3",
}


class RenderConfig(BaseModel):
    width: int = Field(default=1080, ge=16)
    height: int = Field(default=1920, ge=16)
    fps: int = Field(default=30, ge=1, le=120)
    clip_duration: float = Field(default=3.0, gt=0.0)
    transition_duration: float = Field(default=0.5, ge=0.0)
    tail_seconds: float = Field(default=1.0, ge=0.0)
    realtime: bool = False
    progress_every_frames: int = Field(default=90, ge=1)


class KenBurnsConfig(BaseModel):
    cover_slack: float = 1.25  # full-bleed cover plus room to move
    zoom_amount: float = 0.10
    pan_fraction: float = 0.4


class CaptionConfig(BaseModel):
    font_path: Optional[str] = None
    font_size: int = 144
    stroke_width: int = 15
    entrance_speed: float = 2.5
    wobble_degrees: float = 3.0
    wobble_rate: float = 3.0
    shake_degrees: float = 8.0
    shake_rate: float = 40.0
    glitch_offset: int = 8


class AudioConfig(BaseModel):
    sample_rate: int = Field(default=24000, gt=0)
    narration_gain: float = Field(default=1.0, ge=0.0)
    music_gain: float = Field(default=0.15, ge=0.0)


class MusicConfig(BaseModel):
    enabled: bool = True
    tracks: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_MUSIC_TRACKS))
    default_mood: str = "energetic"
    timeout_seconds: float = 30.0


class ClipsConfig(BaseModel):
    load_timeout_ms: int = Field(default=3000, ge=1)


class EncoderConfig(BaseModel):
    ffmpeg_binary: str = "ffmpeg"
    video_codec: str = "libx264"
    video_bitrate: str = "5M"
    preset: str = "medium"
    pix_fmt: str = "yuv420p"
    audio_codec: str = "aac"
    audio_bitrate: str = "128k"
    container: str = "mp4"


class FootageConfig(BaseModel):
    pexels_api_key: Optional[str] = None
    per_page: int = 5
    orientation: str = "portrait"
    size: str = "medium"
    timeout_seconds: float = 15.0


class UploadConfig(BaseModel):
    endpoint: str = "http://localhost:3000/api/upload"
    timeout_seconds: float = 300.0


class PathsConfig(BaseModel):
    """Storage paths configuration"""
    output: str = "./output"
    logs: str = "./logs"


class Config(BaseModel):
    render: RenderConfig = RenderConfig()
    ken_burns: KenBurnsConfig = KenBurnsConfig()
    captions: CaptionConfig = CaptionConfig()
    audio: AudioConfig = AudioConfig()
    music: MusicConfig = MusicConfig()
    clips: ClipsConfig = ClipsConfig()
    encoder: EncoderConfig = EncoderConfig()
    footage: FootageConfig = FootageConfig()
    upload: UploadConfig = UploadConfig()
    paths: PathsConfig = PathsConfig()
    logging: Dict[str, Any] = {}

    def apply_environment(self) -> "Config":
        """Fill secrets that are left empty in the YAML from the environment"""
        if not self.footage.pexels_api_key:
            self.footage.pexels_api_key = os.getenv("PEXELS_API_KEY") or None
        return self

    @classmethod
    def load(cls, config_path: str) -> "Config":
        """Load configuration from YAML file"""
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_file, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}

        return cls(**config_data)

    def save(self, config_path: str):
        """Save configuration to YAML file"""
        config_file = Path(config_path)
        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, 'w', encoding='utf-8') as f:
            yaml.safe_dump(self.model_dump(), f, default_flow_style=False, allow_unicode=True)
