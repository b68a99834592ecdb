"""Data models for script content and timed captions"""

from typing import List
from pydantic import BaseModel, ConfigDict, Field
from enum import Enum


class Mood(str, Enum):
    """Coarse emotional tag on a script, used to pick background music"""
    ENERGETIC = "energetic"
    SCARY = "scary"
    CALM = "calm"
    DRAMATIC = "dramatic"


class Script(BaseModel):
    """A generated short-form script. Read-only for the renderer."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    topic: str = ""
    title: str
    description: str = ""
    hook: str
    body: str
    cta: str
    tags: List[str] = Field(default_factory=list)
    visual_keywords: List[str] = Field(default_factory=list, alias="visualKeywords")
    mood: Mood = Mood.ENERGETIC

    @property
    def narration_text(self) -> str:
        """Everything the narrator says, in speaking order"""
        return f"{self.hook} {self.body} {self.cta}"


class CaptionWord(BaseModel):
    """One on-screen caption word and the interval it is shown for"""
    model_config = ConfigDict(frozen=True)

    text: str
    start_time: float  # seconds
    end_time: float  # seconds

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    def contains(self, elapsed: float) -> bool:
        return self.start_time <= elapsed <= self.end_time
