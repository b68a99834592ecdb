"""Caption timing

Spreads the narration duration over the words of the script. Longer words
and words carrying punctuation get proportionally more screen time, since
the narrator lingers on them or pauses after them.
"""

import bisect
from typing import List, Optional, Sequence

from .content_models import CaptionWord

BASE_WEIGHT = 1.0
LETTER_WEIGHT = 0.15
COMMA_BONUS = 2.0
SENTENCE_END_BONUS = 3.0

# Devanagari danda ends sentences in Hindi scripts
SENTENCE_END_MARKS = (".", "!", "?", "।")


def clean_word(token: str) -> str:
    """Letters and digits only (any script)"""
    return "".join(ch for ch in token if ch.isalnum())


def caption_weight(token: str) -> float:
    weight = BASE_WEIGHT + len(clean_word(token)) * LETTER_WEIGHT
    if "," in token:
        weight += COMMA_BONUS
    if any(mark in token for mark in SENTENCE_END_MARKS):
        weight += SENTENCE_END_BONUS
    return weight


def generate_timed_captions(full_text: str, total_duration: float) -> List[CaptionWord]:
    """
    Allocate one caption interval per word so the intervals exactly cover
    [0, total_duration].

    Args:
        full_text: Narration text (hook, body and call to action)
        total_duration: Narration length in seconds

    Returns:
        Ordered, contiguous caption words; empty when the text has no words
    """
    tokens = full_text.split()
    if not tokens:
        return []

    weights = [caption_weight(token) for token in tokens]
    time_per_unit = total_duration / sum(weights)

    captions = []
    cursor = 0.0
    for token, weight in zip(tokens, weights):
        end = cursor + weight * time_per_unit
        captions.append(CaptionWord(text=token, start_time=cursor, end_time=end))
        cursor = end

    # Absorb accumulated float error into the last word
    last = captions[-1]
    captions[-1] = CaptionWord(text=last.text, start_time=last.start_time, end_time=total_duration)
    return captions


class CaptionTrack:
    """Caption lookup by elapsed time"""

    def __init__(self, captions: Sequence[CaptionWord]):
        self.captions = list(captions)
        self._ends = [caption.end_time for caption in self.captions]

    def __len__(self) -> int:
        return len(self.captions)

    def at(self, elapsed: float) -> Optional[CaptionWord]:
        """First caption whose interval contains elapsed, or None."""
        index = bisect.bisect_left(self._ends, elapsed)
        if index < len(self.captions) and self.captions[index].start_time <= elapsed:
            return self.captions[index]
        return None


def active_caption(captions: Sequence[CaptionWord], elapsed: float) -> Optional[CaptionWord]:
    return CaptionTrack(captions).at(elapsed)
