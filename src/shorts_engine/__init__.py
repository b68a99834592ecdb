"""
Shorts Engine

Renders vertical short-form videos: narration-timed kinetic captions over
stock footage with Ken Burns motion, cyclic clip transitions and a
narration plus background music mix.
"""

__version__ = "0.1.0"
