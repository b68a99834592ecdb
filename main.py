#!/usr/bin/env python3
"""
Shorts Engine - Main Entry Point
Renders vertical shorts: narration-timed captions over stock footage.
"""

import sys
from pathlib import Path

# Add src to Python path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from shorts_engine.cli import main

if __name__ == "__main__":
    sys.exit(main())
