import math


def seeded_unit(seed: float, offset: float) -> float:
    """Deterministic value in [0, 1) derived from a clip seed and an offset."""
    return math.sin(seed + offset) % 1.0


def seeded_flag(seed: float, offset: float, threshold: float = 0.5) -> bool:
    return seeded_unit(seed, offset) > threshold


def seeded_sign(seed: float, offset: float) -> int:
    return 1 if seeded_flag(seed, offset) else -1
