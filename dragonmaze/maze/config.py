from dataclasses import dataclass
from typing import Optional


@dataclass
class MazeConfig:
    size: int = 11
    seed: Optional[int] = None
    # whole-maze restarts after a failed validation
    max_attempts: int = 20
    # dragon re-rolls when no hero cell is left
    placement_retries: int = 10
    max_smoothing_passes: int = 64
    loop_chance: float = 0.1


__all__ = ["MazeConfig"]
