"""Pipeline orchestration for maze generation.

Provides the public Maze class and the ``generate`` entry point. One run:

1. carve a spanning passage structure (generator.Generator)
2. repair forbidden local patterns (repair.smooth_patterns)
3. put the exit on the boundary, repairing again if a wall had to open
4. place item, dragon and hero (entities.place_entities)
5. validate every invariant; on failure start over from step 1 with the
   same RNG stream, up to ``max_attempts`` times

Only budget exhaustion reaches the caller (GenerationError). Bad sizes are
rejected before any work with InvalidSizeError.
"""
from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Optional, Dict, Any
import os
import random
import time

from flask import current_app, has_app_context

from ..logging_utils import get_logger
from .config import MazeConfig
from .entities import place_entities
from .errors import GenerationError, check_size
from .exits import place_exit
from .generator import Generator
from .grid import Coord, Grid
from .metrics import init_metrics
from .repair import smooth_patterns
from .tiles import EXIT
from .validation import STRUCTURAL_RULES, violations

log = get_logger("dragonmaze.maze")

# env var -> (config attribute, parser)
ENV_OVERRIDES = {
    'DRAGONMAZE_MAX_ATTEMPTS': ('max_attempts', int),
    'DRAGONMAZE_PLACEMENT_RETRIES': ('placement_retries', int),
    'DRAGONMAZE_SMOOTHING_PASSES': ('max_smoothing_passes', int),
    'DRAGONMAZE_LOOP_CHANCE': ('loop_chance', float),
}
APP_CONFIG_OVERRIDES = {
    'MAZE_MAX_ATTEMPTS': 'max_attempts',
    'MAZE_PLACEMENT_RETRIES': 'placement_retries',
    'MAZE_SMOOTHING_PASSES': 'max_smoothing_passes',
    'MAZE_LOOP_CHANCE': 'loop_chance',
}
EXIT_RULES = STRUCTURAL_RULES + ('connectivity',)


def _flag(raw: str) -> bool:
    return raw.lower() not in {'0', 'false', 'no', ''}


@dataclass
class Maze:
    seed: Optional[int] = None
    size: int = 11
    config: Optional[MazeConfig] = None
    enable_metrics: bool = True

    def __post_init__(self):
        check_size(self.size)
        config = self.config or MazeConfig(size=self.size, seed=self.seed)
        # 0 is a valid deterministic seed; None => random
        if self.seed is None:
            self.seed = config.seed if config.seed is not None else random.randint(1, 1_000_000)
        self.config = replace(config, size=self.size, seed=self.seed)
        self._apply_overrides()
        self.metrics: Dict[str, Any] = init_metrics() if self.enable_metrics else {}
        self.rng = random.Random(self.seed)
        self.log = log.bind(size=self.size, seed=self.seed)
        self.grid: Optional[Grid] = None
        self.positions: Dict[str, Coord] = {}
        self._run_pipeline()

    def _apply_overrides(self):
        # Environment first, then Flask app config (highest precedence)
        for env_key, (attr, parse) in ENV_OVERRIDES.items():
            if env_key in os.environ:
                setattr(self.config, attr, parse(os.environ[env_key]))
        if 'DRAGONMAZE_ENABLE_METRICS' in os.environ:
            self.enable_metrics = _flag(os.environ['DRAGONMAZE_ENABLE_METRICS'])
        if has_app_context():
            cfg = current_app.config
            for key, attr in APP_CONFIG_OVERRIDES.items():
                if key in cfg:
                    setattr(self.config, attr, cfg[key])
            if 'MAZE_ENABLE_METRICS' in cfg:
                self.enable_metrics = bool(cfg['MAZE_ENABLE_METRICS'])

    def _bump(self, key: str, amount: int = 1):
        if self.enable_metrics:
            self.metrics[key] += amount

    def _phase(self, label, fn, *a, **k):
        if not self.enable_metrics:
            return fn(*a, **k)
        ps = time.perf_counter(); r = fn(*a, **k); pe = time.perf_counter()
        phase_ms = self.metrics['phase_ms']
        phase_ms[label] = phase_ms.get(label, 0) + int((pe - ps) * 1000)
        return r

    def _attempt(self):
        cfg = self.config
        gen = Generator(self.size, self.rng, loop_chance=cfg.loop_chance)
        outputs = self._phase('generate', gen.run)
        grid = outputs.grid
        self._bump('cells_carved', outputs.cells_carved)
        self._bump('loops_opened', outputs.loops_opened)
        self._bump('repairs_performed', self._phase('smooth', smooth_patterns, grid, cfg.max_smoothing_passes))
        exit_pos, opened = self._phase('place_exit', place_exit, grid, self.rng)
        if opened:
            self._bump('exit_repairs')
            self._bump('repairs_performed', self._phase('smooth', smooth_patterns, grid, cfg.max_smoothing_passes))
        # Placement exhaustion is a hard failure, not a restart
        positions = self._phase(
            'place_entities', place_entities, grid, self.rng, cfg.placement_retries,
            self.metrics if self.enable_metrics else None,
        )
        positions['exit'] = exit_pos
        return grid, positions

    def _run_pipeline(self):
        start = time.perf_counter()
        attempts = self.config.max_attempts
        for attempt in range(1, attempts + 1):
            if self.enable_metrics:
                self.metrics['attempts'] = attempt
            try:
                grid, positions = self._attempt()
            except GenerationError as exc:
                exc.seed = self.seed
                exc.attempts = attempt
                self.log.error(event="maze_generation_failed", attempt=attempt, reason=exc.message)
                raise
            problems = self._phase('validate', violations, grid)
            if not problems:
                self.grid = grid
                self.positions = positions
                runtime_ms = int((time.perf_counter() - start) * 1000)
                if self.enable_metrics:
                    self.metrics['runtime_ms'] = runtime_ms
                self.log.debug(event="maze_generated", attempts=attempt, runtime_ms=runtime_ms)
                return
            self._bump('validation_failures')
            first = problems[0]
            self.log.warn(event="maze_attempt_failed", attempt=attempt,
                          rule=first.rule, coord=first.coord)
        self.log.error(event="maze_generation_failed", attempts=attempts)
        raise GenerationError(
            f"no valid {self.size}x{self.size} maze after {attempts} attempts (seed {self.seed})",
            seed=self.seed,
            attempts=attempts,
        )

    def generate_exit_position(self, relocate: bool = False) -> Coord:
        """(Re)place the boundary exit and return it.

        Idempotent unless ``relocate`` is set: an existing exit is kept as is.
        The move is made on a copy of the grid and only kept when boundary,
        pattern and connectivity rules still hold; otherwise GenerationError
        is raised and the maze is left unchanged.
        """
        grid = self.grid.copy()
        pos, opened = place_exit(grid, self.rng, relocate=relocate)
        repairs = smooth_patterns(grid, self.config.max_smoothing_passes) if opened else 0
        problems = violations(grid, EXIT_RULES)
        if problems:
            first = problems[0]
            raise GenerationError(
                f"exit at {pos} breaks the {first.rule} rule: {first.detail}", seed=self.seed
            )
        self.grid = grid
        self.positions['exit'] = pos
        if opened:
            self._bump('exit_repairs')
            self._bump('repairs_performed', repairs)
        self.log.debug(event="maze_exit_placed", row=pos[0], col=pos[1], relocated=relocate)
        return pos

    @property
    def exit_pos(self) -> Optional[Coord]:
        return self.grid.find(EXIT)

    def text(self) -> str:
        return self.grid.to_text()

    def to_dict(self) -> Dict[str, Any]:
        out = {'seed': self.seed}
        out.update(self.grid.to_dict())
        out['positions'] = {name: list(coord) for name, coord in self.positions.items()}
        return out


def generate(size: int, seed: Optional[int] = None, config: Optional[MazeConfig] = None) -> Grid:
    """Build a maze grid satisfying every invariant.

    Raises InvalidSizeError for even sizes or sizes below 5 and
    GenerationError when the retry budget runs out.
    """
    return Maze(seed=seed, size=size, config=config).grid


__all__ = ["Maze", "generate"]
