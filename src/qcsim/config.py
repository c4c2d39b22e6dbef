"""Simulator configuration."""

from __future__ import annotations

from dataclasses import dataclass, replace

import numpy as np

from qcsim.state import DISPLAY_THRESHOLD, NORM_TOLERANCE


@dataclass(frozen=True)
class SimulatorConfig:
    """
    Run-time settings shared by the orchestrator, worker and CLI.

    Attributes
    ----------
    seed : int | None
        Seed for the measurement RNG. ``None`` draws fresh OS entropy.
    shots : int
        Default shot count when a caller does not pass one.
    timeout : float | None
        Wall-clock budget in seconds, checked between gate applications.
    norm_tolerance : float
        Allowed drift of Σ|a|² from 1.
    display_threshold : float
        Amplitude components at or below this are omitted from ket strings.
    check_normalization : bool
        Verify the norm after every gate (costs one O(2^n) pass per gate).
    """

    seed: int | None = None
    shots: int = 1024
    timeout: float | None = None
    norm_tolerance: float = NORM_TOLERANCE
    display_threshold: float = DISPLAY_THRESHOLD
    check_normalization: bool = False

    def __post_init__(self) -> None:
        if self.shots < 0:
            raise ValueError(f"shots must be >= 0, got {self.shots}")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if self.norm_tolerance <= 0:
            raise ValueError(f"norm_tolerance must be positive, got {self.norm_tolerance}")
        if self.display_threshold < 0:
            raise ValueError(
                f"display_threshold must be >= 0, got {self.display_threshold}"
            )

    def make_rng(self, stream: int | None = None) -> np.random.Generator:
        """
        Build a numpy Generator from ``seed``.

        ``stream`` derives an independent child stream, so parallel jobs
        sharing one seeded config do not replay the same draws.
        """
        if self.seed is None:
            return np.random.default_rng()
        if stream is None:
            return np.random.default_rng(self.seed)
        return np.random.default_rng([self.seed, stream])

    def with_options(self, **changes) -> SimulatorConfig:
        return replace(self, **changes)


DEFAULT_CONFIG = SimulatorConfig()
