"""Construction-time viewport configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Any

STRATEGIES = ("buffer", "lazy")

# Environment variable -> option name
_ENV_OPTIONS = {
    "PI_VIEWPORT_GAP": "gap",
    "PI_VIEWPORT_OVERSCAN": "overscan",
    "PI_VIEWPORT_ESTIMATE": "estimate",
    "PI_VIEWPORT_WHEEL_LINES": "wheel_lines",
}


@dataclass(frozen=True)
class ViewportOptions:
    """Tunables fixed for the lifetime of a viewport.

    ``strategy`` picks the layout backend: ``"buffer"`` composites every item
    into one surface, ``"lazy"`` only renders items near the viewport and
    estimates the rest.  ``overscan`` and ``estimate`` only affect the lazy
    backend.
    """

    strategy: str = "buffer"
    gap: int = 0
    overscan: int = 5
    estimate: int = 10
    wheel_lines: int = 5

    def __post_init__(self) -> None:
        if self.strategy not in STRATEGIES:
            raise ValueError(f"Unknown viewport strategy: {self.strategy!r} (expected one of {', '.join(STRATEGIES)})")
        if self.gap < 0:
            raise ValueError(f"gap must be >= 0, got {self.gap}")
        if self.overscan < 0:
            raise ValueError(f"overscan must be >= 0, got {self.overscan}")
        if self.estimate <= 0:
            raise ValueError(f"estimate must be > 0, got {self.estimate}")
        if self.wheel_lines <= 0:
            raise ValueError(f"wheel_lines must be > 0, got {self.wheel_lines}")

    @classmethod
    def from_env(cls, **overrides: Any) -> ViewportOptions:
        """Build options from ``PI_VIEWPORT_*`` environment variables.

        Keyword *overrides* win over the environment.
        """
        values: dict[str, Any] = {}
        strategy = os.environ.get("PI_VIEWPORT_STRATEGY")
        if strategy:
            values["strategy"] = strategy.strip().lower()
        for var, name in _ENV_OPTIONS.items():
            raw = os.environ.get(var)
            if raw is None or not raw.strip():
                continue
            try:
                values[name] = int(raw)
            except ValueError:
                raise ValueError(f"{var} must be an integer, got {raw!r}") from None
        values.update(overrides)
        return cls(**values)

    def with_changes(self, **changes: Any) -> ViewportOptions:
        return replace(self, **changes)
