"""Store configuration.

Reads from environment variables when built with ``StoreConfig.from_env()``:

- TTLKV_SWEEP_INTERVAL_SECONDS  seconds between background sweeps (default 1.0)
- TTLKV_BACKGROUND_SWEEP        run the sweep thread (default true)
- TTLKV_SWEEPER_THREAD_NAME     name of the sweep thread (default ttlkv-sweeper)
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ttlkv.shared.errors import ValidationError

if TYPE_CHECKING:
    from collections.abc import Mapping

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


def _parse_bool(raw: str, field: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValidationError(f"Invalid boolean for {field}: {raw!r}", field=field)


def _parse_float(raw: str, field: str) -> float:
    try:
        return float(raw)
    except ValueError:
        raise ValidationError(f"Invalid number for {field}: {raw!r}", field=field) from None


@dataclass(frozen=True)
class StoreConfig:
    """Store and sweep configuration."""

    sweep_interval_seconds: float = 1.0
    background_sweep: bool = True
    sweeper_thread_name: str = "ttlkv-sweeper"

    def __post_init__(self) -> None:
        interval = self.sweep_interval_seconds
        if (
            isinstance(interval, bool)
            or not isinstance(interval, (int, float))
            or not math.isfinite(interval)
            or interval <= 0
        ):
            raise ValidationError(
                f"sweep_interval_seconds must be a positive number, got {interval!r}",
                field="sweep_interval_seconds",
            )
        if not self.sweeper_thread_name:
            raise ValidationError(
                "sweeper_thread_name must not be empty",
                field="sweeper_thread_name",
            )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> StoreConfig:
        """Build a config from environment variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        defaults = cls()

        interval_raw = env.get("TTLKV_SWEEP_INTERVAL_SECONDS", "")
        background_raw = env.get("TTLKV_BACKGROUND_SWEEP", "")
        thread_name = env.get("TTLKV_SWEEPER_THREAD_NAME", "") or defaults.sweeper_thread_name

        return cls(
            sweep_interval_seconds=(
                _parse_float(interval_raw, "sweep_interval_seconds")
                if interval_raw
                else defaults.sweep_interval_seconds
            ),
            background_sweep=(
                _parse_bool(background_raw, "background_sweep")
                if background_raw
                else defaults.background_sweep
            ),
            sweeper_thread_name=thread_name,
        )


DEFAULT_CONFIG = StoreConfig()
