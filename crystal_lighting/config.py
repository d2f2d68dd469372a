"""Evaluator settings resolved from options and environment variables."""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass, replace
from typing import Optional


TIMEOUT_ENV_VAR = "CRYSTAL_LIGHTING_TIMEOUT"
MANUAL_TIMEOUT_ENV_VAR = "CRYSTAL_LIGHTING_MANUAL_TIMEOUT"
LOG_LEVEL_ENV_VAR = "CRYSTAL_LIGHTING_LOG_LEVEL"
SOLVER_TIME_LIMIT_ENV_VAR = "CRYSTAL_LIGHTING_SOLVER_TIME_LIMIT"

DEFAULT_TIMEOUT = 10.0
DEFAULT_MANUAL_TIMEOUT = 600.0
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_SOLVER_TIME_LIMIT = 5.0


@dataclass(frozen=True)
class EvaluatorConfig:
    """Everything one evaluation run needs to know.

    ``cell_size`` of 0 lets the window pick a size that fits the screen.
    """

    seed: int = 1
    command: Optional[str] = None
    vis: bool = True
    manual: bool = False
    cell_size: int = 0
    debug: bool = False
    plain: bool = False
    mark: bool = False
    show_rays: bool = False
    save: bool = False
    timeout: float = DEFAULT_TIMEOUT
    manual_timeout: float = DEFAULT_MANUAL_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL

    def normalised(self) -> "EvaluatorConfig":
        """Without a candidate the run is manual, and manual runs need a window."""

        manual = self.manual or self.command is None
        vis = self.vis or manual
        return replace(self, manual=manual, vis=vis)


def positive_float(name: str, value: object) -> float:
    """Parse ``value`` as a number of seconds; ``name`` labels the error."""

    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number, got {value!r}") from None
    if not 0 < number < math.inf:
        raise ValueError(f"{name} must be a positive number of seconds, got {value!r}")
    return number


def read_float(env_var: str, fallback: float) -> float:
    value = os.environ.get(env_var)
    if value is None or value == "":
        return fallback
    return positive_float(env_var, value)


def read_log_level(fallback: str = DEFAULT_LOG_LEVEL) -> str:
    value = os.environ.get(LOG_LEVEL_ENV_VAR) or fallback
    level = value.upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"{LOG_LEVEL_ENV_VAR} is not a logging level: {value!r}")
    return level


def resolve_config(**options: object) -> EvaluatorConfig:
    """Build a config from explicit options layered over the environment.

    Options set to ``None`` fall back to the environment, then to defaults.
    """

    settings = {key: value for key, value in options.items() if value is not None}
    for name in ("timeout", "manual_timeout"):
        if name in settings:
            settings[name] = positive_float(name, settings[name])
    settings.setdefault("timeout", read_float(TIMEOUT_ENV_VAR, DEFAULT_TIMEOUT))
    settings.setdefault(
        "manual_timeout", read_float(MANUAL_TIMEOUT_ENV_VAR, DEFAULT_MANUAL_TIMEOUT)
    )
    settings.setdefault("log_level", read_log_level())
    return EvaluatorConfig(**settings).normalised()  # type: ignore[arg-type]


def configure_logging(config: EvaluatorConfig) -> None:
    level = logging.DEBUG if config.debug else getattr(logging, config.log_level)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


__all__ = [
    "EvaluatorConfig",
    "LOG_LEVEL_ENV_VAR",
    "MANUAL_TIMEOUT_ENV_VAR",
    "SOLVER_TIME_LIMIT_ENV_VAR",
    "TIMEOUT_ENV_VAR",
    "configure_logging",
    "positive_float",
    "read_float",
    "read_log_level",
    "resolve_config",
]
