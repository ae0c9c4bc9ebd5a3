from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from ._logging import LOG_LEVEL_ENV

MAX_DEPTH_ENV = "STENS_MAX_DEPTH"

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    """Verifier settings.

    max_depth optionally caps how many named types may be resolved inside
    one another before verification gives up and reports the stream as
    invalid.  None (the default) leaves nesting bounded only by the data.
    """

    max_depth: Optional[int] = None
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if self.max_depth is not None and self.max_depth < 1:
            raise ValueError("max_depth must be positive, got {}".format(self.max_depth))
        if self.log_level.upper() not in _LEVELS:
            raise ValueError("unknown log level {!r}".format(self.log_level))

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        raw_depth = env.get(MAX_DEPTH_ENV)
        try:
            max_depth = int(raw_depth) if raw_depth else None
        except ValueError:
            raise ValueError("{} must be an integer, got {!r}".format(
                MAX_DEPTH_ENV, raw_depth)) from None
        return cls(max_depth=max_depth, log_level=env.get(LOG_LEVEL_ENV, "WARNING"))
