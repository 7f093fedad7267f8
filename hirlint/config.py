"""
hirlint/config.py
═════════════════

Lint configuration: ``hirlint.toml`` discovery, parsing and validation.

Example
───────
    # hirlint.toml
    large-data-size-min-limit = 32
    allow = ["atomic_ordering"]

Only the size limit changes what a check computes; ``allow`` feeds the
suppression manager.

License: MIT — same as hirlint.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Annotated, Any, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError

from hirlint.errors import ConfigError
from hirlint.oracle import TargetInfo

_log = logging.getLogger(__name__)

CONFIG_FILENAME = "hirlint.toml"
CONFIG_ENV_VAR = "HIRLINT_CONFIG"

SIZE_LIMIT_KEY = "large-data-size-min-limit"
ALLOW_KEY = "allow"

# bool is an int subclass; strict keeps `true` and `16.0` out
SizeLimit = Annotated[StrictInt, Field(ge=0)]


class LintConfig(BaseModel):
    """
    Validated lint options.

    Attributes
    ----------
    large_data_size_min_limit : byte threshold override, or None for the
                                target-derived default
    allow                     : lint ids suppressed for the whole run
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    large_data_size_min_limit: Optional[SizeLimit] = Field(default=None, alias=SIZE_LIMIT_KEY)
    allow: Tuple[StrictStr, ...] = ()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], source: Optional[Path] = None) -> LintConfig:
        """Validate a parsed ``hirlint.toml`` table, naming *source* on failure."""
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(_describe(exc), source) from exc

    def with_overrides(
        self,
        large_data_size_min_limit: Optional[int] = None,
        allow: Tuple[str, ...] = (),
    ) -> LintConfig:
        """Layer command-line values on top of file values."""
        data = self.model_dump(by_alias=True)
        if large_data_size_min_limit is not None:
            data[SIZE_LIMIT_KEY] = large_data_size_min_limit
        if allow:
            data[ALLOW_KEY] = self.allow + tuple(a for a in allow if a not in self.allow)
        return LintConfig.from_mapping(data)

    def size_limit(self, target: TargetInfo) -> int:
        """The active byte threshold for ``large_data_pass_by_val``."""
        if self.large_data_size_min_limit is not None:
            return self.large_data_size_min_limit
        return default_size_limit(target)


def default_size_limit(target: TargetInfo) -> int:
    """Twice the native word size."""
    return target.pointer_bytes * 2


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "<root>"
        parts.append(f"`{loc}`: {err['msg']}")
    return "; ".join(parts)


# ═════════════════════════════════════════════════════════════════════════
#  DISCOVERY / LOADING
# ═════════════════════════════════════════════════════════════════════════

def find_config(start: Optional[Path] = None) -> Optional[Path]:
    """Walk up from *start* (default: cwd) looking for hirlint.toml.

    ``HIRLINT_CONFIG`` takes precedence over the walk.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        if p.is_file():
            return p
        _log.warning("%s points at %s, which is not a file", CONFIG_ENV_VAR, p)
        return None

    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


def load_config(path: Optional[Path] = None, cwd: Optional[Path] = None) -> LintConfig:
    """
    Read, parse and validate ``hirlint.toml``.

    Without *path* the file is discovered from *cwd*; when none exists
    the defaults apply.  Every failure surfaces as ``ConfigError``.
    """
    if path is None:
        path = find_config(cwd)

    if path is None:
        return LintConfig()

    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"cannot read configuration: {exc}", path) from exc
    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"invalid TOML: {exc}", path) from exc

    _log.debug("loaded configuration from %s", path)
    return LintConfig.from_mapping(data, source=path)


__all__ = [
    "CONFIG_FILENAME",
    "CONFIG_ENV_VAR",
    "SIZE_LIMIT_KEY",
    "ALLOW_KEY",
    "LintConfig",
    "default_size_limit",
    "find_config",
    "load_config",
]
