"""
hirlint/errors.py
═════════════════

Exception hierarchy for the ambient layers of hirlint.

The lint checks themselves never raise: anything they cannot decide is
treated as "not a match".  Only configuration loading and dump loading
report failures, through the classes below.

  HirlintError (base)
  ├── ConfigError   - invalid or unreadable hirlint.toml / CLI options
  └── DumpError     - malformed HIR dump

License: MIT — same as hirlint.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class HirlintError(Exception):
    """Base class for every error raised by hirlint."""

    def __init__(self, message: str, source: Optional[Union[str, Path]] = None) -> None:
        self.message = message
        self.source = str(source) if source is not None else None
        super().__init__(self.__str__())

    def __str__(self) -> str:
        if self.source:
            return f"{self.source}: {self.message}"
        return self.message


class ConfigError(HirlintError):
    """Raised for unknown keys or invalid values in the lint configuration."""


class DumpError(HirlintError):
    """Raised when a HIR dump cannot be decoded into a crate."""


__all__ = [
    "HirlintError",
    "ConfigError",
    "DumpError",
]
