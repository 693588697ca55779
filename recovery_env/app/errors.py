"""
Load-time failures for environment configuration.

Every failure is fatal for the caller: a configuration is either valid or
the provisioning run must abort before any resource is touched. Errors are
never retried and never recovered locally.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence


@dataclass(frozen=True)
class ConfigProblem:
    """A single validation problem found while loading a configuration."""

    field: str
    kind: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class ConfigLoadError(RuntimeError):
    """Base class for configuration load failures."""

    def __init__(
        self,
        message: str,
        *,
        field: str = "",
        problems: Optional[Sequence[ConfigProblem]] = None,
    ) -> None:
        super().__init__(message)
        self.field = field
        self.problems: List[ConfigProblem] = list(problems or [])


class MissingFieldError(ConfigLoadError):
    """Raised when a required field is absent."""


class MalformedValueError(ConfigLoadError):
    """Raised when a field fails its format constraint."""


class EmptyListError(ConfigLoadError):
    """Raised when signer_configs is empty."""


class ConfigSyntaxError(MalformedValueError):
    """Raised when the configuration text itself cannot be parsed."""


class UnsupportedFormatError(MalformedValueError):
    """Raised when a configuration file has an unknown suffix."""
