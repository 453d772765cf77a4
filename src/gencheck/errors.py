"""Error taxonomy for generator construction and evaluation.

None of these are data errors: they signal a mis-configured generator or a
programming mistake, surface synchronously, and are never retried.
"""

from __future__ import annotations

from typing import Any


class GenCheckError(Exception):
    """Base class for all gencheck failures."""


class ConfigurationError(GenCheckError):
    """A generator cannot be built or run as configured.

    Raised for types that reach reflective synthesis without a usable
    structure, empty candidate sets, non-positive total weights and
    exhausted filters. ``type`` names the offending type when there is one.
    """

    def __init__(self, message: str, *, type: Any = None) -> None:
        super().__init__(message)
        self.type = type


class NotImplementedCapability(GenCheckError, NotImplementedError):
    """A spec was asked for a capability it does not provide (a co-generator)."""

    def __init__(self, message: str, *, type: Any = None, capability: str = "cogenerator") -> None:
        super().__init__(message)
        self.type = type
        self.capability = capability


class PreconditionError(GenCheckError, ValueError):
    """A combinator was called with arguments outside its domain."""
