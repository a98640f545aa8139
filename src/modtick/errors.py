from __future__ import annotations


class ModTickError(Exception):
    """Base class for errors raised by modtick."""


class ConfigError(ModTickError, ValueError):
    """A rate, segment, or plan was configured with unusable values."""


class PlanConsumedError(ModTickError, RuntimeError):
    """An interval plan was used after it was converted into a stream."""
