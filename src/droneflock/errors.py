from __future__ import annotations


class ConfigError(ValueError):
    """Raised when a configuration violates a precondition of the simulation."""
