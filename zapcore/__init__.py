"""Structured, leveled logging core: levels, fields, encoders, entries, hooks and sampling."""

__version__ = "0.1.0"

__all__ = [
    "encoder",
    "entry",
    "error",
    "field",
    "hook",
    "increase_level",
    "json_encoder",
    "level",
    "marshaler",
    "memory_encoder",
    "sampler",
]