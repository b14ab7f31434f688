from .reconstructor import (
    reconstruct_sessions,
    build_pattern,
    PATTERN_SEPARATOR,
)

__all__ = [
    "reconstruct_sessions",
    "build_pattern",
    "PATTERN_SEPARATOR",
]
