"""saferm - recoverable rm and retention sweeper for shared multi-user hosts."""

__version__ = "0.3.0"
