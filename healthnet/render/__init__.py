from .console import ConsoleRenderer, format_duration, format_snapshot, format_unavailable

__all__ = [
    "ConsoleRenderer",
    "format_duration",
    "format_snapshot",
    "format_unavailable",
]
