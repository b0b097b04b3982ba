from .base import BaseProbe
from .psutil_probe import PsutilProbe

__all__ = [
    "BaseProbe",
    "PsutilProbe",
]
