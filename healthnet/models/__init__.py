from .system_info import StorageInfo, SystemInfo
from .outcome import FailureReason, OutcomeStatus, RequestOutcome

__all__ = [
    "StorageInfo",
    "SystemInfo",
    "FailureReason",
    "OutcomeStatus",
    "RequestOutcome",
]
