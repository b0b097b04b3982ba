from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from healthnet.models.system_info import SystemInfo


class OutcomeStatus(StrEnum):
    OK = "ok"
    FAILED = "failed"


class FailureReason(StrEnum):
    INVALID_ADDRESS = "invalid_address"
    DIAL_FAILED = "dial_failed"
    TIMEOUT = "timeout"
    TRANSPORT_ERROR = "transport_error"
    DECODE_FAILED = "decode_failed"
    INTERNAL_ERROR = "internal_error"


class RequestOutcome(BaseModel):
    """Result of one request, always paired with the address that produced it."""

    model_config = ConfigDict(frozen=True)

    address: str
    status: OutcomeStatus
    info: SystemInfo | None = None
    reason: FailureReason | None = None
    detail: str = ""

    @classmethod
    def success(cls, address: str, info: SystemInfo) -> RequestOutcome:
        return cls(address=address, status=OutcomeStatus.OK, info=info)

    @classmethod
    def failure(
        cls, address: str, reason: FailureReason, detail: str = ""
    ) -> RequestOutcome:
        return cls(
            address=address,
            status=OutcomeStatus.FAILED,
            reason=reason,
            detail=detail,
        )

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.OK
