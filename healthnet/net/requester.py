from __future__ import annotations

import asyncio
import logging

from healthnet.models import FailureReason, RequestOutcome
from healthnet.wire.codec import DEFAULT_MAX_SIZE, DecodeError, read_snapshot

logger = logging.getLogger(__name__)


def parse_address(address: str) -> tuple[str, int]:
    """Split ``host:port`` (``[v6]:port`` also accepted) into its parts."""
    host, sep, port_str = address.strip().rpartition(":")
    if not sep or not host or not port_str.isdigit():
        raise ValueError(f"expected host:port, got {address!r}")
    port = int(port_str)
    if not 0 < port < 65536:
        raise ValueError(f"port out of range in {address!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    return host, port


class Requester:
    """Fetches one snapshot from one address.

    Every failure is reported as a failed RequestOutcome; nothing raises.
    """

    def __init__(
        self,
        dial_timeout: float = 5.0,
        read_timeout: float = 10.0,
        max_payload_bytes: int = DEFAULT_MAX_SIZE,
    ) -> None:
        self.dial_timeout = dial_timeout
        self.read_timeout = read_timeout
        self.max_payload_bytes = max_payload_bytes

    async def request(self, address: str) -> RequestOutcome:
        try:
            host, port = parse_address(address)
        except ValueError as exc:
            return self._failed(address, FailureReason.INVALID_ADDRESS, exc)

        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_connection(host, port), timeout=self.dial_timeout
            )
        except asyncio.TimeoutError:
            return self._failed(
                address, FailureReason.TIMEOUT, f"dial timed out after {self.dial_timeout}s"
            )
        except OSError as exc:
            return self._failed(address, FailureReason.DIAL_FAILED, exc)

        try:
            info = await asyncio.wait_for(
                read_snapshot(reader, self.max_payload_bytes), timeout=self.read_timeout
            )
        except asyncio.TimeoutError:
            return self._failed(
                address, FailureReason.TIMEOUT, f"read timed out after {self.read_timeout}s"
            )
        except DecodeError as exc:
            return self._failed(address, FailureReason.DECODE_FAILED, exc)
        except OSError as exc:
            return self._failed(address, FailureReason.TRANSPORT_ERROR, exc)
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError:
                pass

        logger.debug("Received snapshot of %s from %s", info.hostname, address)
        return RequestOutcome.success(address, info)

    @staticmethod
    def _failed(address: str, reason: FailureReason, detail: object) -> RequestOutcome:
        logger.warning("Request to %s failed (%s): %s", address, reason.value, detail)
        return RequestOutcome.failure(address, reason, str(detail))
