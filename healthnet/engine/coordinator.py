from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Awaitable, Callable, Sequence

from healthnet.models import FailureReason, RequestOutcome
from healthnet.net.requester import Requester

logger = logging.getLogger(__name__)

OutcomeHandler = Callable[[RequestOutcome], Awaitable[None] | None]


class FanOutCoordinator:
    """Runs one Requester per address concurrently and collects every outcome.

    Requests feed a single queue (many producers, one consumer). Outcomes are
    handed to ``on_outcome`` and returned in arrival order, and the call
    returns only after exactly one outcome per address has arrived.
    """

    def __init__(
        self,
        requester: Requester,
        on_outcome: OutcomeHandler | None = None,
    ) -> None:
        self.requester = requester
        self.on_outcome = on_outcome

    async def dispatch(self, addresses: Sequence[str]) -> list[RequestOutcome]:
        queue: asyncio.Queue[RequestOutcome] = asyncio.Queue()
        tasks = [
            asyncio.create_task(self._produce(address, queue))
            for address in addresses
        ]
        logger.info("Dispatched %d request(s)", len(tasks))

        outcomes: list[RequestOutcome] = []
        while len(outcomes) < len(tasks):
            outcome = await queue.get()
            outcomes.append(outcome)
            await self._deliver(outcome)

        await asyncio.gather(*tasks)
        failed = sum(1 for o in outcomes if not o.ok)
        logger.info("Collected %d outcome(s), %d failed", len(outcomes), failed)
        return outcomes

    # ── internals ───────────────────────────────────────

    async def _produce(self, address: str, queue: asyncio.Queue[RequestOutcome]) -> None:
        try:
            outcome = await self.requester.request(address)
        except Exception as exc:
            logger.exception("Requester crashed for %s", address)
            outcome = RequestOutcome.failure(address, FailureReason.INTERNAL_ERROR, str(exc))
        queue.put_nowait(outcome)

    async def _deliver(self, outcome: RequestOutcome) -> None:
        if self.on_outcome is None:
            return
        try:
            result = self.on_outcome(outcome)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("Outcome handler failed for %s", outcome.address)
