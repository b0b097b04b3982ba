from __future__ import annotations

import logging
import re
from typing import Callable, Sequence

logger = logging.getLogger(__name__)

ALL_SERVERS = 0
PROMPT = "Enter the number of the server you want to request to: "

_INDEX_RE = re.compile(r"[0-9]+")


class SelectionError(ValueError):
    """The operator's selection is invalid and must be re-entered as a whole."""


def parse_selection(text: str, count: int) -> list[int]:
    """Parse a comma-separated list of 1-based indices into ``range(1, count + 1)``.

    Every token must be a number in ``[0, count]`` or the whole input is
    rejected. ``0`` selects every server once, in list order, whatever else
    was entered. Repeated indices are kept and each one is a separate request.
    """
    if count <= 0:
        raise SelectionError("no servers configured")

    indices: list[int] = []
    for token in (t.strip() for t in text.split(",")):
        if not _INDEX_RE.fullmatch(token):
            raise SelectionError(f"not a server number: {token!r}")
        index = int(token)
        if index > count:
            raise SelectionError(f"server {index} out of range 0..{count}")
        indices.append(index)

    if ALL_SERVERS in indices:
        return list(range(1, count + 1))
    return indices


def select_addresses(addresses: Sequence[str], text: str) -> list[str]:
    return [addresses[i - 1] for i in parse_selection(text, len(addresses))]


def menu_lines(addresses: Sequence[str]) -> list[str]:
    lines = ["Available servers:"]
    lines += [f"{i}. {address}" for i, address in enumerate(addresses, start=1)]
    lines.append(f"{ALL_SERVERS}. Request all servers")
    return lines


def prompt_selection(
    addresses: Sequence[str],
    input_fn: Callable[[str], str] | None = None,
    output_fn: Callable[[str], None] | None = None,
) -> list[str]:
    """Ask until a valid selection is entered. EOFError from ``input_fn`` propagates."""
    input_fn = input_fn or input
    output_fn = output_fn or print
    if not addresses:
        raise SelectionError("no servers configured")
    for line in menu_lines(addresses):
        output_fn(line)
    while True:
        text = input_fn(PROMPT)
        try:
            return select_addresses(addresses, text)
        except SelectionError as exc:
            logger.debug("Rejected selection %r: %s", text, exc)
            output_fn(f"Invalid input: {exc}")
