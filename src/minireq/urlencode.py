"""Key/value URL encoding."""

from __future__ import annotations

from typing import Sequence

from .errors import AllocationFailure, MalformedInput
from .transport import Transport


def build_query(pairs: Sequence[str]) -> str:
    """Join a flat key/value list into an unescaped query string.

    Examples:
        ["a", "1", "b", "2"] -> a=1&b=2
        [] -> ""

    Args:
        pairs: Keys each followed immediately by their value

    Raises:
        MalformedInput: ``pairs`` has an odd number of elements
    """
    if len(pairs) % 2 != 0:
        raise MalformedInput(
            f"expected key/value pairs, got {len(pairs)} elements"
        )

    try:
        return "&".join(
            f"{pairs[i]}={pairs[i + 1]}" for i in range(0, len(pairs), 2)
        )
    except MemoryError as e:
        raise AllocationFailure("cannot build query string") from e


def url_encode(pairs: Sequence[str], transport: Transport) -> str:
    """Build the query string for ``pairs`` and percent-encode it as a whole.

    The percent-encoding is delegated to ``transport``; with the shipped
    transport the ``=`` and ``&`` separators are escaped as well.
    """
    query = build_query(pairs)
    try:
        return transport.percent_encode(query.encode("utf-8"))
    except MemoryError as e:
        raise AllocationFailure("cannot percent-encode query string") from e
