"""Small helpers for id allocation, hashing and maps."""

from __future__ import annotations

import ipaddress
from collections.abc import Container, Mapping
from typing import Any, TypeVar

K = TypeVar("K")
V = TypeVar("V")

_UINT32_MASK = 0xFFFFFFFF


def get_next_id(mapping: Container[int], start: int, min_id: int, max_id: int) -> int:
    """Find the first id, from ``start`` and wrapping within ``[min_id, max_id]``,
    that is not in ``mapping``.

    Raises LookupError when every id in the range is taken.
    """
    for _ in range(min_id, max_id + 1):
        if start not in mapping:
            return start
        start = start + 1 if start < max_id else min_id
    raise LookupError(f"no free id in [{min_id}, {max_id}]")


def hash_string(s: str) -> int:
    """A 32-bit string hash seeded with 17 and multiplied by 31.

    Each step adds the UTF-8 byte offset of the next character.
    """
    value = 17
    offset = 0
    for ch in s:
        value = (value * 31 + offset) & _UINT32_MASK
        offset += len(ch.encode("utf-8", errors="surrogatepass"))
    return value


def difference(this_map: Mapping[K, V], other_map: Mapping[K, Any]) -> dict[K, V]:
    """Entries of ``this_map`` whose keys are not in ``other_map``."""
    return {k: v for k, v in this_map.items() if k not in other_map}


def get_ip(addr: Any) -> str:
    """Host part of a network address.

    Accepts socket address tuples, ``ipaddress`` objects or "host:port" strings.
    """
    if isinstance(addr, tuple):
        return str(addr[0])
    if isinstance(addr, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return str(addr)
    return str(addr).split(":")[0]