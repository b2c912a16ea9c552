"""
Deterministic cache key derivation.

Keys follow the `entity:operation:identifier` convention. Identifiers
built from structured request data go through canonical_* helpers so that
logically identical inputs produce byte-identical keys regardless of
ordering or decimal formatting, then through digest() to bound key length.
"""
from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Iterable
import hashlib


class TtlClass(str, Enum):
    """Staleness tiers. Resolved to seconds by CacheConfig."""

    LONG = "long"      # rule / catalog snapshots
    MEDIUM = "medium"  # computed results


def canonical_decimal(value: Decimal | int | str) -> str:
    """Render a decimal without exponent or trailing zeros: 40.00 -> "40"."""
    d = Decimal(str(value))
    if d == 0:
        return "0"
    return format(d.normalize(), "f")


def canonical_pairs(pairs: Iterable[tuple[str, int]]) -> str:
    """Sort (id, quantity) pairs by id, merge duplicates, render `id:qty,...`."""
    merged: dict[str, int] = {}
    for item_id, qty in pairs:
        merged[str(item_id)] = merged.get(str(item_id), 0) + int(qty)
    return ",".join(f"{k}:{merged[k]}" for k in sorted(merged))


def digest(canonical: str, length: int = 32) -> str:
    """Stable SHA-256 digest of a canonical string."""
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:length]


@dataclass(frozen=True)
class KeyBuilder:
    """Prepends a deployment-wide prefix to every key and invalidation prefix."""

    prefix: str = ""

    def key(self, *parts: str) -> str:
        return self.prefix + ":".join(parts)

    def namespace(self, *parts: str) -> str:
        """Prefix covering every key under `parts` (always ends with ':')."""
        return self.prefix + ":".join(parts) + ":"
