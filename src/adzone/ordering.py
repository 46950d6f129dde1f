"""Ordering Store: one randomized, stable permutation per data load."""

from __future__ import annotations

import itertools
import logging
import random
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TypeVar

from adzone.models import Ad

logger = logging.getLogger(__name__)

T = TypeVar("T")

_load_ids = itertools.count(1)


def shuffle_items(items: Sequence[T], rng: random.Random | None = None) -> list[T]:
    """Return a uniformly random permutation of ``items``.

    Fisher-Yates over a copy; the input sequence is never mutated.
    """
    rand = rng or random
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = rand.randint(0, i)
        result[i], result[j] = result[j], result[i]
    return result


@dataclass(frozen=True, slots=True, eq=False)
class OrderedSet:
    """The permuted item set for one load.

    Compared by identity: every load produces a distinct object, so
    dependents can tell a genuine reshuffle from a re-render.
    """

    items: tuple[Ad, ...]
    load_id: int

    def __len__(self) -> int:
        return len(self.items)

    @classmethod
    def from_load(cls, items: Sequence[Ad], rng: random.Random | None = None) -> OrderedSet:
        """Shuffle a freshly loaded item list exactly once."""
        ordered = cls(items=tuple(shuffle_items(items, rng)), load_id=next(_load_ids))
        logger.debug("Ordered %d items for load %d", len(ordered.items), ordered.load_id)
        return ordered


EMPTY_ORDERED_SET = OrderedSet(items=(), load_id=0)


def matches_search(ad: Ad, term: str) -> bool:
    """Case-insensitive substring match on title or description."""
    needle = term.strip().lower()
    if not needle:
        return True
    return needle in ad.title.lower() or needle in (ad.description or "").lower()


def filter_view(ordered: OrderedSet, term: str) -> tuple[Ad, ...]:
    """Restrict the ordered set to matching items, preserving order."""
    if not term.strip():
        return ordered.items
    return tuple(ad for ad in ordered.items if matches_search(ad, term))


__all__ = [
    "EMPTY_ORDERED_SET",
    "OrderedSet",
    "filter_view",
    "matches_search",
    "shuffle_items",
]
