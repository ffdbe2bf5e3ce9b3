# parking_tracker/reconcile.py
"""Decide what one import cycle does to the known listings.

``reconcile`` only reads: it looks every candidate up in the pre-cycle state
and returns decisions. Applying them is the caller's job, which keeps a
candidate from ever matching a listing created by another candidate of the
same cycle.

Per listing the lifecycle is a two-state machine::

    create            -> Active
    Active   x match  -> Active    (update)
    Inactive x match  -> Active    (repost, new publication period)
    Active   x stale  -> Inactive  (expire, period closed)
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional, Protocol, Sequence

from .parser import ParsedCandidate
from .utils import logger

DEFAULT_STALENESS_WINDOW = timedelta(days=1)


class ListingSnapshot(Protocol):
    """Read operations the engine needs from storage."""

    def find_listing(self, title: str, address: str, price: int):
        ...

    def find_active_listings_older_than(self, cutoff: datetime) -> Sequence:
        ...


@dataclass(frozen=True)
class ListingCreate:
    candidate: ParsedCandidate
    first_published_at: datetime


@dataclass(frozen=True)
class ListingUpdate:
    listing_id: int
    last_seen_at: datetime


@dataclass(frozen=True)
class ListingRepost:
    listing_id: int
    last_seen_at: datetime
    repost_count: int


@dataclass(frozen=True)
class ListingExpiration:
    listing_id: int
    removed_at: datetime


@dataclass
class ReconciliationResult:
    creates: List[ListingCreate] = field(default_factory=list)
    updates: List[ListingUpdate] = field(default_factory=list)
    reposts: List[ListingRepost] = field(default_factory=list)
    expirations: List[ListingExpiration] = field(default_factory=list)

    @property
    def new_count(self) -> int:
        return len(self.creates)

    @property
    def updated_count(self) -> int:
        return len(self.updates) + len(self.reposts)


def whole_days(start: datetime, end: Optional[datetime]) -> int:
    """Full days elapsed between two instants, never negative."""
    if start is None or end is None:
        return 0
    return max(0, (end - start).days)


def reconcile(
    candidates: Sequence[ParsedCandidate],
    existing: ListingSnapshot,
    now: datetime,
    staleness_window: timedelta = DEFAULT_STALENESS_WINDOW,
) -> ReconciliationResult:
    result = ReconciliationResult()
    touched = set()
    new_keys = set()

    for candidate in candidates:
        key = (candidate.title, candidate.address, candidate.price)
        listing = existing.find_listing(*key)

        if listing is None:
            if key in new_keys:
                logger.debug("Duplicate new candidate ignored: %s", candidate.title)
                continue
            new_keys.add(key)
            result.creates.append(ListingCreate(candidate=candidate, first_published_at=now))
            continue

        if listing.id in touched:
            logger.debug("Listing %s already matched this cycle", listing.id)
            continue
        touched.add(listing.id)

        if listing.is_active:
            result.updates.append(ListingUpdate(listing_id=listing.id, last_seen_at=now))
        else:
            result.reposts.append(ListingRepost(
                listing_id=listing.id,
                last_seen_at=now,
                repost_count=(listing.repost_count or 0) + 1,
            ))

    cutoff = now - staleness_window
    for listing in existing.find_active_listings_older_than(cutoff):
        if listing.id in touched:
            continue
        result.expirations.append(ListingExpiration(listing_id=listing.id, removed_at=now))

    return result
