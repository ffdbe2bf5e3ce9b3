from datetime import datetime, timedelta
from itertools import permutations
from types import SimpleNamespace
from typing import Optional

from parking_tracker.neighborhoods import Neighborhood
from parking_tracker.parser import ParsedCandidate
from parking_tracker.reconcile import (
    ListingExpiration,
    ListingRepost,
    ListingUpdate,
    reconcile,
    whole_days,
)

NOW = datetime(2024, 5, 10, 12, 0)
DAY = timedelta(days=1)


class FakeSnapshot:
    def __init__(self, *listings) -> None:
        self.listings = list(listings)
        self.lookups = 0

    def find_listing(self, title: str, address: str, price: int) -> Optional[SimpleNamespace]:
        self.lookups += 1
        for listing in self.listings:
            if (listing.title, listing.address, listing.price) == (title, address, price):
                return listing
        return None

    def find_active_listings_older_than(self, cutoff: datetime):
        return [l for l in self.listings if l.is_active and l.last_seen_at < cutoff]


def _listing(id, title, address="Angers", price=50, *, is_active=True, last_seen_at=NOW - timedelta(hours=2), repost_count=0):
    return SimpleNamespace(
        id=id,
        title=title,
        address=address,
        price=price,
        is_active=is_active,
        last_seen_at=last_seen_at,
        repost_count=repost_count,
    )


def _candidate(title, address="Angers", price=50):
    return ParsedCandidate(title, address, Neighborhood.OTHER, price)


def test_unknown_candidate_is_created():
    result = reconcile([_candidate("Box")], FakeSnapshot(), NOW)

    assert [c.candidate.title for c in result.creates] == ["Box"]
    assert result.creates[0].first_published_at == NOW
    assert result.new_count == 1
    assert result.updated_count == 0


def test_active_match_only_touches_last_seen():
    snapshot = FakeSnapshot(_listing(1, "Box"))
    result = reconcile([_candidate("Box")], snapshot, NOW)

    assert result.updates == [ListingUpdate(listing_id=1, last_seen_at=NOW)]
    assert result.creates == [] and result.reposts == []
    assert result.updated_count == 1


def test_inactive_match_is_a_repost():
    snapshot = FakeSnapshot(_listing(7, "Garage", is_active=False, repost_count=2, last_seen_at=NOW - 10 * DAY))
    result = reconcile([_candidate("Garage")], snapshot, NOW)

    assert result.reposts == [ListingRepost(listing_id=7, last_seen_at=NOW, repost_count=3)]
    assert result.updated_count == 1
    assert result.expirations == []


def test_lookup_key_is_exact():
    snapshot = FakeSnapshot(_listing(1, "Box", price=50))
    result = reconcile([_candidate("box"), _candidate("Box", price=55)], snapshot, NOW)

    assert result.new_count == 2
    assert result.updates == []


def test_stale_unmatched_listing_expires():
    stale = _listing(3, "Parking", last_seen_at=NOW - timedelta(hours=25))
    fresh = _listing(4, "Box", last_seen_at=NOW - timedelta(hours=23))
    result = reconcile([_candidate("Autre place")], FakeSnapshot(stale, fresh), NOW, timedelta(hours=24))

    assert result.expirations == [ListingExpiration(listing_id=3, removed_at=NOW)]


def test_matched_listing_is_never_expired():
    old = _listing(3, "Parking", last_seen_at=NOW - 5 * DAY)
    result = reconcile([_candidate("Parking")], FakeSnapshot(old), NOW)

    assert [u.listing_id for u in result.updates] == [3]
    assert result.expirations == []


def test_inactive_listing_is_not_expired_again():
    gone = _listing(3, "Parking", is_active=False, last_seen_at=NOW - 5 * DAY)
    result = reconcile([_candidate("Box")], FakeSnapshot(gone), NOW)
    assert result.expirations == []


def test_same_key_twice_in_a_cycle_is_decided_once():
    snapshot = FakeSnapshot(_listing(1, "Box", is_active=False, repost_count=0))
    result = reconcile([_candidate("Box"), _candidate("Box"), _candidate("New"), _candidate("New")], snapshot, NOW)

    assert len(result.reposts) == 1
    assert result.reposts[0].repost_count == 1
    assert result.new_count == 1


def test_decisions_do_not_depend_on_candidate_order():
    listings = [
        _listing(1, "Box"),
        _listing(2, "Garage", is_active=False, repost_count=1),
        _listing(3, "Parking", last_seen_at=NOW - 3 * DAY),
    ]
    candidates = [_candidate("Box"), _candidate("Garage"), _candidate("Place neuve")]

    outcomes = set()
    for order in permutations(candidates):
        result = reconcile(list(order), FakeSnapshot(*listings), NOW)
        outcomes.add((
            frozenset(c.candidate for c in result.creates),
            frozenset(result.updates),
            frozenset(result.reposts),
            frozenset(result.expirations),
        ))
    assert len(outcomes) == 1


def test_reconcile_only_reads_the_snapshot():
    snapshot = FakeSnapshot(_listing(1, "Box", is_active=False))
    reconcile([_candidate("Box")], snapshot, NOW)

    listing = snapshot.listings[0]
    assert listing.is_active is False
    assert listing.repost_count == 0
    assert snapshot.lookups == 1


def test_whole_days():
    start = datetime(2024, 1, 1, 12, 0)
    assert whole_days(start, start + timedelta(hours=23)) == 0
    assert whole_days(start, start + timedelta(days=2, hours=5)) == 2
    assert whole_days(start, start - timedelta(days=1)) == 0
    assert whole_days(start, None) == 0
