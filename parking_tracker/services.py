# parking_tracker/services.py
"""Import cycle orchestration and read-side listing figures."""
import os
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from dotenv import load_dotenv

from .neighborhoods import Neighborhood
from .parser import extract_with_report
from .reconcile import reconcile, whole_days
from .utils import logger, utcnow

load_dotenv()

STALENESS_HOURS = float(os.getenv("STALENESS_HOURS", "24"))
IMPORT_LOG_MAX_CHARS = int(os.getenv("IMPORT_LOG_MAX_CHARS", "10000"))


@dataclass
class ImportSummary:
    found: int = 0
    new_count: int = 0
    updated_count: int = 0
    expired_count: int = 0
    strategy: str = "none"
    skipped: Dict[str, int] = field(default_factory=dict)

    @property
    def nothing_found(self) -> bool:
        return self.found == 0


def ingest_snapshot(
    store,
    markup: str,
    now: Optional[datetime] = None,
    staleness_window: Optional[timedelta] = None,
) -> ImportSummary:
    """Run one import cycle for a saved search page.

    Storage errors propagate to the caller; writes already made are kept.
    """
    now = now or utcnow()
    if staleness_window is None:
        staleness_window = timedelta(hours=STALENESS_HOURS)

    report = extract_with_report(markup)
    summary = ImportSummary(
        found=len(report.candidates),
        strategy=report.strategy,
        skipped=dict(report.skipped),
    )
    if summary.nothing_found:
        logger.info("No parking listing found in snapshot (skipped=%s)", summary.skipped)
        return summary

    result = reconcile(report.candidates, store, now, staleness_window)

    for create in result.creates:
        candidate = create.candidate
        listing_id = store.insert_listing({
            "title": candidate.title,
            "address": candidate.address,
            "neighborhood": candidate.neighborhood.value,
            "price": candidate.price,
            "first_published_at": create.first_published_at,
            "last_seen_at": create.first_published_at,
            "removed_at": None,
            "is_active": True,
            "repost_count": 0,
            "total_days_online": 0,
        })
        store.open_period(listing_id, create.first_published_at)

    for update in result.updates:
        store.update_listing(update.listing_id, {"last_seen_at": update.last_seen_at})

    for repost in result.reposts:
        store.update_listing(repost.listing_id, {
            "is_active": True,
            "last_seen_at": repost.last_seen_at,
            "removed_at": None,
            "repost_count": repost.repost_count,
        })
        store.open_period(repost.listing_id, repost.last_seen_at)
        logger.info("Listing %s reposted (%d reposts)", repost.listing_id, repost.repost_count)

    # sweep only once every match above has been written
    for expiration in result.expirations:
        expire_listing(store, expiration.listing_id, expiration.removed_at)

    summary.new_count = result.new_count
    summary.updated_count = result.updated_count
    summary.expired_count = len(result.expirations)

    store.insert_import_log({
        "import_date": now,
        "announcements_found": summary.found,
        "new_announcements": summary.new_count,
        "updated_announcements": summary.updated_count,
        "html_content": (markup or "")[:IMPORT_LOG_MAX_CHARS],
    })
    logger.info(
        "Import done via %s: %d found, %d new, %d updated, %d expired",
        summary.strategy, summary.found, summary.new_count, summary.updated_count, summary.expired_count,
    )
    return summary


def expire_listing(store, listing_id: int, removed_at: datetime) -> None:
    listing = store.get_listing(listing_id)
    days = 0
    period = store.find_open_period(listing_id)
    if period is not None:
        days = whole_days(period.published_at, removed_at)
        store.close_period(period.id, removed_at, days)
    store.update_listing(listing_id, {
        "is_active": False,
        "removed_at": removed_at,
        "total_days_online": (listing.total_days_online or 0) + days if listing else days,
    })
    logger.info("Listing %s expired after %d days online", listing_id, days)


def listing_days_online(listing) -> int:
    end = listing.last_seen_at if listing.is_active else (listing.removed_at or listing.last_seen_at)
    return whole_days(listing.first_published_at, end)


def listing_stats(listings: Iterable) -> dict:
    listings = list(listings)
    total = len(listings)
    by_neighborhood = {n.value: 0 for n in Neighborhood}
    for listing in listings:
        by_neighborhood[listing.neighborhood] = by_neighborhood.get(listing.neighborhood, 0) + 1
    return {
        "active_count": sum(1 for l in listings if l.is_active),
        "total_count": total,
        "average_price": round(sum(l.price for l in listings) / total, 2) if total else 0.0,
        "by_neighborhood": by_neighborhood,
    }


def group_by_neighborhood(listings: Iterable) -> "OrderedDict[str, List]":
    groups: Dict[str, List] = {}
    for listing in listings:
        groups.setdefault(listing.neighborhood, []).append(listing)
    ordered = OrderedDict()
    for neighborhood in Neighborhood:
        if neighborhood.value in groups:
            ordered[neighborhood.value] = sorted(
                groups.pop(neighborhood.value), key=lambda l: l.first_published_at, reverse=True
            )
    for name, items in groups.items():
        ordered[name] = sorted(items, key=lambda l: l.first_published_at, reverse=True)
    return ordered
