# parking_tracker/crud.py
"""Storage operations for listings, publication periods and import logs.

Plain functions taking a ``Session`` plus ``ListingStore``, which bundles
them behind the interface the ingestion cycle works against. Each write
commits on its own; a failing cycle keeps whatever was already written.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from .models import ImportLog, Listing, PublicationPeriod

def find_listing(db: Session, title: str, address: str, price: int) -> Optional[Listing]:
    return (
        db.query(Listing)
        .filter(Listing.title == title, Listing.address == address, Listing.price == price)
        .order_by(Listing.id)
        .first()
    )

def get_listing(db: Session, listing_id: int) -> Optional[Listing]:
    return db.query(Listing).filter(Listing.id == listing_id).first()

def insert_listing(db: Session, data: Dict[str, Any]) -> int:
    obj = Listing(**data)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj.id

def update_listing(db: Session, listing_id: int, updates: Dict[str, Any]) -> Optional[Listing]:
    obj = get_listing(db, listing_id)
    if not obj:
        return None
    for k, v in updates.items():
        setattr(obj, k, v)
    db.commit()
    db.refresh(obj)
    return obj

def find_active_listings_older_than(db: Session, cutoff: datetime) -> List[Listing]:
    return (
        db.query(Listing)
        .filter(Listing.is_active.is_(True), Listing.last_seen_at < cutoff)
        .order_by(Listing.id)
        .all()
    )

def open_period(db: Session, announcement_id: int, published_at: datetime) -> int:
    period = PublicationPeriod(announcement_id=announcement_id, published_at=published_at)
    db.add(period)
    db.commit()
    db.refresh(period)
    return period.id

def find_open_period(db: Session, announcement_id: int) -> Optional[PublicationPeriod]:
    return (
        db.query(PublicationPeriod)
        .filter(PublicationPeriod.announcement_id == announcement_id, PublicationPeriod.removed_at.is_(None))
        .order_by(PublicationPeriod.published_at.desc(), PublicationPeriod.id.desc())
        .first()
    )

def close_period(db: Session, period_id: int, removed_at: datetime, days_online: int) -> None:
    period = db.query(PublicationPeriod).filter(PublicationPeriod.id == period_id).first()
    if period is None or period.removed_at is not None:
        return
    period.removed_at = removed_at
    period.days_online = days_online
    db.commit()

def list_periods(db: Session, announcement_id: int) -> List[PublicationPeriod]:
    return (
        db.query(PublicationPeriod)
        .filter(PublicationPeriod.announcement_id == announcement_id)
        .order_by(PublicationPeriod.published_at, PublicationPeriod.id)
        .all()
    )

def insert_import_log(db: Session, data: Dict[str, Any]) -> int:
    log = ImportLog(**data)
    db.add(log)
    db.commit()
    db.refresh(log)
    return log.id

def list_import_logs(db: Session, limit: int = 20) -> List[ImportLog]:
    return db.query(ImportLog).order_by(ImportLog.import_date.desc(), ImportLog.id.desc()).limit(limit).all()

def list_listings(db: Session, neighborhood: Optional[str] = None) -> List[Listing]:
    q = db.query(Listing)
    if neighborhood:
        q = q.filter(Listing.neighborhood == neighborhood)
    return q.order_by(Listing.first_published_at.desc(), Listing.id.desc()).all()


class ListingStore:
    """Session-bound storage used by the ingestion cycle."""

    def __init__(self, db: Session):
        self.db = db

    def find_listing(self, title: str, address: str, price: int) -> Optional[Listing]:
        return find_listing(self.db, title, address, price)

    def get_listing(self, listing_id: int) -> Optional[Listing]:
        return get_listing(self.db, listing_id)

    def insert_listing(self, data: Dict[str, Any]) -> int:
        return insert_listing(self.db, data)

    def update_listing(self, listing_id: int, updates: Dict[str, Any]) -> None:
        update_listing(self.db, listing_id, updates)

    def open_period(self, announcement_id: int, published_at: datetime) -> int:
        return open_period(self.db, announcement_id, published_at)

    def close_period(self, period_id: int, removed_at: datetime, days_online: int) -> None:
        close_period(self.db, period_id, removed_at, days_online)

    def find_open_period(self, announcement_id: int) -> Optional[PublicationPeriod]:
        return find_open_period(self.db, announcement_id)

    def find_active_listings_older_than(self, cutoff: datetime) -> List[Listing]:
        return find_active_listings_older_than(self.db, cutoff)

    def insert_import_log(self, data: Dict[str, Any]) -> int:
        return insert_import_log(self.db, data)
