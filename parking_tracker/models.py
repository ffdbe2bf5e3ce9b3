# parking_tracker/models.py
"""SQLAlchemy ORM models for persisted entities.

Listings, their publication periods and the per-import audit log. Timestamps
are stored as naive UTC.
"""
from sqlalchemy import Column, Integer, Text, Boolean, TIMESTAMP, ForeignKey, func, Index
from sqlalchemy.orm import relationship
from .db import Base

class Listing(Base):
    __tablename__ = "parking_announcements"
    id = Column(Integer, primary_key=True, index=True)
    title = Column(Text, nullable=False)
    address = Column(Text, nullable=False)
    neighborhood = Column(Text, nullable=False)
    price = Column(Integer, nullable=False)
    first_published_at = Column(TIMESTAMP, nullable=False)
    last_seen_at = Column(TIMESTAMP, nullable=False)
    removed_at = Column(TIMESTAMP, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    repost_count = Column(Integer, nullable=False, default=0)
    total_days_online = Column(Integer, nullable=False, default=0)
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    periods = relationship(
        "PublicationPeriod",
        back_populates="listing",
        order_by="PublicationPeriod.published_at",
    )

class PublicationPeriod(Base):
    __tablename__ = "publication_periods"
    id = Column(Integer, primary_key=True, index=True)
    announcement_id = Column(Integer, ForeignKey("parking_announcements.id"), nullable=False, index=True)
    published_at = Column(TIMESTAMP, nullable=False)
    removed_at = Column(TIMESTAMP, nullable=True)
    days_online = Column(Integer, nullable=True)
    created_at = Column(TIMESTAMP, server_default=func.now())

    listing = relationship("Listing", back_populates="periods")

class ImportLog(Base):
    __tablename__ = "import_logs"
    id = Column(Integer, primary_key=True, index=True)
    import_date = Column(TIMESTAMP, nullable=False)
    announcements_found = Column(Integer, nullable=False, default=0)
    new_announcements = Column(Integer, nullable=False, default=0)
    updated_announcements = Column(Integer, nullable=False, default=0)
    html_content = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP, server_default=func.now())

Index("idx_listings_identity", Listing.title, Listing.address, Listing.price)
Index("idx_listings_active_last_seen", Listing.is_active, Listing.last_seen_at)
Index("idx_listings_first_published", Listing.first_published_at)
