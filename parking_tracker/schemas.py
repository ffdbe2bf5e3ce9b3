# parking_tracker/schemas.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Optional
from datetime import datetime

class ListingBase(BaseModel):
    title: str
    address: str
    neighborhood: str
    price: int

class ListingOut(ListingBase):
    id: int
    first_published_at: datetime
    last_seen_at: datetime
    removed_at: Optional[datetime] = None
    is_active: bool
    repost_count: int
    total_days_online: int = 0
    days_online: int = 0
    model_config = ConfigDict(from_attributes=True)

class PeriodOut(BaseModel):
    id: int
    published_at: datetime
    removed_at: Optional[datetime] = None
    days_online: Optional[int] = None
    model_config = ConfigDict(from_attributes=True)

class ListingDetail(ListingOut):
    periods: List[PeriodOut] = []

class StatsOut(BaseModel):
    active_count: int
    total_count: int
    average_price: float
    by_neighborhood: Dict[str, int]

class ImportRequest(BaseModel):
    markup: str = Field(..., description="Raw HTML of a saved search page")

class ImportSummaryOut(BaseModel):
    found: int
    new_count: int
    updated_count: int
    expired_count: int
    strategy: str
    skipped: Dict[str, int]
    nothing_found: bool

class ImportLogOut(BaseModel):
    id: int
    import_date: datetime
    announcements_found: int
    new_announcements: int
    updated_announcements: int
    model_config = ConfigDict(from_attributes=True)
