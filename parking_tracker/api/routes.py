# parking_tracker/api/routes.py
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import Dict, List
from .. import crud, schemas, services
from ..db import get_db
from ..neighborhoods import Neighborhood
from ..utils import logger

router = APIRouter()

def _listing_out(obj, schema=schemas.ListingOut):
    out = schema.model_validate(obj)
    out.days_online = services.listing_days_online(obj)
    return out

@router.get("/health")
def health():
    return {"status": "ok"}

@router.get("/listings", response_model=List[schemas.ListingOut])
def listings(
    neighborhood: Neighborhood | None = Query(None),
    db: Session = Depends(get_db)
):
    items = crud.list_listings(db, neighborhood=neighborhood.value if neighborhood else None)
    return [_listing_out(obj) for obj in items]


@router.get("/listings/grouped", response_model=Dict[str, List[schemas.ListingOut]])
def listings_grouped(
    neighborhood: Neighborhood | None = Query(None),
    db: Session = Depends(get_db)
):
    items = crud.list_listings(db, neighborhood=neighborhood.value if neighborhood else None)
    groups = services.group_by_neighborhood(items)
    return {name: [_listing_out(obj) for obj in group] for name, group in groups.items()}


@router.get("/listings/{listing_id}", response_model=schemas.ListingDetail)
def get_listing(listing_id: int, db: Session = Depends(get_db)):
    obj = crud.get_listing(db, listing_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Listing not found")
    return _listing_out(obj, schemas.ListingDetail)


@router.get("/stats", response_model=schemas.StatsOut)
def stats(db: Session = Depends(get_db)):
    return services.listing_stats(crud.list_listings(db))


@router.get("/imports", response_model=List[schemas.ImportLogOut])
def imports(limit: int = Query(20, ge=1, le=200), db: Session = Depends(get_db)):
    return crud.list_import_logs(db, limit=limit)


@router.post("/imports", response_model=schemas.ImportSummaryOut)
def run_import(payload: schemas.ImportRequest, db: Session = Depends(get_db)):
    if not payload.markup.strip():
        raise HTTPException(status_code=400, detail="Empty markup")
    try:
        summary = services.ingest_snapshot(crud.ListingStore(db), payload.markup)
    except SQLAlchemyError as e:
        logger.exception("Import failed: %s", e)
        raise HTTPException(status_code=500, detail="Import failed")
    return schemas.ImportSummaryOut(
        found=summary.found,
        new_count=summary.new_count,
        updated_count=summary.updated_count,
        expired_count=summary.expired_count,
        strategy=summary.strategy,
        skipped=summary.skipped,
        nothing_found=summary.nothing_found,
    )
