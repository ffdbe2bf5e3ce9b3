# parking_tracker/utils.py
"""Shared utilities: logging setup, clock and text helpers."""
import os
import re
import logging
from datetime import datetime, timezone
from dotenv import load_dotenv

load_dotenv()

def get_logger(name=__name__):
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        level=getattr(logging, level, logging.INFO)
    )
    return logging.getLogger(name)

logger = get_logger("parking-tracker")

def utcnow() -> datetime:
    # naive UTC so values compare the same after a SQLite or Postgres round-trip
    return datetime.now(timezone.utc).replace(tzinfo=None)

def clean_text(text: str) -> str:
    if not text:
        return ""
    return re.sub(r"\s+", " ", text).strip()
