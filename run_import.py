import argparse
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env
load_dotenv()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Import a saved Leboncoin parking search page.")
    parser.add_argument("html_file", type=Path, help="HTML snapshot of the search results page")
    parser.add_argument("--staleness-hours", type=float, default=None,
                        help="hours without a sighting before an active listing is marked removed")
    args = parser.parse_args(argv)

    # Import after load_dotenv so the database URL from .env is picked up
    from parking_tracker.crud import ListingStore
    from parking_tracker.db import Base, SessionLocal, engine
    from parking_tracker.services import ingest_snapshot
    import parking_tracker.models  # noqa: F401

    markup = args.html_file.read_text(encoding="utf-8", errors="replace")
    window = timedelta(hours=args.staleness_hours) if args.staleness_hours is not None else None

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        summary = ingest_snapshot(ListingStore(db), markup, staleness_window=window)
    finally:
        db.close()

    if summary.nothing_found:
        print("No parking listing in Angers found in the supplied HTML.")
        return 1
    print(f"{summary.found} listings found. {summary.new_count} new, "
          f"{summary.updated_count} updated, {summary.expired_count} marked removed.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
