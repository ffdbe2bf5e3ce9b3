from datetime import datetime, timedelta

from parking_tracker import crud

T0 = datetime(2024, 3, 1, 12, 0)


def _data(**kwargs):
    data = {
        "title": "Place de parking",
        "address": "10 rue X, Angers",
        "neighborhood": "Autres",
        "price": 80,
        "first_published_at": T0,
        "last_seen_at": T0,
        "is_active": True,
        "repost_count": 0,
    }
    data.update(kwargs)
    return data


def test_insert_and_find(db):
    listing_id = crud.insert_listing(db, _data())
    obj = crud.find_listing(db, "Place de parking", "10 rue X, Angers", 80)
    assert obj is not None
    assert obj.id == listing_id
    assert crud.find_listing(db, "Place de parking", "10 rue X, Angers", 81) is None


def test_update_listing(db):
    listing_id = crud.insert_listing(db, _data())
    obj = crud.update_listing(db, listing_id, {"last_seen_at": T0 + timedelta(hours=2)})
    assert obj.last_seen_at == T0 + timedelta(hours=2)
    assert crud.update_listing(db, 999, {"is_active": False}) is None


def test_active_listings_older_than(db):
    old_id = crud.insert_listing(db, _data(title="Box", last_seen_at=T0 - timedelta(days=2)))
    crud.insert_listing(db, _data(title="Garage", last_seen_at=T0 - timedelta(days=3), is_active=False))
    crud.insert_listing(db, _data(title="Parking"))

    assert [l.id for l in crud.find_active_listings_older_than(db, T0 - timedelta(days=1))] == [old_id]


def test_open_and_close_period(db):
    listing_id = crud.insert_listing(db, _data())
    first = crud.open_period(db, listing_id, T0)
    crud.close_period(db, first, T0 + timedelta(days=2), 2)
    second = crud.open_period(db, listing_id, T0 + timedelta(days=5))

    assert crud.find_open_period(db, listing_id).id == second

    # closed periods are never rewritten
    crud.close_period(db, first, T0 + timedelta(days=9), 9)
    periods = crud.list_periods(db, listing_id)
    assert [(p.id, p.days_online) for p in periods] == [(first, 2), (second, None)]


def test_list_listings_filter_and_order(db):
    crud.insert_listing(db, _data(title="A", first_published_at=T0))
    crud.insert_listing(db, _data(title="B", first_published_at=T0 + timedelta(days=1), neighborhood="Doutre"))
    crud.insert_listing(db, _data(title="C", first_published_at=T0 + timedelta(days=2)))

    assert [l.title for l in crud.list_listings(db)] == ["C", "B", "A"]
    assert [l.title for l in crud.list_listings(db, neighborhood="Doutre")] == ["B"]


def test_import_logs_newest_first(db):
    crud.insert_import_log(db, {"import_date": T0, "announcements_found": 1})
    crud.insert_import_log(db, {"import_date": T0 + timedelta(hours=1), "announcements_found": 2})
    assert [l.announcements_found for l in crud.list_import_logs(db)] == [2, 1]
