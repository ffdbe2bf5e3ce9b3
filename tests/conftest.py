import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from parking_tracker.db import Base
import parking_tracker.models  # noqa: F401


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


def card(title, location, price, extra=""):
    return (
        '<div data-qa-id="aditem_container">'
        f'<p data-qa-id="aditem_title">{title}</p>'
        f'<p data-qa-id="aditem_location">{location}</p>'
        f'<p data-qa-id="aditem_price">{price}</p>'
        f"{extra}"
        "</div>"
    )


def page(*cards):
    return "<html><body>" + "".join(cards) + "</body></html>"


@pytest.fixture
def two_ads_page():
    return page(
        card("Place de parking", "10 rue X, Angers", "80 €"),
        card("Garage box", "Belle-Beille, Angers", "120&nbsp;€"),
    )
