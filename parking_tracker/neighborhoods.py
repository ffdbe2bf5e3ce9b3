# parking_tracker/neighborhoods.py
"""Keyword-based neighborhood detection for Angers addresses."""
from enum import Enum


class Neighborhood(str, Enum):
    CENTRE_VILLE = "Centre-ville"
    LA_FAYETTE = "La Fayette"
    LAC_DE_MAINE = "Lac-de-Maine"
    BELLE_BEILLE = "Belle-Beille"
    MONPLAISIR = "Monplaisir"
    JUSTICES = "Justices"
    DOUTRE = "Doutre"
    HAUTS_DE_CHAISES = "Hauts-de-Chaises"
    ROSERAIE = "Roseraie"
    GRAND_PIGEON = "Grand-Pigeon"
    OTHER = "Autres"


# Ordered: the first keyword contained in the address wins.
NEIGHBORHOOD_KEYWORDS = (
    ("centre-ville", Neighborhood.CENTRE_VILLE),
    ("centre ville", Neighborhood.CENTRE_VILLE),
    ("centre", Neighborhood.CENTRE_VILLE),
    ("lafayette", Neighborhood.LA_FAYETTE),
    ("la fayette", Neighborhood.LA_FAYETTE),
    ("lac de maine", Neighborhood.LAC_DE_MAINE),
    ("lac-de-maine", Neighborhood.LAC_DE_MAINE),
    ("belle-beille", Neighborhood.BELLE_BEILLE),
    ("belle beille", Neighborhood.BELLE_BEILLE),
    ("bellebeille", Neighborhood.BELLE_BEILLE),
    ("monplaisir", Neighborhood.MONPLAISIR),
    ("justices", Neighborhood.JUSTICES),
    ("doutre", Neighborhood.DOUTRE),
    ("hauts-de-chaises", Neighborhood.HAUTS_DE_CHAISES),
    ("hauts de chaises", Neighborhood.HAUTS_DE_CHAISES),
    ("roseraie", Neighborhood.ROSERAIE),
    ("grand-pigeon", Neighborhood.GRAND_PIGEON),
    ("grand pigeon", Neighborhood.GRAND_PIGEON),
)


def classify(address: str) -> Neighborhood:
    """Return the neighborhood of an address, or ``Neighborhood.OTHER``."""
    normalized = (address or "").lower()
    for keyword, neighborhood in NEIGHBORHOOD_KEYWORDS:
        if keyword in normalized:
            return neighborhood
    return Neighborhood.OTHER
