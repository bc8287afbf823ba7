"""Location normalization module.

Static airport table with a Wikidata fallback, used by flight search.
"""

from .airports import CITY_TO_IATA
from .service import LocationCodeNormalizer
from .wikidata import FREEBASE_ID_PROPERTY, WikidataService

__all__ = [
    "CITY_TO_IATA",
    "LocationCodeNormalizer",
    "WikidataService",
    "FREEBASE_ID_PROPERTY",
]
