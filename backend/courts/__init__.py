from .client import CourtFinder, CourtsApiError, CourtsClient
from .query import CourtQuery
from .types import Court, CourtFindResult, FindParams, Judicial, parse_judicial_ids

__all__ = [
    "Court",
    "CourtFindResult",
    "CourtFinder",
    "CourtQuery",
    "CourtsApiError",
    "CourtsClient",
    "FindParams",
    "Judicial",
    "parse_judicial_ids",
]
