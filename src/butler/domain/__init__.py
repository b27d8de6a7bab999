"""Domain records — schemas, searchable-text serializers, data access."""

from butler.domain.access import DomainDataAccess, InMemoryDomainData
from butler.domain.schemas import ALL_DOMAINS, Domain, IndexableRecord
from butler.domain.serializers import to_searchable_text

__all__ = [
    "ALL_DOMAINS",
    "Domain",
    "DomainDataAccess",
    "InMemoryDomainData",
    "IndexableRecord",
    "to_searchable_text",
]
