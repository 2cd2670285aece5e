"""
Free-text search behind a swappable capability.

``OverfetchSearchIndex`` is the store-only fallback: it pulls a bounded
multiple of the requested page ordered by recency and filters it in memory.
Results are not relevance-ranked and anything beyond the over-fetched window
is never seen, so callers that need real search should plug in an indexed
backend implementing ``SearchIndex``.
"""

from abc import ABC, abstractmethod
from typing import List, Sequence

from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import DESCENDING


class SearchIndex(ABC):

    @abstractmethod
    async def search(self, term: str, limit: int) -> List[dict]:
        """Return up to ``limit`` raw documents matching ``term``"""


class OverfetchSearchIndex(SearchIndex):

    def __init__(
        self,
        collection: AsyncIOMotorCollection,
        fields: Sequence[str],
        order_field: str,
        overfetch_factor: int = 3
    ):
        self.collection = collection
        self.fields = tuple(fields)
        self.order_field = order_field
        self.overfetch_factor = overfetch_factor

    def matches(self, doc: dict, term_lower: str) -> bool:
        for field in self.fields:
            value = doc.get(field)
            if value and term_lower in str(value).lower():
                return True
        return False

    async def search(self, term: str, limit: int) -> List[dict]:
        term_lower = term.lower()
        window = limit * self.overfetch_factor

        cursor = self.collection.find({}).sort(self.order_field, DESCENDING).limit(window)
        docs = await cursor.to_list(length=window)

        return [doc for doc in docs if self.matches(doc, term_lower)][:limit]
