"""
Base Repository

Thin adapter between one MongoDB collection and one pydantic entity.
Documents keep their identity in ``_id``; entities expose it as ``id``.
No business rules live here - services own those.
"""

import asyncio
import uuid
from typing import Generic, List, Optional, Sequence, Tuple, Type, TypeVar, Union

from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel
from pymongo.errors import DuplicateKeyError

from arena.exceptions import ConflictError
from arena.logger import get_logger

T = TypeVar("T", bound=BaseModel)

SortSpec = Union[str, Sequence[Tuple[str, int]]]

logger = get_logger(__name__)


class BaseRepository(Generic[T]):
    collection_name: str = ""
    model: Type[T]
    id_prefix: str = "DOC"
    duplicate_error: Type[ConflictError] = ConflictError

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db[self.collection_name]

    # ==================== MAPPING ====================

    def new_id(self) -> str:
        return f"{self.id_prefix}_{uuid.uuid4().hex[:12].upper()}"

    def to_entity(self, doc: dict) -> T:
        data = dict(doc)
        data["id"] = str(data.pop("_id"))
        return self.model.model_validate(data)

    def to_entities(self, docs: List[dict]) -> List[T]:
        return [self.to_entity(doc) for doc in docs]

    # ==================== CRUD ====================

    async def create(self, data: dict) -> T:
        """Insert under a generated identity"""
        return await self.create_with_id(self.new_id(), data)

    async def create_with_id(self, doc_id: str, data: dict) -> T:
        """Insert under a caller-supplied identity; an existing id is a conflict"""
        doc = {**data, "_id": doc_id}
        try:
            await self.collection.insert_one(doc)
        except DuplicateKeyError:
            raise self.duplicate_error(f"{self.model.__name__} {doc_id} already exists")
        return self.to_entity(doc)

    async def find_by_id(self, doc_id: str) -> Optional[T]:
        doc = await self.collection.find_one({"_id": doc_id})
        return self.to_entity(doc) if doc else None

    async def update(self, doc_id: str, data: dict) -> bool:
        """Returns False when no document has that id"""
        result = await self.collection.update_one({"_id": doc_id}, {"$set": data})
        return result.matched_count > 0

    async def delete(self, doc_id: str) -> bool:
        result = await self.collection.delete_one({"_id": doc_id})
        return result.deleted_count > 0

    async def find_all(self) -> List[T]:
        docs = await self.collection.find({}).to_list(length=None)
        return self.to_entities(docs)

    async def exists(self, doc_id: str) -> bool:
        doc = await self.collection.find_one({"_id": doc_id}, {"_id": 1})
        return doc is not None

    # ==================== QUERIES ====================

    async def query(
        self,
        filters: Optional[dict] = None,
        sort: Optional[SortSpec] = None,
        limit: Optional[int] = None,
        projection: Optional[dict] = None
    ) -> List[T]:
        docs = await self.query_raw(filters, sort, limit, projection)
        return self.to_entities(docs)

    async def query_raw(
        self,
        filters: Optional[dict] = None,
        sort: Optional[SortSpec] = None,
        limit: Optional[int] = None,
        projection: Optional[dict] = None
    ) -> List[dict]:
        cursor = self.collection.find(filters or {}, projection)
        if sort:
            cursor = cursor.sort(sort if isinstance(sort, str) else list(sort))
        if limit is not None:
            cursor = cursor.limit(limit)
        return await cursor.to_list(length=limit)

    async def count(self, filters: Optional[dict] = None) -> int:
        return await self.collection.count_documents(filters or {})

    # ==================== IDENTITY BATCHES ====================

    async def find_id_batch(self, ids: Sequence[str]) -> List[T]:
        """One "$in" round trip; callers keep len(ids) under the store ceiling"""
        docs = await self.collection.find({"_id": {"$in": list(ids)}}).to_list(length=len(ids))
        return self.to_entities(docs)

    async def find_by_ids(self, ids: Sequence[str], batch_size: int) -> List[T]:
        """
        Resolve many identities in chunks of at most ``batch_size``.
        Batches are independent, so they run concurrently; results are
        concatenated in batch order once all complete.
        """
        if batch_size < 1:
            raise ValueError("batch_size must be positive")

        id_list = list(ids)
        batches = [id_list[i:i + batch_size] for i in range(0, len(id_list), batch_size)]
        if not batches:
            return []

        logger.debug(
            "Resolving %d %s ids in %d batch(es)",
            len(id_list), self.collection_name, len(batches)
        )
        results = await asyncio.gather(*(self.find_id_batch(batch) for batch in batches))
        return [entity for batch in results for entity in batch]

