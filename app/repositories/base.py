"""
Shared CRUD for collections whose documents map onto one pydantic model.

Used by the team dashboard collections (tasks, discussions). Projects and
users carry enough workflow-specific queries to have their own classes.
"""

from typing import Any, Dict, Generic, List, Optional, Tuple, Type, TypeVar

from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pydantic import BaseModel
from pymongo import ReturnDocument

T = TypeVar("T", bound=BaseModel)


class BaseRepository(Generic[T]):
    """
    Usage:
        class TaskRepository(BaseRepository[Task]):
            collection_name = "tasks"
            model_class = Task
    """

    collection_name: str
    model_class: Type[T]

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection: AsyncIOMotorCollection = db[self.collection_name]

    def _to_model(self, data: Optional[Dict[str, Any]]) -> Optional[T]:
        return self.model_class(**data) if data is not None else None

    async def get_by_id(self, id: str) -> Optional[T]:
        return self._to_model(await self.collection.find_one({"_id": id}))

    async def find_many(
        self,
        query: Dict[str, Any],
        skip: int = 0,
        limit: int = 100,
        sort: Optional[List[Tuple[str, int]]] = None,
    ) -> List[T]:
        cursor = self.collection.find(query)
        if sort:
            cursor = cursor.sort(sort)
        docs = await cursor.skip(skip).limit(limit).to_list(limit)
        return [self.model_class(**doc) for doc in docs]

    async def count(self, query: Optional[Dict[str, Any]] = None) -> int:
        return await self.collection.count_documents(query or {})

    async def create(self, model: T) -> T:
        await self.collection.insert_one(model.model_dump(by_alias=True))
        return model

    async def update(self, id: str, update_data: Dict[str, Any]) -> Optional[T]:
        """$set the given fields and return the stored document."""
        if update_data:
            await self.collection.update_one({"_id": id}, {"$set": update_data})
        return await self.get_by_id(id)

    async def find_one_and_update(
        self, query: Dict[str, Any], update_ops: Dict[str, Any]
    ) -> Optional[T]:
        """Conditional update. None when no document matched the query."""
        data = await self.collection.find_one_and_update(
            query, update_ops, return_document=ReturnDocument.AFTER
        )
        return self._to_model(data)

    async def delete(self, id: str) -> bool:
        result = await self.collection.delete_one({"_id": id})
        return result.deleted_count > 0

    async def delete_many(self, query: Dict[str, Any]) -> int:
        result = await self.collection.delete_many(query)
        return result.deleted_count

    async def aggregate(
        self, pipeline: List[Dict[str, Any]], limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        return await self.collection.aggregate(pipeline).to_list(limit)

    async def toggle_in_array(self, id: str, field: str, value: str) -> Tuple[bool, int]:
        """
        Add value to an array field, or remove it when already present.

        Returns (added, new_length). Each branch is one conditional update, so
        a repeated toggle by the same value always flips the state back.
        """
        removed = await self.collection.find_one_and_update(
            {"_id": id, field: value},
            {"$pull": {field: value}},
            projection={field: 1},
            return_document=ReturnDocument.AFTER,
        )
        if removed is not None:
            return False, len(removed.get(field, []))

        added = await self.collection.find_one_and_update(
            {"_id": id},
            {"$addToSet": {field: value}},
            projection={field: 1},
            return_document=ReturnDocument.AFTER,
        )
        if added is None:
            return False, 0
        return True, len(added.get(field, []))
