# File: infrastructure/database/mongodb/repository.py

from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from civiclens.common.exceptions.base_exception import ServiceUnavailableException
from civiclens.common.logging.logger import log_info, log_error


class MongoRepository:
    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str):
        self.db = db
        self.collection = db[collection_name]

    @staticmethod
    def _convert_to_objectid(value: Any) -> Any:
        if isinstance(value, str) and ObjectId.is_valid(value):
            return ObjectId(value)
        if isinstance(value, dict) and "$in" in value:
            return {**value, "$in": [MongoRepository._convert_to_objectid(v) for v in value["$in"]]}
        return value

    def _prepare_query(self, query: Dict[str, Any]) -> Dict[str, Any]:
        query = dict(query)
        if "_id" in query:
            query["_id"] = self._convert_to_objectid(query["_id"])
        return query

    @staticmethod
    def _stringify_id(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        if doc and "_id" in doc:
            doc["_id"] = str(doc["_id"])
        return doc

    async def insert_one(self, document: Dict[str, Any]) -> str:
        try:
            document = dict(document)
            if "_id" in document and isinstance(document["_id"], str):
                document["_id"] = self._convert_to_objectid(document["_id"])
            result = await self.collection.insert_one(document)
            inserted_id = str(result.inserted_id)
            log_info("Mongo insert_one", extra={"collection": self.collection.name, "id": inserted_id})
            return inserted_id
        except Exception as e:
            log_error("Mongo insert_one failed", extra={"collection": self.collection.name, "error": str(e)}, exc_info=True)
            raise ServiceUnavailableException("Failed to insert document: Internal DB error")

    async def find_one(self, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        try:
            query = self._prepare_query(query)
            result = self._stringify_id(await self.collection.find_one(query))
            log_info("Mongo find_one", extra={"collection": self.collection.name, "query": str(query), "found": bool(result)})
            return result
        except Exception as e:
            log_error("Mongo find_one failed", extra={"collection": self.collection.name, "error": str(e)}, exc_info=True)
            raise ServiceUnavailableException("Failed to find document: Internal DB error")

    async def update_one(self, query: Dict[str, Any], update: Dict[str, Any]) -> int:
        try:
            query = self._prepare_query(query)
            result = await self.collection.update_one(query, {"$set": update})
            log_info("Mongo update_one", extra={"collection": self.collection.name, "query": str(query), "modified": result.modified_count})
            return result.modified_count
        except Exception as e:
            log_error("Mongo update_one failed", extra={"collection": self.collection.name, "error": str(e)}, exc_info=True)
            raise ServiceUnavailableException("Failed to update document: Internal DB error")

    async def increment_one(self, query: Dict[str, Any], field: str, amount: int = 1,
                            set_fields: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        """Atomic `$inc` on a single document; returns the document after the update, or None if nothing matched."""
        try:
            query = self._prepare_query(query)
            update: Dict[str, Any] = {"$inc": {field: amount}}
            if set_fields:
                update["$set"] = set_fields
            result = await self.collection.find_one_and_update(query, update, return_document=ReturnDocument.AFTER)
            log_info("Mongo increment_one", extra={
                "collection": self.collection.name,
                "query": str(query),
                "field": field,
                "amount": amount,
                "matched": result is not None
            })
            return self._stringify_id(result)
        except Exception as e:
            log_error("Mongo increment_one failed", extra={"collection": self.collection.name, "error": str(e)}, exc_info=True)
            raise ServiceUnavailableException("Failed to update document: Internal DB error")

    async def find(self, query: Dict[str, Any], sort: Optional[List[Tuple[str, int]]] = None,
                   limit: Optional[int] = None) -> List[Dict[str, Any]]:
        try:
            query = self._prepare_query(query)
            cursor = self.collection.find(query)
            if sort:
                cursor = cursor.sort(sort)
            if limit:
                cursor = cursor.limit(limit)
            result = await cursor.to_list(length=limit)
            for doc in result:
                self._stringify_id(doc)
            log_info("Mongo find", extra={"collection": self.collection.name, "query": str(query), "count": len(result)})
            return result
        except Exception as e:
            log_error("Mongo find failed", extra={"collection": self.collection.name, "error": str(e)}, exc_info=True)
            raise ServiceUnavailableException("Failed to fetch documents: Internal DB error")

    async def find_with_pagination(self, query: Dict[str, Any], skip: int = 0, limit: int = 10, sort: Optional[List[Tuple[str, int]]] = None) -> List[Dict[str, Any]]:
        try:
            query = self._prepare_query(query)
            cursor = self.collection.find(query)
            if sort:
                cursor = cursor.sort(sort)
            cursor = cursor.skip(skip).limit(limit)
            result = await cursor.to_list(length=limit)
            for doc in result:
                self._stringify_id(doc)
            log_info("Mongo find_with_pagination", extra={"collection": self.collection.name, "query": str(query), "skip": skip, "limit": limit, "sort": sort, "count": len(result)})
            return result
        except Exception as e:
            log_error("Mongo find_with_pagination failed", extra={"collection": self.collection.name, "error": str(e)}, exc_info=True)
            raise ServiceUnavailableException("Failed to paginate documents: Internal DB error")

    async def count(self, query: Dict[str, Any]) -> int:
        try:
            query = self._prepare_query(query)
            return await self.collection.count_documents(query)
        except Exception as e:
            log_error("Mongo count failed", extra={"collection": self.collection.name, "error": str(e)}, exc_info=True)
            raise ServiceUnavailableException("Failed to count documents: Internal DB error")

    async def delete_one(self, query: Dict[str, Any]) -> int:
        try:
            query = self._prepare_query(query)
            result = await self.collection.delete_one(query)
            log_info("Mongo delete_one", extra={"collection": self.collection.name, "query": str(query), "deleted": result.deleted_count})
            return result.deleted_count
        except Exception as e:
            log_error("Mongo delete_one failed", extra={"collection": self.collection.name, "error": str(e)}, exc_info=True)
            raise ServiceUnavailableException("Failed to delete document: Internal DB error")

    async def delete_many(self, query: Dict[str, Any]) -> int:
        try:
            query = self._prepare_query(query)
            result = await self.collection.delete_many(query)
            log_info("Mongo delete_many", extra={"collection": self.collection.name, "query": str(query), "deleted": result.deleted_count})
            return result.deleted_count
        except Exception as e:
            log_error("Mongo delete_many failed", extra={"collection": self.collection.name, "error": str(e)}, exc_info=True)
            raise ServiceUnavailableException("Failed to delete documents: Internal DB error")

    async def create_index(self, keys: List[Tuple[str, int]], **kwargs) -> str:
        name = await self.collection.create_index(keys, **kwargs)
        log_info("Mongo create_index", extra={"collection": self.collection.name, "index": name})
        return name
