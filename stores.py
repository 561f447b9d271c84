"""
Document stores, one per collection.

Ids are bson ObjectIds. A malformed id never raises here: it simply matches
no document, so callers report it the same way as an unknown id.
"""

import copy
from threading import Lock
from typing import Any, Dict, List, Optional, Protocol

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.collection import Collection

Document = Dict[str, Any]


def parse_object_id(id_str: Any) -> Optional[ObjectId]:
    if isinstance(id_str, ObjectId):
        return id_str
    if not isinstance(id_str, str):
        return None
    try:
        return ObjectId(id_str)
    except (InvalidId, TypeError):
        return None


class DocumentStore(Protocol):
    def insert(self, doc: Document) -> Document: ...

    def get(self, id_str: str) -> Optional[Document]: ...

    def find_one(self, query: Document) -> Optional[Document]: ...

    def find_page(self, skip: int, limit: int) -> List[Document]: ...

    def count(self) -> int: ...

    def save(self, id_str: str, doc: Document) -> Optional[Document]: ...

    def delete(self, id_str: str) -> int: ...


class MongoStore:
    def __init__(self, collection: Collection):
        self._collection = collection

    @property
    def name(self) -> str:
        return self._collection.name

    def insert(self, doc: Document) -> Document:
        doc = dict(doc)
        inserted_id = self._collection.insert_one(doc).inserted_id
        doc["_id"] = inserted_id
        return doc

    def get(self, id_str: str) -> Optional[Document]:
        oid = parse_object_id(id_str)
        if oid is None:
            return None
        return self._collection.find_one({"_id": oid})

    def find_one(self, query: Document) -> Optional[Document]:
        return self._collection.find_one(query)

    def find_page(self, skip: int, limit: int) -> List[Document]:
        return list(self._collection.find({}).sort("_id", 1).skip(skip).limit(limit))

    def count(self) -> int:
        return self._collection.count_documents({})

    def save(self, id_str: str, doc: Document) -> Optional[Document]:
        oid = parse_object_id(id_str)
        if oid is None:
            return None
        body = {k: v for k, v in doc.items() if k != "_id"}
        res = self._collection.replace_one({"_id": oid}, body)
        if res.matched_count == 0:
            return None
        return {"_id": oid, **body}

    def delete(self, id_str: str) -> int:
        oid = parse_object_id(id_str)
        if oid is None:
            return 0
        return self._collection.delete_one({"_id": oid}).deleted_count


class InMemoryStore:
    """Dict-backed store with the same id semantics as MongoStore."""

    def __init__(self, name: str = "memory"):
        self.name = name
        self._lock = Lock()
        self._docs: Dict[ObjectId, Document] = {}

    def insert(self, doc: Document) -> Document:
        doc = copy.deepcopy(doc)
        doc["_id"] = ObjectId()
        with self._lock:
            self._docs[doc["_id"]] = doc
        return copy.deepcopy(doc)

    def get(self, id_str: str) -> Optional[Document]:
        oid = parse_object_id(id_str)
        if oid is None:
            return None
        with self._lock:
            doc = self._docs.get(oid)
        return copy.deepcopy(doc) if doc is not None else None

    def find_one(self, query: Document) -> Optional[Document]:
        with self._lock:
            for doc in self._docs.values():
                if all(doc.get(k) == v for k, v in query.items()):
                    return copy.deepcopy(doc)
        return None

    def find_page(self, skip: int, limit: int) -> List[Document]:
        with self._lock:
            docs = list(self._docs.values())[skip:skip + limit]
        return copy.deepcopy(docs)

    def count(self) -> int:
        with self._lock:
            return len(self._docs)

    def save(self, id_str: str, doc: Document) -> Optional[Document]:
        oid = parse_object_id(id_str)
        if oid is None:
            return None
        body = copy.deepcopy(doc)
        body["_id"] = oid
        with self._lock:
            if oid not in self._docs:
                return None
            self._docs[oid] = body
        return copy.deepcopy(body)

    def delete(self, id_str: str) -> int:
        oid = parse_object_id(id_str)
        if oid is None:
            return 0
        with self._lock:
            return 1 if self._docs.pop(oid, None) is not None else 0
