"""
MongoDB access.

The client is created lazily from settings; pymongo does not connect until
the first operation, so importing this module never touches the network.
"""

from functools import lru_cache
from typing import Any, Dict

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from config import Settings

USER_COLLECTION = "user"
PRODUCT_COLLECTION = "product"
ORDER_COLLECTION = "order"


@lru_cache
def get_client(database_url: str) -> MongoClient:
    return MongoClient(database_url, serverSelectionTimeoutMS=5000, tz_aware=True, connect=False)


def get_database(settings: Settings) -> Database:
    return get_client(settings.database_url)[settings.database_name]


def ping(db: Database) -> Dict[str, Any]:
    status = {"database": db.name, "connection_status": "Not Connected", "collections": []}
    try:
        db.client.admin.command("ping")
        status["connection_status"] = "Connected"
        status["collections"] = db.list_collection_names()[:10]
    except PyMongoError as e:
        status["error"] = str(e)[:80]
    return status
