"""
Resource handlers for accounts, products and orders.

Every handler runs its store calls under `_store_call`, which lets typed
faults through and turns anything else into PersistenceError. Server-owned
fields (created_at, default role/status) are stamped here and never read
from the caller's payload.
"""

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple, Type

from bson import ObjectId
from pydantic import BaseModel

from errors import AppError, ConflictError, NotFoundError, PersistenceError, ValidationError
from logger import logger
from pagination import PageRequest
from responses import ResponseCode
from schemas import OrderOut, ProductOut, Role, UserOut
from security import CredentialVerifier
from stores import Document, DocumentStore

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ResourceService:
    label = "Record"
    not_found = ResponseCode.NOT_FOUND
    record_model: Type[BaseModel]

    def __init__(self, store: DocumentStore, clock: Clock = _utcnow):
        self._store = store
        self._clock = clock

    # -------------------- Hooks --------------------

    def _prepare_create(self, payload: Dict[str, Any]) -> Document:
        return payload

    def _prepare_update(self, existing: Document, changes: Dict[str, Any]) -> Document:
        return changes

    def _server_fields(self) -> Document:
        return {"created_at": self._clock()}

    # -------------------- Helpers --------------------

    @contextmanager
    def _store_call(self, action: str, record_id: Optional[str] = None) -> Iterator[None]:
        try:
            yield
        except AppError:
            raise
        except Exception as exc:
            logger.error(
                "Store call failed",
                extra={"resource": self.label, "action": action, "record_id": record_id, "error": str(exc)},
            )
            raise PersistenceError() from exc

    def _to_record(self, doc: Document) -> BaseModel:
        data = {k: v for k, v in doc.items() if k != "_id"}
        data["id"] = str(doc["_id"])
        return self.record_model.model_validate(data)

    def _not_found(self) -> NotFoundError:
        return NotFoundError(f"{self.label} not found", self.not_found)

    def _get_document(self, record_id: str) -> Document:
        with self._store_call("get", record_id):
            doc = self._store.get(record_id)
        if doc is None:
            raise self._not_found()
        return doc

    # -------------------- Operations --------------------

    def create(self, payload: Mapping[str, Any]) -> BaseModel:
        doc = self._prepare_create(dict(payload))
        doc.update(self._server_fields())
        with self._store_call("create"):
            saved = self._store.insert(doc)
        return self._to_record(saved)

    def list(self, page: PageRequest) -> Tuple[List[BaseModel], int]:
        with self._store_call("list"):
            docs = self._store.find_page(page.skip, page.limit)
            total = self._store.count()
        return [self._to_record(d) for d in docs], total

    def get(self, record_id: str) -> BaseModel:
        return self._to_record(self._get_document(record_id))

    def update(self, record_id: str, changes: Mapping[str, Any]) -> BaseModel:
        existing = self._get_document(record_id)
        changes = {k: v for k, v in changes.items() if v is not None}
        changes = self._prepare_update(existing, changes)
        merged = {**existing, **changes}
        with self._store_call("update", record_id):
            saved = self._store.save(record_id, merged)
        if saved is None:
            raise self._not_found()
        return self._to_record(saved)

    def delete(self, record_id: str) -> None:
        with self._store_call("delete", record_id):
            deleted = self._store.delete(record_id)
        if not deleted:
            raise self._not_found()


class AccountService(ResourceService):
    label = "User"
    not_found = ResponseCode.USER_NOT_FOUND
    record_model = UserOut

    def __init__(self, store: DocumentStore, credentials: CredentialVerifier, clock: Clock = _utcnow):
        super().__init__(store, clock)
        self._credentials = credentials

    def _server_fields(self) -> Document:
        return {**super()._server_fields(), "role": Role.USER.value}

    def _ensure_email_free(self, email: str, owner_id: Optional[ObjectId] = None) -> None:
        with self._store_call("find_by_email"):
            existing = self._store.find_one({"email": email})
        if existing and existing["_id"] != owner_id:
            raise ConflictError("Email already registered")

    def _require_password(self, password: str) -> str:
        if not password or not password.strip():
            raise ValidationError("Password must not be empty")
        return password

    def _prepare_create(self, payload: Dict[str, Any]) -> Document:
        email = payload["email"].strip().lower()
        self._ensure_email_free(email)
        return {
            "name": payload["name"],
            "email": email,
            "password_hash": self._credentials.hash_password(self._require_password(payload["password"])),
        }

    def _prepare_update(self, existing: Document, changes: Dict[str, Any]) -> Document:
        if "email" in changes:
            changes["email"] = changes["email"].strip().lower()
            self._ensure_email_free(changes["email"], existing["_id"])
        if "password" in changes:
            password = self._require_password(changes.pop("password"))
            changes["password_hash"] = self._credentials.hash_password(password)
        return changes

    def find_by_email(self, email: str) -> Optional[Document]:
        """Raw account document (password hash included) for credential checks."""
        with self._store_call("find_by_email"):
            return self._store.find_one({"email": email.strip().lower()})

    def ensure_admin(self, email: str, password: str, name: str) -> UserOut:
        existing = self.find_by_email(email)
        if existing and existing.get("role") == Role.ADMIN.value:
            return self._to_record(existing)
        if existing:
            record_id = str(existing["_id"])
            logger.warning("Existing account promoted to admin", extra={"user_id": record_id})
            with self._store_call("update", record_id):
                saved = self._store.save(record_id, {**existing, "role": Role.ADMIN.value})
            if saved is None:
                raise self._not_found()
            return self._to_record(saved)
        doc = {
            "name": name,
            "email": email.strip().lower(),
            "password_hash": self._credentials.hash_password(self._require_password(password)),
            "created_at": self._clock(),
            "role": Role.ADMIN.value,
        }
        with self._store_call("create"):
            saved = self._store.insert(doc)
        logger.info("Admin account seeded", extra={"user_id": str(saved["_id"])})
        return self._to_record(saved)


class CatalogService(ResourceService):
    label = "Product"
    not_found = ResponseCode.PRODUCT_NOT_FOUND
    record_model = ProductOut


class OrderService(ResourceService):
    label = "Order"
    not_found = ResponseCode.ORDER_NOT_FOUND
    record_model = OrderOut

    def _server_fields(self) -> Document:
        return {**super()._server_fields(), "status": "pending"}

    def _prepare_create(self, payload: Dict[str, Any]) -> Document:
        # total is taken as sent; it is not derived from the line items
        total = payload.get("total")
        return {
            "user_id": payload["user_id"],
            "items": list(payload.get("product_ids") or []),
            "total": float(total) if total is not None else 0.0,
        }

    def _prepare_update(self, existing: Document, changes: Dict[str, Any]) -> Document:
        if "product_ids" in changes:
            changes["items"] = list(changes.pop("product_ids"))
        return changes
