from dataclasses import dataclass
from typing import Mapping, Optional

from pymongo.database import Database

from auth import AuthService
from config import Settings
from database import ORDER_COLLECTION, PRODUCT_COLLECTION, USER_COLLECTION, get_database
from security import CredentialVerifier, TokenService
from services import AccountService, CatalogService, OrderService
from stores import DocumentStore, MongoStore


@dataclass
class Container:
    users: AccountService
    products: CatalogService
    orders: OrderService
    tokens: TokenService
    credentials: CredentialVerifier
    auth: AuthService
    database: Optional[Database] = None


def build_container(settings: Settings, stores: Optional[Mapping[str, DocumentStore]] = None) -> Container:
    """Wire services to their stores. Without `stores`, MongoDB collections are used."""
    database = None
    if stores is None:
        database = get_database(settings)
        stores = {
            name: MongoStore(database[name])
            for name in (USER_COLLECTION, PRODUCT_COLLECTION, ORDER_COLLECTION)
        }

    credentials = CredentialVerifier()
    tokens = TokenService(settings.jwt_secret, settings.token_ttl_seconds)
    users = AccountService(stores[USER_COLLECTION], credentials)
    return Container(
        users=users,
        products=CatalogService(stores[PRODUCT_COLLECTION]),
        orders=OrderService(stores[ORDER_COLLECTION]),
        tokens=tokens,
        credentials=credentials,
        auth=AuthService(users, tokens, credentials),
        database=database,
    )
