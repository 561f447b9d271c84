from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware

from auth import require_roles
from config import Settings, get_settings
from container import Container, build_container
from database import ping
from exception_handlers import register_exception_handlers
from logger import logger
from middleware import RequestContextMiddleware
from pagination import PageRequest, page_meta
from responses import ResponseCode, respond
from schemas import (
    ClaimsOut,
    OrderCreate,
    OrderUpdate,
    ProductCreate,
    ProductUpdate,
    Role,
    TokenResponse,
    UserCreate,
    UserLogin,
    UserUpdate,
)
from security import TokenClaims

router = APIRouter()

ANY_ROLE = (Role.USER, Role.ADMIN)


def get_container(request: Request) -> Container:
    return request.app.state.container


def page_params(
    page: Optional[int] = Query(None, description="1-based page number"),
    limit: Optional[int] = Query(None, description="Records per page"),
) -> PageRequest:
    return PageRequest.from_query(page, limit)


def list_response(service, page: PageRequest):
    records, total = service.list(page)
    return respond(ResponseCode.OK, data=records, meta=page_meta(page, total))


# -------------------- Health --------------------

@router.get("/")
def read_root():
    return respond(ResponseCode.OK, data={"message": "Shop API is running"})


@router.get("/health")
def health(container: Container = Depends(get_container)):
    if container.database is None:
        status = {"database": "in-memory", "connection_status": "Connected"}
    else:
        status = ping(container.database)
    return respond(ResponseCode.OK, data=status)


# -------------------- Auth --------------------

@router.post("/auth/login")
def login(payload: UserLogin, container: Container = Depends(get_container)):
    token = container.auth.login(payload.email, payload.password)
    return respond(ResponseCode.OK, data=TokenResponse(access_token=token))


@router.get("/auth/me")
def me(claims: TokenClaims = Depends(require_roles(*ANY_ROLE))):
    return respond(ResponseCode.OK, data=ClaimsOut(**claims.to_dict()))


# -------------------- Users --------------------

@router.post("/users")
def create_user(payload: UserCreate, container: Container = Depends(get_container)):
    user = container.users.create(payload.model_dump())
    return respond(ResponseCode.CREATED, data=user)


@router.get("/users")
def list_users(page: PageRequest = Depends(page_params), container: Container = Depends(get_container)):
    return list_response(container.users, page)


@router.get("/users/{user_id}")
def get_user(user_id: str, container: Container = Depends(get_container)):
    return respond(ResponseCode.OK, data=container.users.get(user_id))


@router.put("/users/{user_id}")
def update_user(user_id: str, payload: UserUpdate, container: Container = Depends(get_container)):
    user = container.users.update(user_id, payload.model_dump())
    return respond(ResponseCode.UPDATED, data=user)


@router.delete("/users/{user_id}")
def delete_user(user_id: str, container: Container = Depends(get_container)):
    container.users.delete(user_id)
    return respond(ResponseCode.DELETED)


# -------------------- Products --------------------

@router.post("/products", dependencies=[Depends(require_roles(Role.ADMIN))])
def create_product(payload: ProductCreate, container: Container = Depends(get_container)):
    product = container.products.create(payload.model_dump())
    return respond(ResponseCode.CREATED, data=product)


@router.get("/products", dependencies=[Depends(require_roles(*ANY_ROLE))])
def list_products(page: PageRequest = Depends(page_params), container: Container = Depends(get_container)):
    return list_response(container.products, page)


# Declared before /products/{product_id} so "public" is not taken for an id.
@router.get("/products/public/all")
def list_public_products(page: PageRequest = Depends(page_params), container: Container = Depends(get_container)):
    return list_response(container.products, page)


@router.get("/products/{product_id}", dependencies=[Depends(require_roles(*ANY_ROLE))])
def get_product(product_id: str, container: Container = Depends(get_container)):
    return respond(ResponseCode.OK, data=container.products.get(product_id))


@router.put("/products/{product_id}", dependencies=[Depends(require_roles(Role.ADMIN))])
def update_product(product_id: str, payload: ProductUpdate, container: Container = Depends(get_container)):
    product = container.products.update(product_id, payload.model_dump())
    return respond(ResponseCode.UPDATED, data=product)


@router.delete("/products/{product_id}", dependencies=[Depends(require_roles(Role.ADMIN))])
def delete_product(product_id: str, container: Container = Depends(get_container)):
    container.products.delete(product_id)
    return respond(ResponseCode.DELETED)


# -------------------- Orders --------------------

@router.post("/orders")
def create_order(payload: OrderCreate, container: Container = Depends(get_container)):
    order = container.orders.create(payload.model_dump())
    return respond(ResponseCode.CREATED, data=order)


@router.get("/orders")
def list_orders(page: PageRequest = Depends(page_params), container: Container = Depends(get_container)):
    return list_response(container.orders, page)


@router.get("/orders/{order_id}")
def get_order(order_id: str, container: Container = Depends(get_container)):
    return respond(ResponseCode.OK, data=container.orders.get(order_id))


@router.put("/orders/{order_id}")
def update_order(order_id: str, payload: OrderUpdate, container: Container = Depends(get_container)):
    order = container.orders.update(order_id, payload.model_dump())
    return respond(ResponseCode.UPDATED, data=order)


@router.delete("/orders/{order_id}")
def delete_order(order_id: str, container: Container = Depends(get_container)):
    container.orders.delete(order_id)
    return respond(ResponseCode.DELETED)


# -------------------- App --------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    if settings.admin_email and settings.admin_password:
        app.state.container.users.ensure_admin(
            settings.admin_email, settings.admin_password, settings.admin_name
        )
    logger.info("Shop API started", extra={"app_env": settings.app_env})
    yield


def create_app(settings: Optional[Settings] = None, container: Optional[Container] = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(title="Shop API", lifespan=lifespan)
    app.state.settings = settings
    app.state.container = container or build_container(settings)

    register_exception_handlers(app)
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_allowed_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=get_settings().port)
