import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from prometheus_client import make_asgi_app

import storefront.models  # noqa: F401
from storefront.config import settings
from storefront.database import AsyncSessionLocal, Base, engine
from storefront.errors import CatalogError, NewsUnavailableError
from storefront.middleware.metrics import MetricsMiddleware
from storefront.middleware.request_id import RequestIDMiddleware
from storefront.routers import cart, menu, news, orders, store
from storefront.services.cart import CartRegistry
from storefront.services.catalog import CatalogAssembler
from storefront.services.document_store import DocumentStore
from storefront.services.images import ImageResolver
from storefront.services.news import NewsAssembler
from storefront.services.order_service import OrderComposer
from storefront.services.store_profile import load_store_profile
from storefront.storage import build_storage
from storefront.utils.logging import setup_logging
from storefront.utils.tracing import setup_tracing

setup_logging(settings.log_level, settings.service_name)
logger = logging.getLogger(__name__)

if settings.tracing_enabled:
    setup_tracing(settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting up, creating database tables")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    if settings.tracing_enabled:
        SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine)

    storage = build_storage(settings)
    documents = DocumentStore(AsyncSessionLocal)

    app.state.store_profile = await load_store_profile(documents)
    app.state.carts = CartRegistry(max_sessions=settings.cart_max_sessions)
    app.state.order_composer = OrderComposer(documents)
    app.state.catalog_assembler = CatalogAssembler(
        storage,
        ImageResolver(storage, settings.media_root, settings.image_extensions),
        menu_root=settings.menu_root,
        partial=settings.catalog_partial,
    )
    app.state.news_assembler = NewsAssembler(
        storage,
        document=settings.news_document,
        images_root=settings.news_images_root,
    )

    catalog, news_items = await asyncio.gather(
        app.state.catalog_assembler.assemble(),
        app.state.news_assembler.assemble(),
        return_exceptions=True,
    )

    app.state.catalog, app.state.catalog_error = None, None
    if isinstance(catalog, CatalogError):
        logger.error("Catalog assembly failed", extra={"error": str(catalog)})
        app.state.catalog_error = str(catalog)
    elif isinstance(catalog, BaseException):
        raise catalog
    else:
        app.state.catalog = catalog

    app.state.news, app.state.news_error = None, None
    if isinstance(news_items, NewsUnavailableError):
        logger.error("News assembly failed", extra={"error": str(news_items)})
        app.state.news_error = str(news_items)
    elif isinstance(news_items, BaseException):
        raise news_items
    else:
        app.state.news = news_items

    logger.info("Startup complete")

    yield

    await engine.dispose()
    logger.info("Shutting down")


app = FastAPI(
    title="Storefront",
    description="Catalog assembly and pickup/delivery ordering",
    version=settings.service_version,
    lifespan=lifespan,
)

if settings.tracing_enabled:
    FastAPIInstrumentor.instrument_app(app)
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestIDMiddleware)
app.include_router(store.router, prefix="/store", tags=["store"])
app.include_router(menu.router, prefix="/menu", tags=["menu"])
app.include_router(news.router, prefix="/news", tags=["news"])
app.include_router(cart.router, prefix="/cart", tags=["cart"])
app.include_router(orders.router, prefix="/orders", tags=["orders"])

if settings.storage_backend.lower() == "local":
    app.mount(
        settings.media_base_url,
        StaticFiles(directory=settings.media_dir, check_dir=False),
        name="media",
    )

# Expose Prometheus metrics at /metrics
metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)


@app.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}
