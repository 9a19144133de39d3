"""Storefront FastAPI application.

Serves the order-fulfillment and loyalty-ledger API. Commands are
processed synchronously inside the request; notifications go out after
the change has committed.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized once per process. Entity write locks are
# in-process too, so the service runs as a single writer process (one
# uvicorn worker); startup fails if WEB_CONCURRENCY asks for more.
# PROTEAN_ENV selects the domain.toml overlay (memory stores by default,
# PostgreSQL under "production").
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from storefront.domain import storefront
from storefront.utils.locks import check_single_writer
from storefront.utils.logging import add_context, clear_context

check_single_writer()
storefront.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront API",
    description="Order fulfillment, bonus wallet and referrals behind the shop bot",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the storefront domain context and request log context for each request."""
    add_context(method=request.method, path=request.url.path)
    try:
        with storefront.domain_context():
            return await call_next(request)
    finally:
        clear_context()


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from storefront.api import client_router, discount_router, order_router, product_router  # noqa: E402
from storefront.api.errors import register_exception_handlers  # noqa: E402

app.include_router(order_router)
app.include_router(client_router)
app.include_router(product_router)
app.include_router(discount_router)
register_exception_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": storefront.name})
