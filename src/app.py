"""Order service FastAPI application.

Web server that processes commands synchronously via HTTP. Each request is
wrapped in the ordering domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay and the logging profile.
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from ordering.domain import ordering
from ordering.utils.logging import add_context, clear_context, configure_logging, get_logger

configure_logging()
ordering.init()

logger = get_logger(__name__)
logger.info("Order service initialized", domain=ordering.name)


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront Order Service",
    description="Orders, variant inventory and card payments",
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
    """Push the ordering domain context and bind request log context."""
    clear_context()
    add_context(
        method=request.method,
        path=request.url.path,
        customer_id=request.headers.get("X-Customer-Id"),
    )
    try:
        with ordering.domain_context():
            response = await call_next(request)
    finally:
        clear_context()
    return response


# ---------------------------------------------------------------------------
# Routers and error envelopes
# ---------------------------------------------------------------------------
from ordering.api.errors import register_exception_handlers  # noqa: E402
from ordering.api.routes import color_router, order_router, product_router, size_router  # noqa: E402
from payments.api.routes import payment_router  # noqa: E402

register_exception_handlers(app)

app.include_router(order_router)
app.include_router(product_router)
app.include_router(color_router)
app.include_router(size_router)
app.include_router(payment_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "success": True,
            "data": {"status": "ok", "domain": ordering.name},
        }
    )
