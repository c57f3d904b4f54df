import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from biolink.core.config import settings
from biolink.core.database import engine, Base
from biolink.core.errors import BioLinkError
from biolink.models import user, page, block, click, subscription  # noqa: F401 (tables)
from biolink.routers import health, auth, pages, blocks, public, analytics, billing, admin

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)

# Init DB
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="BioLink API",
    version="1.0.0"
)

@app.exception_handler(BioLinkError)
async def biolink_error_handler(request: Request, exc: BioLinkError):
    # même forme que HTTPException: {"detail": ...}
    logger.info("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

# Routes
app.include_router(health.router, prefix="/health")
app.include_router(auth.router)
app.include_router(pages.router)
app.include_router(blocks.router)
app.include_router(public.router)
app.include_router(analytics.router)
app.include_router(billing.router)
app.include_router(admin.router)
