import logging
import os
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from trippat.config import settings

# ─── Logging setup (file + console) ───
_LOG_DIR = Path(os.environ.get("LOG_DIR", Path(__file__).resolve().parent.parent / "logs"))
_LOG_DIR.mkdir(parents=True, exist_ok=True)

_log_level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)

logging.basicConfig(
    level=_log_level,
    format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    handlers=[
        logging.StreamHandler(),
        RotatingFileHandler(
            _LOG_DIR / "trippat.log",
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        ),
    ],
)

# Quiet noisy libraries
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

from trippat.dependencies import close_shared_clients
from trippat.routers import currency, package_pricing, supplier_hotels

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not settings.supplier_username or not settings.supplier_password:
        logger.warning("Supplier credentials not configured — live pricing and hotel search disabled")
    yield

    # Shutdown
    await close_shared_clients()
    logger.info("Supplier and currency clients closed")


app = FastAPI(
    title="Trippat",
    description="Hotel reconciliation and package pricing",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(package_pricing.router, prefix="/api/package-pricing", tags=["package-pricing"])
app.include_router(supplier_hotels.router, prefix="/api/admin/supplier-hotels", tags=["supplier-hotels"])
app.include_router(currency.router, prefix="/api/currency", tags=["currency"])


@app.get("/api/health")
async def health_check():
    return {"status": "ok", "service": "trippat"}
