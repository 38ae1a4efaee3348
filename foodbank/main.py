# foodbank/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from foodbank.api import auth, donations, location
from foodbank.core.config import settings
from foodbank.core.errors import FoodbankError
from foodbank.repos.blob import make_store
from foodbank.repos.users import UserRegistry
from foodbank.services.location import Geocoder
from foodbank.services.matching import DonationEngine

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # One engine per app; state never lives at module level
    app.state.engine = DonationEngine(
        store=make_store(settings.storage_path),
        default_radius_km=settings.default_radius_km,
    )
    app.state.users = UserRegistry()
    if settings.seed_demo_users:
        app.state.users.seed_demo()
    app.state.geocoder = Geocoder(settings)
    logger.info("food bank ready: %d donations loaded", len(app.state.engine.donations))

    yield
    app.state.geocoder.client.close()


app = FastAPI(lifespan=lifespan, title="Digital Food Bank API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(FoodbankError)
async def foodbank_error_handler(request: Request, exc: FoodbankError):
    return JSONResponse({"detail": exc.detail, "error": type(exc).__name__}, status_code=exc.status_code)

app.include_router(auth.router)           # /api/auth
app.include_router(donations.router)      # /api/donations
app.include_router(location.router)       # /api/location

# Health
@app.get("/health")
def health():
    return {"ok": True}
