# activity_sessions/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from activity_sessions.api.errors import activity_service_error_handler
from activity_sessions.api.v1.api import api_router
from activity_sessions.core.config import settings
from activity_sessions.core.exceptions import ActivityServiceError
from activity_sessions.core.limiter import limiter
from activity_sessions.scheduler import init_scheduler, shutdown_scheduler

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Activity sessions service starting up...")
    if settings.SCHEDULER_ENABLED:
        init_scheduler()
    yield
    logger.info("Activity sessions service shutting down...")
    shutdown_scheduler()


app = FastAPI(
    title="Activity Sessions Service",
    version="1.0.0",
    description="""
        Recurring group-sport activities and their sessions.

        ## Features
        * **Activities**: Weekly or monthly recurrence rules with player bounds
        * **Sessions**: Materialized per day, capacity-bounded admission with a FIFO waitlist
        * **Subscriptions**: Follow activities directly or through a share code
        * **Notifications**: Per-user inbox fed by an outbox, mirrored to Kafka

        ## Authentication
        Endpoints require JWT authentication via the `Authorization: Bearer <token>` header.
        """,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_exception_handler(ActivityServiceError, activity_service_error_handler)

origins = [
    "http://localhost:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


@app.get("/")
def read_root():
    return {"status": "Activity Sessions Service is running"}
