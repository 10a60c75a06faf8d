"""
FastAPI app entrypoint.

Event meeting scheduler: meeting requests API plus the reminder dispatch tick.
"""
import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from apscheduler.schedulers.background import BackgroundScheduler
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware

# Load .env from backend/ before any app code
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from meetings.api.routes import meets
from meetings.config import settings
from meetings.core.constants import REMINDER_DISPATCH_JOB_ID
from meetings.core.errors import MeetingError, meeting_error_to_http
from meetings.scheduler.reminder_job import run_due_reminders_job

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Scheduler: drain due meeting reminders every reminder_poll_seconds
_scheduler = BackgroundScheduler()


@asynccontextmanager
async def lifespan(app: FastAPI):
    _scheduler.add_job(
        run_due_reminders_job,
        "interval",
        seconds=settings.reminder_poll_seconds,
        id=REMINDER_DISPATCH_JOB_ID,
        max_instances=1,
        coalesce=True,
    )
    _scheduler.start()
    app.state.scheduler = _scheduler
    logger.info("Reminder dispatch every %ss", settings.reminder_poll_seconds)
    yield
    _scheduler.shutdown(wait=False)


app = FastAPI(title="Event Meetings", version="0.1.0", lifespan=lifespan)

# CORS: dev origins + optional CORS_ORIGINS env (comma-separated) for the production frontend
_cors_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
_cors_extra = os.getenv("CORS_ORIGINS", "")
if _cors_extra:
    _cors_origins.extend(o.strip() for o in _cors_extra.split(",") if o.strip())
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(MeetingError)
async def meeting_error_handler(request: Request, exc: MeetingError):
    logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.message)
    return await http_exception_handler(request, meeting_error_to_http(exc))


app.include_router(meets.router, tags=["meetings"])


@app.get("/", include_in_schema=False)
def root():
    """Root: point to API docs and health."""
    return {"message": "Event Meetings API", "docs": "/docs", "health": "/health"}


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
