import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

# Load env from the project root before settings are read
if "PYTEST_CURRENT_TEST" not in os.environ:
    load_dotenv()

from nutritrack.core.config import settings, validate_config
from nutritrack.core.logging import configure_logging
from nutritrack.core.middleware.request_id import RequestIdMiddleware
from nutritrack.core.validation import validate_env
from nutritrack.core.errors import (
    AppError,
    app_error_handler,
    http_error_handler,
    unhandled_exception_handler,
)
from nutritrack.api import activities, health, reminders, streaks, tasks, tracking

configure_logging(settings.ENV)
validate_env()
validate_config(strict=getattr(settings, "CONFIG_STRICT", False))


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = logging.getLogger("nutritrack")
    logger.info("Starting nutritrack...")
    try:
        yield
    finally:
        logging.getLogger("nutritrack").info("Stopping nutritrack...")


app = FastAPI(title="nutritrack", lifespan=lifespan)

# Middlewares
app.add_middleware(RequestIdMiddleware)

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(HTTPException, http_error_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# CORS (adjust origins in production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.root_router, tags=["health"])
app.include_router(streaks.router, tags=["streaks"])
app.include_router(tasks.router, tags=["tasks"])
app.include_router(reminders.router, tags=["reminders"])
app.include_router(activities.router, tags=["activities"])
app.include_router(tracking.router, tags=["tracking"])
