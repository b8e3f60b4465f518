"""
Main FastAPI application.
A single webhook receiver - no user-facing API.

Endpoints:
- /health - Liveness check
- /webhooks/stripe - Stripe subscription webhook handler
"""

import logging

from fastapi import FastAPI
from dotenv import load_dotenv

from .. import __version__
from ..config import get_settings

# Load environment variables
load_dotenv()

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

missing = settings.missing()
if missing:
    logger.warning("Missing required environment variables: %s", ", ".join(missing))

# Create app
app = FastAPI(
    title="Stripe Sheet Sync",
    description="Keeps a Google Sheet of active subscribers in sync with Stripe",
    version=__version__,
    docs_url="/docs" if settings.app_env == "development" else None,
    redoc_url=None,
)


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {"status": "healthy", "version": __version__}


# Import and include routers
from .routes import webhooks

app.include_router(webhooks.router, prefix="/webhooks", tags=["webhooks"])
