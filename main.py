"""
Fishing Spots FastAPI Application

Main entry point for the Fishing Spots application, serving the REST API,
the per-session command streams and the single map page.
"""

import logging

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from logic.config import get_settings  # noqa: E402
from logic.spots import get_spot_store  # noqa: E402
from server.routes import BASE_DIR, STATIC_DIR, router as routes_router  # noqa: E402

settings = get_settings()
logging.basicConfig(level=settings["log_level"])
logger = logging.getLogger(__name__)

app = FastAPI(title=settings["page_title"])

# Include all routers
app.include_router(routes_router)

# Seed the shared store once per process
store = get_spot_store()
logger.info(f"Serving {len(store)} spots from {BASE_DIR}")

# ============================================================
# Static Files
# ============================================================

app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")
