"""
FastAPI Application Entry Point
================================

Main application initialization and wiring.
Run with: uvicorn persist_tabular.app.main:app --reload
"""

# Load environment variables FIRST, before any other imports
from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI

from persist_tabular.api.routes import router
from persist_tabular.app.config import VERSION, APP_NAME, LOG_FILE
from persist_tabular.app.exceptions import global_exception_handler
from persist_tabular.app.logging_config import setup_logging


setup_logging(LOG_FILE)


# =============================================================================
# APP INITIALIZATION
# =============================================================================

app = FastAPI(
    title=APP_NAME,
    description="Delimited tabular export with inferred SQL schema",
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

app.add_exception_handler(Exception, global_exception_handler)


# =============================================================================
# ROUTES
# =============================================================================

app.include_router(router, tags=["Tabular"])


# =============================================================================
# ROOT
# =============================================================================

@app.get("/")
def root():
    """Root endpoint with API information."""
    return {
        "name": APP_NAME,
        "version": VERSION,
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "export": "POST /tabular/export",
            "ids": "POST /tabular/ids"
        }
    }
