"""FastAPI app wiring for Bulk Query.

This module owns the public ASGI `app` instance and the router wiring.
"""

import logging

from fastapi import FastAPI

from bulkquery.routes.api import router as api_router

logging.basicConfig(level=logging.INFO)

app = FastAPI(title="Bulk Query: chunk, edit and process long texts")


def create_application() -> FastAPI:
    """Return the configured FastAPI app for external servers/importers."""
    return app


app.include_router(api_router)
