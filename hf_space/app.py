"""Entry point for the Hugging Face Space deployment.

This file simply re-exports the FastAPI application from the bio engine so
the Space runtime can discover and serve it.
"""

from bio_engine.main import app

__all__ = ["app"]
