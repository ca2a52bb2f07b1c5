"""ASGI entry point for samlink.

Run with: uvicorn samlink.main:app
"""

from .api.app import create_app
from .logging import setup_logging

# Initialize logging
setup_logging()

app = create_app()
