"""
ASGI entrypoint for the Shortener Platform.

Keeps `uvicorn main:app --reload` and `from main import app` working; the app
itself is built by ``shortener.app.create_app``. For flag-driven startup use the
``shortener`` console script (see ``shortener/cli.py``).
"""

from shortener.app import create_app

app = create_app()
