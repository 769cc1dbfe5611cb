"""
WSGI entry point for WSGI-only hosts.
FastAPI is ASGI, so we use a2wsgi adapter.
"""
from a2wsgi import ASGIMiddleware
from daycare_api.main import app

# Wrap ASGI app in WSGI adapter
application = ASGIMiddleware(app)