"""
ASGI entrypoint: expose `app` pour les process managers (ex: uvicorn bundlestore.asgi:app).
Toute la configuration est centralisée dans bundlestore.app_setup.factory.
"""

from bundlestore.app import app
