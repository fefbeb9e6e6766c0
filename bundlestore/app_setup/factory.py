"""
Factory d'application utilisée par les entrypoints (bundlestore.asgi, python -m bundlestore).
"""
import logging
from fastapi import FastAPI
from .lifespan import lifespan
from .middlewares import register_basic_middlewares, register_security_middleware, register_force_https_middleware
from .exceptions import register_exception_handlers
from .routers import register_routers

def create_app() -> FastAPI:
    """
    Construit l'app FastAPI avec le lifespan et enregistre, dans cet ordre:
      1) middlewares de base (CORS, TrustedHost, ProxyHeaders)
      2) en-têtes de sécurité + CSRF
      3) gestionnaires d'exceptions
      4) routers (catalog, payments, auth, users, admin, health)
      5) redirection HTTPS, ajoutée en dernier pour s'exécuter en premier
    """
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = FastAPI(title="Bundle Store API", lifespan=lifespan)
    register_basic_middlewares(app)
    register_security_middleware(app)
    register_exception_handlers(app)
    register_routers(app)
    register_force_https_middleware(app)
    return app
