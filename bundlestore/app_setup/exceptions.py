"""
Gestionnaires d'exceptions.
- HTTPException: corps JSON FastAPI standard {"detail": ...}
- Erreurs de configuration ou de stockage non interceptées par un service: 500 générique
  (le détail part dans les logs, jamais dans la réponse)
"""
import logging
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from bundlestore.infra.supabase_client import StoreConfigurationError
from bundlestore.orders.repository import OrderStoreError
from bundlestore.payments.paystack_client import GatewayConfigurationError
from bundlestore.users.repository import UserStoreError

logger = logging.getLogger(__name__)

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def http_exception_json(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=getattr(exc, "headers", None))

    @app.exception_handler(StoreConfigurationError)
    async def store_configuration_error(request: Request, exc: StoreConfigurationError):
        logger.error("Store configuration missing path=%s: %s", request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": "Store configuration missing"})

    @app.exception_handler(GatewayConfigurationError)
    async def gateway_configuration_error(request: Request, exc: GatewayConfigurationError):
        logger.error("Payment gateway configuration missing path=%s", request.url.path)
        return JSONResponse(status_code=500, content={"detail": "Payment gateway configuration missing"})

    @app.exception_handler(OrderStoreError)
    @app.exception_handler(UserStoreError)
    async def store_error(request: Request, exc: Exception):
        logger.error("Store failure path=%s: %s", request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": "Internal storage error"})
