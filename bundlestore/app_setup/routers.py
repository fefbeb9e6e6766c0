"""
Registre central des routers.
- API v1: catalog, payments, auth, users
- Admin: /admin/api
- Health: /health
"""
from fastapi import FastAPI
from bundlestore.catalog import views as catalog_views
from bundlestore.payments import views as payments_views
from bundlestore.auth.views import api_router as auth_api_router
from bundlestore.users.views import api_router as users_api_router
from bundlestore.admin.views import router as admin_router
from bundlestore.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    app.include_router(catalog_views.router)
    app.include_router(payments_views.router)
    app.include_router(auth_api_router)
    app.include_router(users_api_router)
    app.include_router(admin_router)
    app.include_router(health_router)
