# module bundlestore.users.views

"""API du tableau de bord client (session obligatoire via require_user)."""
from typing import Dict, Any
from fastapi import APIRouter, Depends
from bundlestore.utils.security import require_user
from .service import get_user_orders, get_user_summary

api_router = APIRouter(prefix="/api/v1/users", tags=["Users API"])

@api_router.get("/me/orders")
def my_orders(user: Dict[str, Any] = Depends(require_user)):
    """Commandes de l'utilisateur connecté, plus récentes d'abord."""
    return {"orders": get_user_orders(user["id"])}

@api_router.get("/me/summary")
def my_summary(user: Dict[str, Any] = Depends(require_user)):
    return get_user_summary(user["id"])
