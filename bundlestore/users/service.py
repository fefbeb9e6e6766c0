"""Couche service du domaine Utilisateurs (tableau de bord client).
Historique des commandes et synthèse: seules les commandes 'completed' comptent dans le montant dépensé.
"""
from decimal import Decimal
from typing import Any, Dict, List
from bundlestore.orders import service as orders_service
from bundlestore.orders.models import COMPLETED
from bundlestore.payments.metadata import parse_price

def get_user_orders(user_id: str) -> List[dict]:
    return orders_service.list_user_orders(user_id)

def get_user_summary(user_id: str) -> Dict[str, Any]:
    orders = orders_service.list_user_orders(user_id)
    completed = [o for o in orders if o.get("status") == COMPLETED]
    total = sum((parse_price(o.get("price")) or Decimal("0") for o in completed), Decimal("0"))
    return {
        "total_orders": len(orders),
        "completed_orders": len(completed),
        "total_spent": float(total),
    }
