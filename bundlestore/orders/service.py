"""Couche service des commandes.
Rôles:
- Point unique de changement de statut (change_status), quel que soit l'appelant
  (vérification de paiement, annulation client, admin).
- Normalisation des lignes pour l'affichage (client invité vs utilisateur inscrit).
"""
from typing import Any, Dict, List, Optional
import logging
from fastapi import HTTPException

from bundlestore.orders import repository
from bundlestore.orders.models import InvalidTransition, transition

logger = logging.getLogger(__name__)

def change_status(order_id: str, target: str, *, payment_verified: bool = False, order: Optional[dict] = None) -> dict:
    """Applique une transition de statut validée par la machine à états.
    - 404 si la commande n'existe pas
    - 409 si la transition est illégale ou si un autre appel a modifié la commande entre-temps
    - Transition identique: retourne la ligne sans écrire
    """
    current_row = order or repository.get_order(order_id)
    if not current_row:
        raise HTTPException(status_code=404, detail="Order not found")
    current = current_row.get("status")
    try:
        new_status = transition(current, target, payment_verified=payment_verified)
    except InvalidTransition as e:
        logger.warning("orders.change_status rejected id=%s %s->%s: %s", order_id, current, target, e.reason)
        raise HTTPException(status_code=409, detail=e.reason)
    if new_status == current:
        return current_row

    updated = repository.update_status(order_id, current, new_status)
    if not updated:
        # Perdu la course: un autre appel a déjà changé le statut
        latest = repository.get_order(order_id) or {}
        if latest.get("status") == new_status:
            return latest
        raise HTTPException(status_code=409, detail="Order status changed concurrently")
    logger.info("orders.change_status id=%s %s->%s", order_id, current, new_status)
    return updated

def to_public_order(row: Dict[str, Any]) -> Dict[str, Any]:
    """Ajoute customer_email/customer_name (utilisateur joint, sinon invité)."""
    user = row.get("users") or {}
    out = dict(row)
    out["customer_email"] = user.get("email") or row.get("guest_email") or "Guest"
    out["customer_name"] = user.get("full_name") or row.get("guest_name") or ""
    try:
        out["price"] = float(row.get("price") or 0)
    except (TypeError, ValueError):
        out["price"] = 0.0
    return out

def list_user_orders(user_id: str) -> List[dict]:
    return [to_public_order(o) for o in repository.list_user_orders(user_id)]
