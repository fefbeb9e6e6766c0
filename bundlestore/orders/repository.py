"""
Accès aux données de la table 'orders' (client service-role).

Les lectures d'affichage (listes, stats) restent tolérantes ([]/None en cas d'erreur).
Les lectures/écritures du flux de paiement soulèvent OrderStoreError: une commande
perdue après un paiement capturé doit remonter en 500, pas passer inaperçue.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging

from postgrest.exceptions import APIError

import bundlestore.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)

TABLE = "orders"
UNIQUE_VIOLATION = "23505"

class OrderStoreError(RuntimeError):
    pass

class DuplicateOrderReference(OrderStoreError):
    """Une commande existe déjà pour cette référence (contrainte unique orders.reference)."""

def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()

def _first(res) -> Optional[dict]:
    rows = getattr(res, "data", None)
    if isinstance(rows, list):
        return rows[0] if rows else None
    if isinstance(rows, dict):
        return rows
    return None

# module bundlestore.orders.repository
def get_order(order_id: str) -> Optional[dict]:
    if not order_id:
        return None
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(TABLE)
            .select("*")
            .eq("id", order_id)
            .limit(1)
            .execute()
        )
        return _first(res)
    except supabase_client.StoreConfigurationError:
        raise
    except Exception as e:
        logger.exception("orders.repository.get_order failed id=%s", order_id)
        raise OrderStoreError(str(e)) from e

def get_order_by_reference(reference: str) -> Optional[dict]:
    if not reference:
        return None
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(TABLE)
            .select("*")
            .eq("reference", reference)
            .limit(1)
            .execute()
        )
        return _first(res)
    except supabase_client.StoreConfigurationError:
        raise
    except Exception as e:
        logger.exception("orders.repository.get_order_by_reference failed reference=%s", reference)
        raise OrderStoreError(str(e)) from e

def insert_order(row: Dict[str, Any]) -> dict:
    """
    Insère une commande et retourne la ligne créée.
    - DuplicateOrderReference si la référence existe déjà (appel concurrent)
    - OrderStoreError pour toute autre erreur
    """
    payload = dict(row)
    now = _now_iso()
    payload.setdefault("created_at", now)
    payload.setdefault("updated_at", now)
    try:
        res = supabase_client.get_service_supabase().table(TABLE).insert(payload).execute()
    except supabase_client.StoreConfigurationError:
        raise
    except APIError as e:
        if str(getattr(e, "code", "")) == UNIQUE_VIOLATION:
            raise DuplicateOrderReference(payload.get("reference") or "") from e
        logger.exception("orders.repository.insert_order failed reference=%s", payload.get("reference"))
        raise OrderStoreError(str(e)) from e
    except Exception as e:
        logger.exception("orders.repository.insert_order failed reference=%s", payload.get("reference"))
        raise OrderStoreError(str(e)) from e
    created = _first(res)
    if not created:
        raise OrderStoreError("Insert returned no row")
    return created

def update_status(order_id: str, expected: str, target: str) -> Optional[dict]:
    """
    Compare-and-set: met à jour le statut seulement si la ligne est encore à 'expected'.
    Retourne la ligne mise à jour, ou None si un autre appel a changé le statut entre-temps.
    """
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(TABLE)
            .update({"status": target, "updated_at": _now_iso()})
            .eq("id", order_id)
            .eq("status", expected)
            .execute()
        )
        return _first(res)
    except supabase_client.StoreConfigurationError:
        raise
    except Exception as e:
        logger.exception("orders.repository.update_status failed id=%s %s->%s", order_id, expected, target)
        raise OrderStoreError(str(e)) from e

def list_orders(status: Optional[str] = None, limit: int = 200) -> List[dict]:
    """Commandes pour l'admin, jointes avec users(email, full_name), plus récentes d'abord."""
    try:
        query = (
            supabase_client.get_service_supabase()
            .table(TABLE)
            .select("*, users(email, full_name)")
            .order("created_at", desc=True)
        )
        if status:
            query = query.eq("status", status)
        res = query.limit(limit).execute()
        return res.data or []
    except Exception:
        logger.exception("orders.repository.list_orders failed status=%s", status)
        return []

def list_user_orders(user_id: str) -> List[dict]:
    if not user_id:
        return []
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(TABLE)
            .select("*")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("orders.repository.list_user_orders failed user_id=%s", user_id)
        return []

def fetch_order_stats_rows() -> List[dict]:
    """Colonnes minimales pour les statistiques admin (prix, statut, date)."""
    try:
        res = supabase_client.get_service_supabase().table(TABLE).select("price, status, created_at").execute()
        return res.data or []
    except Exception:
        logger.exception("orders.repository.fetch_order_stats_rows failed")
        return []
