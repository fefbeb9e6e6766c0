# module bundlestore.admin.service

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional
import logging
from fastapi import HTTPException

from bundlestore.admin import repository as admin_repository
from bundlestore.orders import repository as orders_repository
from bundlestore.orders import service as orders_service
from bundlestore.orders.models import COMPLETED, InvalidTransition, normalize_status
from bundlestore.payments.metadata import parse_price

logger = logging.getLogger(__name__)

RECENT_DAYS = 7

def _status_or_400(status: Optional[str]) -> str:
    try:
        return normalize_status(status)
    except InvalidTransition:
        raise HTTPException(status_code=400, detail=f"Unknown order status: {status}")

def list_orders(status: Optional[str] = None) -> List[dict]:
    wanted = _status_or_400(status) if status else None
    return [orders_service.to_public_order(o) for o in orders_repository.list_orders(status=wanted)]

def update_order_status(order_id: str, status: str, admin: Dict[str, Any]) -> dict:
    """Changement manuel de statut: l'admin ne confirme jamais de paiement
    (payment_verified=False), donc 'completed' lui est refusé par la machine à états."""
    target = _status_or_400(status)
    order = orders_service.change_status(order_id, target, payment_verified=False)
    logger.info("admin.update_order_status id=%s status=%s by=%s", order_id, target, admin.get("id"))
    return orders_service.to_public_order(order)

def _parse_ts(value: Any) -> Optional[datetime]:
    if not value:
        return None
    try:
        ts = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)

def get_stats(now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or datetime.now(timezone.utc)
    since = now - timedelta(days=RECENT_DAYS)
    rows = orders_repository.fetch_order_stats_rows()
    revenue = sum(
        (parse_price(r.get("price")) or Decimal("0") for r in rows if r.get("status") == COMPLETED),
        Decimal("0"),
    )
    recent = 0
    for r in rows:
        ts = _parse_ts(r.get("created_at"))
        if ts and ts >= since:
            recent += 1
    return {
        "total_revenue": float(revenue),
        "total_orders": len(rows),
        "total_users": admin_repository.count_table_rows("users"),
        "recent_orders": recent,
    }
