# module bundlestore.admin.views
from typing import Optional, Dict, Any
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from bundlestore.utils.security import require_admin
from bundlestore.utils.rate_limit import optional_rate_limit
from bundlestore.admin import service as admin_service

router = APIRouter(prefix="/admin/api", tags=["Admin"])

class StatusUpdate(BaseModel):
    status: str

@router.get("/orders")
def admin_orders(
    status: Optional[str] = Query(default=None),
    user: Dict[str, Any] = Depends(require_admin),
):
    return {"orders": admin_service.list_orders(status)}

@router.post(
    "/orders/{order_id}/status",
    dependencies=[Depends(optional_rate_limit(times=30, seconds=60))],
)
def admin_update_order_status(order_id: str, body: StatusUpdate, user: Dict[str, Any] = Depends(require_admin)):
    """Transition manuelle (pending -> processing|failed, processing -> failed); 409 sinon."""
    return {"order": admin_service.update_order_status(order_id, body.status, user)}

@router.get("/stats")
def admin_stats(user: Dict[str, Any] = Depends(require_admin)):
    return admin_service.get_stats()
