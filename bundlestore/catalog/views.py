# module bundlestore.catalog.views
"""Endpoints publics du catalogue (aucune authentification)."""
from typing import Any, Dict
from fastapi import APIRouter, HTTPException
from . import service

router = APIRouter(prefix="/api/v1/catalog", tags=["Catalog API"])

@router.get("/providers")
def list_providers() -> Dict[str, Any]:
    return {"providers": [p.to_dict() for p in service.list_providers()]}

@router.get("/providers/{provider_id}")
def get_provider(provider_id: str) -> Dict[str, Any]:
    provider = service.get_provider(provider_id)
    if not provider:
        raise HTTPException(status_code=404, detail="Provider not found")
    return provider.to_dict()
