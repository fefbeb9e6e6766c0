# module bundlestore.catalog.service
from typing import List, Optional, Tuple
from .models import Bundle, Provider
from . import data

def list_providers() -> List[Provider]:
    return list(data.PROVIDERS)

def get_provider(provider_id: str) -> Optional[Provider]:
    pid = (provider_id or "").strip().lower()
    for provider in data.PROVIDERS:
        if provider.id == pid:
            return provider
    return None

def find_bundle(provider_id: str, bundle_id: str) -> Optional[Tuple[Provider, Bundle]]:
    """Retourne (opérateur, forfait) si le forfait appartient bien à l'opérateur, sinon None."""
    provider = get_provider(provider_id)
    if not provider:
        return None
    for bundle in provider.bundles:
        if bundle.id == (bundle_id or "").strip():
            return provider, bundle
    return None

def find_bundle_by_id(bundle_id: str) -> Optional[Tuple[Provider, Bundle]]:
    """Recherche globale (sans opérateur), utilisée pour recouper le prix lors de la vérification."""
    bid = (bundle_id or "").strip()
    if not bid:
        return None
    for provider in data.PROVIDERS:
        for bundle in provider.bundles:
            if bundle.id == bid:
                return provider, bundle
    return None
