from typing import Optional
from supabase import create_client, Client
from bundlestore import config

_supabase: Optional[Client] = None
_service_supabase: Optional[Client] = None

class StoreConfigurationError(RuntimeError):
    """URL ou clé Supabase absente: opération impossible (HTTP 500 côté API)."""

def get_supabase() -> Client:
    global _supabase
    if not config.SUPABASE_URL or not config.SUPABASE_ANON:
        raise StoreConfigurationError("SUPABASE_URL / SUPABASE_ANON_KEY manquants")
    if _supabase is None:
        _supabase = create_client(config.SUPABASE_URL, config.SUPABASE_ANON)
    return _supabase

def get_service_supabase() -> Client:
    """
    Client service-role (bypass RLS): seul client utilisé pour écrire users/orders,
    les écritures n'ont lieu que derrière la frontière serveur.
    """
    global _service_supabase
    if not config.SUPABASE_URL or not config.SUPABASE_SERVICE_KEY:
        raise StoreConfigurationError("SUPABASE_URL / SUPABASE_SERVICE_KEY manquants")
    if _service_supabase is None:
        _service_supabase = create_client(config.SUPABASE_URL, config.SUPABASE_SERVICE_KEY)
    return _service_supabase

def store_configured() -> bool:
    return bool(config.SUPABASE_URL and config.SUPABASE_SERVICE_KEY)
