"""Couche d'accès aux données (Supabase) pour la table users.
Les lectures « catchent » les exceptions et renvoient None pour ne pas casser l'UX
(sauf configuration Supabase absente, qui remonte en 500);
les écritures soulèvent UserStoreError (ou DuplicateUserEmail sur contrainte unique).
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional
import logging

from postgrest.exceptions import APIError

import bundlestore.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"

class UserStoreError(RuntimeError):
    pass

class DuplicateUserEmail(UserStoreError):
    pass

def _first(res) -> Optional[dict]:
    rows = getattr(res, "data", None)
    if isinstance(rows, list):
        return rows[0] if rows else None
    if isinstance(rows, dict):
        return rows
    return None

def get_user_by_email(email: str) -> Optional[dict]:
    """Récupère un utilisateur par email (ligne complète, hash inclus).
    - Retour: dict utilisateur ou None si introuvable/erreur
    """
    if not email:
        return None
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("users")
            .select("*")
            .eq("email", email)
            .limit(1)
            .execute()
        )
        return _first(res)
    except supabase_client.StoreConfigurationError:
        raise
    except Exception:
        logger.exception("users.repository.get_user_by_email failed")
        return None

def get_user_by_id(user_id: str) -> Optional[dict]:
    if not user_id:
        return None
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("users")
            .select("*")
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
        return _first(res)
    except supabase_client.StoreConfigurationError:
        raise
    except Exception:
        logger.exception("users.repository.get_user_by_id failed id=%s", user_id)
        return None

def insert_user(email: str, password_hash: str, full_name: Optional[str] = None) -> dict:
    now = datetime.now(timezone.utc).isoformat()
    payload: Dict[str, Any] = {
        "email": email,
        "password_hash": password_hash,
        "full_name": full_name,
        "is_admin": False,
        "created_at": now,
        "updated_at": now,
    }
    try:
        res = supabase_client.get_service_supabase().table("users").insert(payload).execute()
    except supabase_client.StoreConfigurationError:
        raise
    except APIError as e:
        if str(getattr(e, "code", "")) == UNIQUE_VIOLATION:
            raise DuplicateUserEmail(email) from e
        logger.exception("users.repository.insert_user failed")
        raise UserStoreError(str(e)) from e
    except Exception as e:
        logger.exception("users.repository.insert_user failed")
        raise UserStoreError(str(e)) from e
    row = _first(res)
    if not row:
        raise UserStoreError("Insert returned no row")
    return row

def update_user(user_id: str, data: Dict[str, Any]) -> dict:
    """Met à jour la ligne users (updated_at posé ici) et retourne la ligne à jour."""
    payload = dict(data)
    payload["updated_at"] = datetime.now(timezone.utc).isoformat()
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("users")
            .update(payload)
            .eq("id", user_id)
            .execute()
        )
    except Exception as e:
        logger.exception("users.repository.update_user failed id=%s fields=%s", user_id, sorted(data))
        raise UserStoreError(str(e)) from e
    row = _first(res)
    if not row:
        raise UserStoreError("User not found")
    return row

