from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

PUBLIC_USER_FIELDS = ("id", "email", "full_name", "is_admin", "created_at", "updated_at")

class AuthResponse:
    def __init__(
        self,
        success: bool,
        user: Optional[Dict[str, Any]] = None,
        token: Optional[str] = None,
        error: Optional[str] = None,
    ):
        self.success = success
        self.user = user
        self.token = token
        self.error = error

    @property
    def access_token(self):
        return self.token

def determine_role(row: Dict[str, Any]) -> str:
    return "admin" if row.get("is_admin") else "user"

def build_user_dict(row: Dict[str, Any]) -> Dict[str, Any]:
    """Vue publique d'une ligne users: jamais le hash du mot de passe."""
    user = {k: row.get(k) for k in PUBLIC_USER_FIELDS}
    user["id"] = str(user["id"]) if user.get("id") is not None else None
    user["is_admin"] = bool(user.get("is_admin"))
    user["role"] = determine_role(row)
    return user

def failure(error: str) -> AuthResponse:
    return AuthResponse(False, error=error)

def handle_exception(action: str, e: Exception) -> AuthResponse:
    logger.exception("Erreur %s", action)
    return AuthResponse(False, error=f"Unable to {action}, please try again")
