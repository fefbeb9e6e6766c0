from typing import Optional, Dict, Any
import bcrypt

from bundlestore import config
from bundlestore.auth.models import AuthResponse, build_user_dict, failure, handle_exception
from bundlestore.users import repository as users_repository
from bundlestore.utils.security import issue_session_token
from bundlestore.utils.validators import validate_password_length

MSG_USER_EXISTS = "User with this email already exists"
MSG_INVALID_CREDENTIALS = "Invalid email or password"
MSG_BAD_CURRENT_PASSWORD = "Current password is incorrect"

# Hash factice: login d'un email inconnu coûte autant qu'un vrai contrôle
_DUMMY_HASH = bcrypt.hashpw(b"bundlestore-dummy-password", bcrypt.gensalt()).decode("utf-8")

def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")

def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password or not password_hash:
        return False
    if len(password.encode("utf-8")) > config.MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Hash stocké invalide
        return False

def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()

def _session_response(row: Dict[str, Any]) -> AuthResponse:
    user = build_user_dict(row)
    return AuthResponse(True, user=user, token=issue_session_token(user["id"]))

# --- Cas d'usage Auth exposés ---

def signup(email: str, password: str, full_name: Optional[str] = None) -> AuthResponse:
    """Inscription:
    - Mot de passe d'au moins MIN_PASSWORD_LENGTH caractères
    - Email déjà utilisé: contrôle préalable, puis contrainte unique (appels concurrents)
    - Hash bcrypt côté serveur, is_admin=False
    - Retourne une session ouverte (token signé)
    """
    email = _normalize_email(email)
    try:
        validate_password_length(password)
    except ValueError as e:
        return failure(str(e))
    if users_repository.get_user_by_email(email):
        return failure(MSG_USER_EXISTS)
    try:
        row = users_repository.insert_user(
            email=email,
            password_hash=hash_password(password),
            full_name=(full_name or "").strip() or None,
        )
    except users_repository.DuplicateUserEmail:
        return failure(MSG_USER_EXISTS)
    except Exception as e:
        return handle_exception("sign up", e)
    return _session_response(row)

def login(email: str, password: str) -> AuthResponse:
    """Connexion: message unique en cas d'échec (ne révèle pas si l'email existe)."""
    row = users_repository.get_user_by_email(_normalize_email(email))
    if not row:
        verify_password(password or "x", _DUMMY_HASH)
        return failure(MSG_INVALID_CREDENTIALS)
    if not verify_password(password, row.get("password_hash")):
        return failure(MSG_INVALID_CREDENTIALS)
    return _session_response(row)

def get_user_for_session(user_id: str) -> Optional[Dict[str, Any]]:
    row = users_repository.get_user_by_id(user_id)
    return build_user_dict(row) if row else None

def update_profile(user: Dict[str, Any], full_name: Optional[str]) -> AuthResponse:
    if not user or not user.get("id"):
        return failure("Not authenticated")
    try:
        row = users_repository.update_user(user["id"], {"full_name": (full_name or "").strip() or None})
    except Exception as e:
        return handle_exception("update profile", e)
    return AuthResponse(True, user=build_user_dict(row))

def update_password(user: Dict[str, Any], current_password: str, new_password: str) -> AuthResponse:
    """Changement de mot de passe:
    - Revérifie le mot de passe actuel contre le hash stocké
    - Refuse un nouveau mot de passe trop court
    """
    if not user or not user.get("id"):
        return failure("Not authenticated")
    row = users_repository.get_user_by_id(user["id"])
    if not row or not verify_password(current_password, row.get("password_hash")):
        return failure(MSG_BAD_CURRENT_PASSWORD)
    try:
        validate_password_length(new_password)
    except ValueError as e:
        return failure(str(e))
    try:
        row = users_repository.update_user(user["id"], {"password_hash": hash_password(new_password)})
    except Exception as e:
        return handle_exception("update password", e)
    return AuthResponse(True, user=build_user_dict(row))
