from fastapi import Request, HTTPException, Depends
from fastapi.responses import Response
from typing import Optional, Dict, Any
from itsdangerous import URLSafeTimedSerializer, BadSignature
from bundlestore import config

COOKIE_NAME = "bs_session"
_SALT = "bundlestore-session"

"""
Session serveur: jeton signé et daté (itsdangerous), transporté en cookie HttpOnly
ou en en-tête Authorization: Bearer. Le jeton ne contient que l'id utilisateur;
le profil est relu depuis la table users à chaque requête (pas de cache client de confiance).
"""

def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(config.SESSION_SECRET_KEY, salt=_SALT)

def issue_session_token(user_id: str) -> str:
    return _serializer().dumps({"uid": str(user_id)})

def read_session_token(token: str) -> Optional[str]:
    """Retourne l'id utilisateur si la signature est valide et non expirée (SESSION_MAX_AGE), sinon None."""
    if not token:
        return None
    try:
        payload = _serializer().loads(token, max_age=config.SESSION_MAX_AGE)
    except BadSignature:
        return None
    uid = (payload or {}).get("uid") if isinstance(payload, dict) else None
    return str(uid) if uid else None

def set_session_cookie(response: Response, token: str):
    response.set_cookie(
        key=COOKIE_NAME,
        value=token,
        httponly=True,
        secure=config.COOKIE_SECURE,
        samesite="Lax",
        max_age=config.SESSION_MAX_AGE,
        path="/",
    )

def clear_session_cookie(response: Response):
    response.delete_cookie(COOKIE_NAME, path="/")

def _token_from_request(request: Request) -> Optional[str]:
    # Hybride: priorité au Bearer, fallback cookie
    token = None
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header[7:].strip()
    if not token:
        token = request.cookies.get(COOKIE_NAME)
    return token

def _resolve_user(request: Request, missing_detail: str) -> Dict[str, Any]:
    token = _token_from_request(request)
    if not token:
        raise HTTPException(status_code=401, detail=missing_detail)
    user_id = read_session_token(token)
    if not user_id:
        raise HTTPException(status_code=401, detail="Session expired, please log in again")
    # Délégué au service Auth (relit la ligne users); une configuration
    # Supabase absente remonte en 500 via le handler StoreConfigurationError
    from bundlestore.auth.service import get_user_for_session
    user = get_user_for_session(user_id)
    if not user or not user.get("id"):
        raise HTTPException(status_code=401, detail="Session expired, please log in again")
    return user

def get_current_user(request: Request) -> Dict[str, Any]:
    return _resolve_user(request, "Not authenticated")

def require_user(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    return user

def require_checkout_user(request: Request) -> Dict[str, Any]:
    """Même contrôle que require_user, avec le message « compte requis » du parcours d'achat."""
    return _resolve_user(request, "Please log in to complete your purchase")

def require_admin(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    if not user.get("is_admin"):
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
