from fastapi import APIRouter, HTTPException, Depends, Response
from pydantic import BaseModel, EmailStr, Field
from typing import Optional, Dict, Any

from bundlestore.utils.rate_limit import optional_rate_limit
from bundlestore.utils.security import require_user, set_session_cookie, clear_session_cookie
from .service import (
    login as svc_login,
    signup as svc_signup,
    update_profile as svc_update_profile,
    update_password as svc_update_password,
)

# --- API Router (/api/v1/auth) ---

api_router = APIRouter(prefix="/api/v1/auth", tags=["Auth API"])

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class SignupRequest(BaseModel):
    email: EmailStr
    password: str
    full_name: Optional[str] = Field(default=None, max_length=120)

class ProfileRequest(BaseModel):
    full_name: Optional[str] = Field(default=None, max_length=120)

class PasswordRequest(BaseModel):
    current_password: str
    new_password: str

def _session_payload(result, response: Response) -> Dict[str, Any]:
    set_session_cookie(response, result.access_token)
    return {"access_token": result.access_token, "token_type": "bearer", "user": result.user}

@api_router.post("/signup", dependencies=[Depends(optional_rate_limit(times=5, seconds=60))])
def api_signup(req: SignupRequest, response: Response):
    """Inscription (API JSON): crée le compte et ouvre directement la session (cookie + token)."""
    result = svc_signup(req.email, req.password, req.full_name)
    if not result.success:
        raise HTTPException(status_code=400, detail=result.error or "Sign up failed")
    return _session_payload(result, response)

@api_router.post("/login", dependencies=[Depends(optional_rate_limit(times=5, seconds=60))])
def api_login(req: LoginRequest, response: Response):
    """Connexion (API JSON).
    - Rate limit 5 requêtes / 60 s
    - Pose le cookie de session HttpOnly et retourne {access_token, token_type, user}
    """
    result = svc_login(req.email, req.password)
    if not result.success:
        raise HTTPException(status_code=401, detail=result.error or "Invalid email or password")
    return _session_payload(result, response)

@api_router.post("/logout")
def api_logout(response: Response):
    clear_session_cookie(response)
    return {"message": "Signed out"}

@api_router.get("/me")
def api_me(user: Dict[str, Any] = Depends(require_user)):
    return user

@api_router.put("/profile")
def api_update_profile(req: ProfileRequest, user: Dict[str, Any] = Depends(require_user)):
    result = svc_update_profile(user, req.full_name)
    if not result.success:
        raise HTTPException(status_code=400, detail=result.error or "Profile update failed")
    return {"message": "Profile updated successfully", "user": result.user}

@api_router.put("/password", dependencies=[Depends(optional_rate_limit(times=5, seconds=60))])
def api_update_password(req: PasswordRequest, user: Dict[str, Any] = Depends(require_user)):
    """Changement de mot de passe: mot de passe actuel obligatoire, nouveau >= 6 caractères."""
    result = svc_update_password(user, req.current_password, req.new_password)
    if not result.success:
        raise HTTPException(status_code=400, detail=result.error or "Password update failed")
    return {"message": "Password updated successfully"}
