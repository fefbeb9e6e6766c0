# bundlestore.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=True)

"""
Configuration centrale du backend.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les secrets/URLs (Supabase, Paystack), sécurité cookies/session, CORS/hosts
- Aucune valeur manquante n'est fatale à l'import: les opérations qui en dépendent
  renvoient une erreur de configuration (HTTP 500) au moment de l'appel
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _int_env(name: str, default: int) -> int:
    try:
        return int(_clean_env(os.getenv(name) or "") or default)
    except ValueError:
        return default

# Supabase: URL et clés (anon/service)
# - SUPABASE_URL peut parfois être sans schéma: on préfixe en https:// si nécessaire
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or "")
SUPABASE_ANON = _clean_env(os.getenv("SUPABASE_ANON_KEY") or os.getenv("SUPABASE_KEY") or "")
SUPABASE_SERVICE_KEY = _clean_env(os.getenv("SUPABASE_SERVICE_KEY") or os.getenv("SUPABASE_SERVICE_ROLE_KEY") or "")

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
if SUPABASE_URL.endswith("/"):
    SUPABASE_URL = SUPABASE_URL.rstrip("/")

# Paystack: clé publique (widget côté client) et clé secrète (vérification côté serveur)
PAYSTACK_PUBLIC_KEY = _clean_env(os.getenv("PAYSTACK_PUBLIC_KEY") or "")
PAYSTACK_SECRET_KEY = _clean_env(os.getenv("PAYSTACK_SECRET_KEY") or "")
PAYSTACK_BASE_URL = (_clean_env(os.getenv("PAYSTACK_BASE_URL") or "") or "https://api.paystack.co").rstrip("/")
PAYSTACK_TIMEOUT = _int_env("PAYSTACK_TIMEOUT", 10)
PAYMENT_CURRENCY = _clean_env(os.getenv("PAYMENT_CURRENCY") or "") or "GHS"

# Session signée (itsdangerous) et cookies
SESSION_SECRET_KEY = _clean_env(os.getenv("SESSION_SECRET_KEY") or "") or "replace_me_with_a_long_random_secret"
SESSION_MAX_AGE = _int_env("SESSION_MAX_AGE", 7 * 24 * 60 * 60)
COOKIE_SECURE = (os.getenv("COOKIE_SECURE", "false").lower() == "true")

# Mots de passe (bcrypt ne hache que les 72 premiers octets)
MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_BYTES = 72

# CORS: la fonction de vérification est appelée depuis n'importe quelle origine
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
# Hôtes acceptés par TrustedHostMiddleware, indépendants de CORS ("*" désactive le contrôle)
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if h.strip()]

BASE_URL = _clean_env(os.getenv("BASE_URL") or "http://localhost:8000")
