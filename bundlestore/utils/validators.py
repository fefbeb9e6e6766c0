import re
from bundlestore import config

_PHONE_RE = re.compile(r"^\+?\d{9,15}$")

def validate_password_length(v: str) -> str:
    if len(v or "") < config.MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {config.MIN_PASSWORD_LENGTH} characters")
    if len((v or "").encode("utf-8")) > config.MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {config.MAX_PASSWORD_BYTES} bytes")
    return v

def normalize_phone_number(v: str) -> str:
    """
    Numéro du destinataire: espaces, tirets et parenthèses retirés,
    puis chiffres uniquement (préfixe + toléré), 9 à 15 chiffres.
    """
    number = re.sub(r"[\s\-()]", "", v or "")
    if not number:
        raise ValueError("Please enter a recipient phone number")
    if not _PHONE_RE.match(number):
        raise ValueError("Invalid recipient phone number")
    return number
