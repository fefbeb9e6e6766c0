"""
Adaptateur Paystack: centralise la configuration et les appels HTTP (httpx).
Seule l'opération serveur « verify by reference » est utilisée; l'initiation du
paiement se fait côté client via le widget (clé publique).
"""
from typing import Any, Dict
from urllib.parse import quote
import logging
import httpx

from bundlestore import config

logger = logging.getLogger(__name__)

class GatewayConfigurationError(RuntimeError):
    pass

class PaymentGatewayError(RuntimeError):
    """Passerelle injoignable ou réponse inexploitable (timeout, 5xx, corps non JSON)."""

# module bundlestore.payments.paystack_client
def require_secret_key() -> str:
    """
    Retourne PAYSTACK_SECRET_KEY ou soulève GatewayConfigurationError.
    """
    if not config.PAYSTACK_SECRET_KEY:
        raise GatewayConfigurationError("PAYSTACK_SECRET_KEY manquant")
    return config.PAYSTACK_SECRET_KEY

def verify_transaction(reference: str) -> Dict[str, Any]:
    """
    GET {PAYSTACK_BASE_URL}/transaction/verify/{reference} avec Authorization: Bearer <secret>.
    Retour: l'enveloppe JSON Paystack {status: bool, message, data: {status, amount, metadata, ...}}.
    - Les réponses 4xx JSON (ex: référence inconnue) sont retournées telles quelles (status=false)
    - PaymentGatewayError sur erreur réseau, 5xx ou corps non JSON
    """
    secret = require_secret_key()
    url = f"{config.PAYSTACK_BASE_URL}/transaction/verify/{quote(reference, safe='')}"
    headers = {
        "Authorization": f"Bearer {secret}",
        "Content-Type": "application/json",
    }
    try:
        resp = httpx.get(url, headers=headers, timeout=config.PAYSTACK_TIMEOUT)
    except httpx.HTTPError as e:
        raise PaymentGatewayError(f"Paystack unreachable: {e}") from e

    if resp.status_code >= 500:
        raise PaymentGatewayError(f"Paystack error status={resp.status_code}")
    try:
        body = resp.json()
    except ValueError as e:
        raise PaymentGatewayError(f"Invalid Paystack response status={resp.status_code}") from e
    if not isinstance(body, dict):
        raise PaymentGatewayError("Invalid Paystack response body")
    return body

def transaction_data(envelope: Dict[str, Any]) -> Dict[str, Any]:
    """data de la transaction si l'enveloppe est valide (status=true), sinon {}."""
    if not (envelope or {}).get("status"):
        return {}
    data = envelope.get("data")
    return data if isinstance(data, dict) else {}

def is_successful(envelope: Dict[str, Any]) -> bool:
    return str(transaction_data(envelope).get("status") or "").lower() == "success"
