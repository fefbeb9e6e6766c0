"""
Sérialisation/désérialisation des métadonnées portées par la transaction Paystack.
"""
import json
import secrets
import time
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Optional

# module bundlestore.payments.metadata
def parse_price(value: Any) -> Optional[Decimal]:
    """Decimal positif à 2 décimales, ou None si vide/invalide."""
    if value is None or value == "":
        return None
    try:
        price = Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        return None
    return price if price > 0 else None

def format_price(price: Decimal) -> str:
    return f"{Decimal(str(price)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)}"

def to_minor_units(price: Decimal) -> int:
    """GH₵ 20.00 -> 2000 (pesewas)."""
    return int((Decimal(str(price)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

def make_reference() -> str:
    """Référence unique d'une tentative de paiement: ORDER_<epoch-ms>_<aléa>."""
    return f"ORDER_{int(time.time() * 1000)}_{secrets.token_hex(4)}"

def make_metadata(
    *,
    user: Dict[str, Any],
    provider,
    bundle,
    recipient_number: str,
    payment_network: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Métadonnées transmises au widget puis relues lors de la vérification.
    - price est une chaîne à 2 décimales (comparée au montant réellement payé)
    - custom_fields: affichage côté tableau de bord Paystack
    """
    return {
        "user_id": user.get("id"),
        "provider_name": provider.name,
        "provider_logo": provider.logo,
        "provider_color": provider.color,
        "bundle_id": bundle.id,
        "data_amount": bundle.data_amount,
        "price": format_price(bundle.price),
        "recipient_number": recipient_number,
        "payment_network": payment_network or "",
        "custom_fields": [
            {"display_name": "Provider", "variable_name": "provider", "value": provider.name},
            {"display_name": "Bundle", "variable_name": "bundle", "value": bundle.data_amount},
            {"display_name": "Recipient", "variable_name": "recipient", "value": recipient_number},
        ],
    }

def extract_transaction_metadata(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Extrait data.metadata d'une transaction vérifiée.
    - Paystack peut renvoyer metadata sous forme de chaîne JSON: on la décode
    - Tolérant aux erreurs: retourne {} si absente ou illisible
    """
    meta = (data or {}).get("metadata") if isinstance(data, dict) else None
    if isinstance(meta, str):
        try:
            meta = json.loads(meta) if meta else {}
        except ValueError:
            meta = {}
    return meta if isinstance(meta, dict) else {}
