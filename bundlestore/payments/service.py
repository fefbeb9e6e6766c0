"""
Cas d'usage 'payments': checkout (tentative pending), annulation et vérification.

Machine à états unique (voir orders.models):
- le checkout enregistre une tentative 'pending' portant la référence émise par le serveur
- seule la vérification auprès de Paystack fait passer une commande à 'completed'
- une référence inconnue (référence générée côté client) n'est enregistrée qu'après
  confirmation, directement en 'completed'
- la contrainte unique orders.reference garantit au plus une commande par référence
"""
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple
import logging
from fastapi import HTTPException

from bundlestore import config
from bundlestore.catalog import service as catalog
from bundlestore.infra import supabase_client
from bundlestore.orders import repository
from bundlestore.orders import service as orders_service
from bundlestore.orders.models import COMPLETED, FAILED, PENDING, TERMINAL, transition
from bundlestore.utils.validators import normalize_phone_number
from . import paystack_client
from . import metadata as meta

logger = logging.getLogger(__name__)

MSG_VERIFIED = "Payment verified and order created successfully"
MSG_FAILED = "Payment verification failed"

class VerificationResult:
    def __init__(
        self,
        verified: bool,
        status_code: int = 200,
        order_id: Optional[str] = None,
        error: Optional[str] = None,
        message: Optional[str] = None,
    ):
        self.verified = verified
        self.status_code = status_code
        self.order_id = order_id
        self.error = error
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"verified": self.verified}
        if self.order_id is not None:
            body["orderId"] = self.order_id
        if self.message:
            body["message"] = self.message
        if self.error:
            body["error"] = self.error
        return body

def _failure(status_code: int, error: str) -> VerificationResult:
    return VerificationResult(False, status_code=status_code, error=error)

def _verified(order: Dict[str, Any]) -> VerificationResult:
    return VerificationResult(True, order_id=str(order.get("id")), message=MSG_VERIFIED)

# --- Checkout ---

def start_checkout(
    *,
    user: Dict[str, Any],
    provider_id: str,
    bundle_id: str,
    recipient_number: str,
    payment_network: Optional[str] = None,
) -> Dict[str, Any]:
    """Prépare le paiement d'un forfait pour l'utilisateur connecté.
    - Valide opérateur/forfait (catalogue) et numéro destinataire
    - Émet la référence et enregistre la tentative 'pending' (prix du catalogue)
    - Retourne la configuration du widget Paystack (montant en unité mineure)
    """
    if not config.PAYSTACK_PUBLIC_KEY:
        raise HTTPException(status_code=500, detail="Payment gateway configuration missing")
    found = catalog.find_bundle(provider_id, bundle_id)
    if not found:
        raise HTTPException(status_code=400, detail="Unknown provider or bundle")
    provider, bundle = found
    try:
        recipient = normalize_phone_number(recipient_number)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    reference = meta.make_reference()
    metadata = meta.make_metadata(
        user=user, provider=provider, bundle=bundle,
        recipient_number=recipient, payment_network=payment_network,
    )
    order = repository.insert_order({
        "reference": reference,
        "user_id": user.get("id"),
        "provider_name": provider.name,
        "provider_logo": provider.logo,
        "provider_color": provider.color,
        "bundle_id": bundle.id,
        "data_amount": bundle.data_amount,
        "price": float(bundle.price),
        "recipient_number": recipient,
        "mobile_money_number": "",
        "payment_network": payment_network or "",
        "status": transition(None, PENDING),
    })
    logger.info("payments.checkout reference=%s user_id=%s bundle=%s", reference, user.get("id"), bundle.id)
    return {
        "public_key": config.PAYSTACK_PUBLIC_KEY,
        "email": user.get("email"),
        "amount": meta.to_minor_units(bundle.price),
        "currency": config.PAYMENT_CURRENCY,
        "reference": reference,
        "orderId": str(order.get("id")),
        "metadata": metadata,
    }

def cancel_checkout(*, user: Dict[str, Any], reference: str) -> Dict[str, Any]:
    """Widget fermé sans paiement: la tentative 'pending' de l'utilisateur passe à 'failed'.
    Une commande 'completed' n'est jamais modifiée (409 via la machine à états)."""
    order = repository.get_order_by_reference((reference or "").strip())
    if not order or str(order.get("user_id") or "") != str(user.get("id") or ""):
        raise HTTPException(status_code=404, detail="Order not found")
    orders_service.change_status(str(order["id"]), FAILED, order=order)
    return {"status": "cancelled", "orderId": str(order["id"])}

# --- Vérification ---

def _expected_price(existing: Optional[dict], tx_meta: Dict[str, Any]) -> Tuple[Optional[Decimal], Optional[str]]:
    """
    Prix attendu pour la référence:
    - ligne existante (prix enregistré au checkout)
    - sinon prix catalogue du forfait (metadata.price doit concorder)
    - sinon metadata.price (forfait hors catalogue)
    """
    if existing:
        return meta.parse_price(existing.get("price")), None
    meta_price = meta.parse_price(tx_meta.get("price"))
    found = catalog.find_bundle_by_id(tx_meta.get("bundle_id") or "")
    if found:
        catalog_price = found[1].price
        if meta_price is not None and meta_price != catalog_price:
            return None, "Payment amount mismatch"
        return catalog_price, None
    if meta_price is None:
        return None, "Payment metadata incomplete"
    return meta_price, None

def _order_row_from_transaction(reference: str, data: Dict[str, Any], tx_meta: Dict[str, Any], price: Decimal) -> Dict[str, Any]:
    found = catalog.find_bundle_by_id(tx_meta.get("bundle_id") or "")
    provider, bundle = found if found else (None, None)
    customer = data.get("customer") or {}
    user_id = tx_meta.get("user_id") or None
    guest_name = " ".join(
        p for p in (customer.get("first_name"), customer.get("last_name")) if p
    ) or None
    return {
        "reference": reference,
        "user_id": user_id,
        "guest_email": None if user_id else (tx_meta.get("guest_email") or customer.get("email")),
        "guest_name": None if user_id else (tx_meta.get("guest_name") or guest_name),
        "provider_name": tx_meta.get("provider_name") or (provider.name if provider else None),
        "provider_logo": tx_meta.get("provider_logo") or (provider.logo if provider else None),
        "provider_color": tx_meta.get("provider_color") or (provider.color if provider else None),
        "bundle_id": tx_meta.get("bundle_id"),
        "data_amount": tx_meta.get("data_amount") or (bundle.data_amount if bundle else None),
        "price": float(price),
        "recipient_number": tx_meta.get("recipient_number"),
        "mobile_money_number": "",
        "payment_network": tx_meta.get("payment_network") or data.get("channel") or "",
        "status": transition(None, COMPLETED, payment_verified=True),
    }

def _mark_failed(order: Optional[dict]) -> None:
    if not order or order.get("status") in TERMINAL:
        return
    try:
        orders_service.change_status(str(order["id"]), FAILED, order=order)
    except HTTPException as e:
        logger.warning("payments.verify could not mark order failed id=%s: %s", order.get("id"), e.detail)

def _complete(order: dict) -> dict:
    return orders_service.change_status(str(order["id"]), COMPLETED, payment_verified=True, order=order)

def _record_verified(reference: str, data: Dict[str, Any], tx_meta: Dict[str, Any], price: Decimal) -> dict:
    """Insère la commande 'completed'; en cas d'appel concurrent, retourne la ligne déjà créée."""
    row = _order_row_from_transaction(reference, data, tx_meta, price)
    try:
        return repository.insert_order(row)
    except repository.DuplicateOrderReference:
        logger.info("payments.verify duplicate reference=%s, reusing existing order", reference)
        existing = repository.get_order_by_reference(reference)
        if not existing:
            raise repository.OrderStoreError(f"Order vanished for reference {reference}")
        if existing.get("status") == COMPLETED:
            return existing
        return _complete(existing)

def verify_payment(reference: str, order_id: Optional[str] = None) -> VerificationResult:
    """Vérifie un paiement auprès de Paystack puis enregistre/complète la commande.
    Étapes:
    1) Référence obligatoire (400), configuration passerelle/store (500)
    2) Commande déjà 'completed' pour la référence: réponse idempotente sans rappel passerelle
    3) Paystack verify: statut != success -> 400 verified:false (tentative pending -> failed)
    4) Montant payé == prix attendu, sinon 400
    5) Ligne existante -> completed (compare-and-set), sinon insertion 'completed'
    Erreurs store -> 500 (jamais de succès sans commande enregistrée).
    """
    reference = (reference or "").strip()
    if not reference:
        return _failure(400, "Missing payment reference")
    try:
        paystack_client.require_secret_key()
    except paystack_client.GatewayConfigurationError:
        logger.error("payments.verify PAYSTACK_SECRET_KEY missing")
        return _failure(500, "Payment gateway configuration missing")
    if not supabase_client.store_configured():
        logger.error("payments.verify Supabase service credentials missing")
        return _failure(500, "Store configuration missing")

    try:
        existing = repository.get_order_by_reference(reference)
        if order_id and (not existing or str(existing.get("id")) != str(order_id)):
            return _failure(400, "Order does not match payment reference")
        if existing and existing.get("status") == COMPLETED:
            return _verified(existing)

        try:
            envelope = paystack_client.verify_transaction(reference)
        except paystack_client.PaymentGatewayError:
            logger.exception("payments.verify gateway failure reference=%s", reference)
            return _failure(500, "Payment gateway unavailable")

        if not paystack_client.is_successful(envelope):
            tx_status = paystack_client.transaction_data(envelope).get("status") or envelope.get("message")
            logger.warning("payments.verify rejected reference=%s status=%s", reference, tx_status)
            _mark_failed(existing)
            return _failure(400, MSG_FAILED)

        data = paystack_client.transaction_data(envelope)
        tx_meta = meta.extract_transaction_metadata(data)
        if not existing and not (tx_meta.get("bundle_id") and tx_meta.get("recipient_number")):
            return _failure(400, "Payment metadata incomplete")

        expected, error = _expected_price(existing, tx_meta)
        if error or expected is None:
            return _failure(400, error or "Payment amount mismatch")
        amount = data.get("amount")
        if amount is not None and meta.parse_price(amount) != meta.parse_price(meta.to_minor_units(expected)):
            logger.warning("payments.verify amount mismatch reference=%s paid=%s expected=%s", reference, amount, expected)
            _mark_failed(existing)
            return _failure(400, "Payment amount mismatch")

        if existing:
            order = _complete(existing)
        else:
            order = _record_verified(reference, data, tx_meta, expected)
        logger.info("payments.verify ok reference=%s order_id=%s", reference, order.get("id"))
        return _verified(order)
    except HTTPException as e:
        return _failure(e.status_code, str(e.detail))
    except supabase_client.StoreConfigurationError:
        return _failure(500, "Store configuration missing")
    except repository.OrderStoreError:
        logger.exception("payments.verify store failure reference=%s", reference)
        return _failure(500, "Failed to record order, please contact support")
