import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Request, Depends
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from pydantic import BaseModel

from bundlestore.utils.security import require_checkout_user, require_user
from bundlestore.utils.rate_limit import optional_rate_limit
from bundlestore.payments import service as payments_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/payments", tags=["Payments API"])

class CheckoutRequest(BaseModel):
    provider_id: str
    bundle_id: str
    recipient_number: str
    payment_network: Optional[str] = None

class CancelRequest(BaseModel):
    reference: str

# module bundlestore.payments.views
@router.post("/checkout", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def create_checkout(body: CheckoutRequest, user: Dict[str, Any] = Depends(require_checkout_user)):
    """
    Prépare le paiement d'un forfait (widget Paystack côté client).
    - Entrée JSON: {provider_id, bundle_id, recipient_number, payment_network?}
    - Sécurité: session obligatoire (401 « Please log in to complete your purchase ») + rate limit
    - Retour: {public_key, email, amount (unité mineure), currency, reference, orderId, metadata}
    - Erreurs: 400 forfait/numéro invalide, 500 configuration ou store
    """
    return payments_service.start_checkout(
        user=user,
        provider_id=body.provider_id,
        bundle_id=body.bundle_id,
        recipient_number=body.recipient_number,
        payment_network=body.payment_network,
    )

@router.post("/cancel")
def cancel_checkout(body: CancelRequest, user: Dict[str, Any] = Depends(require_user)):
    """Widget fermé sans paiement: la tentative pending passe à failed."""
    return payments_service.cancel_checkout(user=user, reference=body.reference)

@router.post("/verify", dependencies=[Depends(optional_rate_limit(times=20, seconds=60))])
async def verify_payment(request: Request):
    """
    Fonction de vérification: confirme le paiement auprès de Paystack avant d'enregistrer la commande.
    - Entrée JSON: {"reference": "...", "orderId": "..."?}
    - Pas de session requise: la passerelle est la source de confiance
    - Réponses: 200 {verified:true, orderId, message}, 400/409/500 {verified:false, error}
    """
    try:
        body = await request.json()
    except ValueError:
        logger.warning("payments.verify invalid JSON body")
        body = {}
    if not isinstance(body, dict):
        body = {}
    reference = str(body.get("reference") or "")
    order_id = body.get("orderId") or body.get("order_id")
    # Appels Paystack et Supabase bloquants: hors de la boucle d'événements
    result = await run_in_threadpool(
        payments_service.verify_payment, reference, order_id=str(order_id) if order_id else None,
    )
    return JSONResponse(result.to_dict(), status_code=result.status_code)
