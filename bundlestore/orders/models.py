# module bundlestore.orders.models
"""
Statuts de commande et machine à états (unique fonction de transition).

- pending    : tentative de paiement enregistrée au checkout, pas encore confirmée
- processing : paiement signalé en cours de traitement (action admin)
- completed  : paiement confirmé par la passerelle (seule la vérification y mène)
- failed     : paiement refusé, abandonné ou annulé
completed et failed sont terminaux: une nouvelle tentative passe par une nouvelle référence.
"""
from typing import Dict, FrozenSet, Optional

PENDING = "pending"
PROCESSING = "processing"
COMPLETED = "completed"
FAILED = "failed"

STATUSES: FrozenSet[str] = frozenset({PENDING, PROCESSING, COMPLETED, FAILED})
TERMINAL: FrozenSet[str] = frozenset({COMPLETED, FAILED})

ALLOWED_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    PENDING: frozenset({PROCESSING, COMPLETED, FAILED}),
    PROCESSING: frozenset({COMPLETED, FAILED}),
    COMPLETED: frozenset(),
    FAILED: frozenset(),
}

class InvalidTransition(ValueError):
    def __init__(self, current: Optional[str], target: str, reason: str):
        super().__init__(reason)
        self.current = current
        self.target = target
        self.reason = reason

def normalize_status(value: Optional[str]) -> str:
    status = (value or "").strip().lower()
    if status not in STATUSES:
        raise InvalidTransition(None, status, f"Unknown order status: {value!r}")
    return status

def transition(current: Optional[str], target: str, *, payment_verified: bool = False) -> str:
    """
    Valide le passage current -> target et retourne le statut cible.
    - current=None: création de la ligne (pending, ou completed après paiement vérifié)
    - completed exige payment_verified=True (preuve de paiement de la passerelle)
    - current == target: no-op idempotent
    Soulève InvalidTransition sinon.
    """
    target = normalize_status(target)
    if target == COMPLETED and not payment_verified:
        raise InvalidTransition(current, target, "Order can only be completed by a verified payment")
    if current is None:
        if target not in (PENDING, COMPLETED):
            raise InvalidTransition(current, target, f"Order cannot be created as {target}")
        return target
    current = normalize_status(current)
    if current == target:
        return target
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransition(current, target, f"Illegal status transition {current} -> {target}")
    return target
