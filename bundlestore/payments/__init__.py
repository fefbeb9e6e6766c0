"""
Module 'payments' (feature-first): point d'entrée public.
Réunit métadonnées de transaction, client Paystack et cas d'usage checkout/vérification.
"""

from .metadata import (
    parse_price,
    format_price,
    to_minor_units,
    make_reference,
    make_metadata,
    extract_transaction_metadata,
)
from .paystack_client import (
    GatewayConfigurationError,
    PaymentGatewayError,
    require_secret_key,
    verify_transaction,
)
from .service import VerificationResult, start_checkout, cancel_checkout, verify_payment

__all__ = [
    # metadata
    "parse_price",
    "format_price",
    "to_minor_units",
    "make_reference",
    "make_metadata",
    "extract_transaction_metadata",
    # paystack
    "GatewayConfigurationError",
    "PaymentGatewayError",
    "require_secret_key",
    "verify_transaction",
    # services
    "VerificationResult",
    "start_checkout",
    "cancel_checkout",
    "verify_payment",
]
