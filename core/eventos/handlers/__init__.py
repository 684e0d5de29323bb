"""
Handlers de eventos

Firma común: handler(payload, ctx) -> {'success': bool, 'message'?, 'error'?}
"""

from .checkout import handle_checkout_session_completed
from .payment_intent import handle_payment_intent_succeeded, handle_payment_intent_event
from .cuentas import handle_account_updated, handle_account_authorized, handle_account_deauthorized
from .payouts import handle_payout_failed
from .reservas import handle_reserva_creada, confirmar_reserva

__all__ = [
    'handle_checkout_session_completed',
    'handle_payment_intent_succeeded',
    'handle_payment_intent_event',
    'handle_account_updated',
    'handle_account_authorized',
    'handle_account_deauthorized',
    'handle_payout_failed',
    'handle_reserva_creada',
    'confirmar_reserva',
]
