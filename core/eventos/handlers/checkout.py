"""
Handler de checkout.session.completed: registra el pago y confirma la reserva
"""

import logging

from database.models import Pago
from core.eventos.handlers.reservas import confirmar_reserva

logger = logging.getLogger(__name__)


def _a_entero(valor):
    try:
        return int(valor)
    except (TypeError, ValueError):
        return None


def handle_checkout_session_completed(evt, ctx):
    if evt.get('type', evt.get('_meta', {}).get('tipo')) != 'checkout.session.completed':
        return {'success': False, 'message': 'Tipo de evento inesperado'}

    session = (evt.get('data') or {}).get('object') or {}
    metadata = session.get('metadata') or {}
    reserva_id = metadata.get('reservaId')
    agencia_id = metadata.get('agenciaId')
    payment_status = session.get('payment_status')

    logger.info(f"💳 checkout.session.completed {session.get('id')} (reserva {reserva_id})")

    # ----- Pago no completado -----
    if payment_status != 'paid':
        logger.warning(f"⚠️ Pago no completado: sesión {session.get('id')}, estado {payment_status}")
        if ctx.email is not None:
            ctx.email.enviar_pago_no_completado(session.get('id'), reserva_id, payment_status, agencia_id)
        return {'success': False, 'error': f'Pago no completado ({payment_status})'}

    reserva_id = _a_entero(reserva_id)
    if reserva_id is None:
        return {'success': False, 'error': 'Sin reservaId válido en metadata'}

    # ----- Registro del pago (idempotente por sesión) -----
    customer = session.get('customer_details') or {}
    fee_cents = _a_entero(metadata.get('feeFloraPlusCents', metadata.get('feePlataformaCents'))) or 0
    amount = (session.get('amount_total') or 0) / 100

    pago = ctx.session.query(Pago).filter_by(stripe_session_id=session.get('id')).first()
    if pago is None:
        pago = Pago(stripe_session_id=session.get('id'))
        ctx.session.add(pago)
        logger.info(f"💰 Creando pago para reserva {reserva_id}: {amount} {session.get('currency')}")
    else:
        logger.info(f"🔁 Pago {pago.id} ya existía para la sesión {session.get('id')}, se actualiza")

    pago.reserva_id = reserva_id
    pago.agencia_id = _a_entero(agencia_id)
    pago.stripe_payment_intent_id = session.get('payment_intent')
    pago.customer_email = customer.get('email')
    pago.customer_name = customer.get('name')
    pago.status = 'succeeded'
    pago.external_status = payment_status
    pago.amount = amount
    pago.currency = session.get('currency') or 'usd'
    pago.fee_plataforma = fee_cents / 100
    ctx.session.flush()

    # ----- Confirmación de reserva -----
    return confirmar_reserva(ctx, reserva_id)
