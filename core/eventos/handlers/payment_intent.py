"""
Handlers de payment_intent.*

La tabla pagos se indexa por stripe_session_id, así que para cada
payment_intent se busca primero su sesión de checkout en Stripe.
"""

import logging

from core.stripe_service import buscar_sesion_checkout
from database.models import Pago

logger = logging.getLogger(__name__)


def _receipt_url(intent):
    cargos = ((intent.get('charges') or {}).get('data')) or []
    if cargos:
        return cargos[0].get('receipt_url')
    return None


def handle_payment_intent_succeeded(evt, ctx):
    if evt.get('type', evt.get('_meta', {}).get('tipo')) != 'payment_intent.succeeded':
        return {'success': False, 'message': 'Tipo de evento inesperado'}

    intent = (evt.get('data') or {}).get('object') or {}
    intent_id = intent.get('id')
    logger.info(f"💳 payment_intent.succeeded {intent_id}")

    if intent.get('status') != 'succeeded':
        logger.warning(f"⚠️ Pago {intent_id} no exitoso: {intent.get('status')}")
        return {'success': True, 'message': 'Pago no exitoso'}

    if ctx.stripe is None:
        return {'success': False, 'error': 'Error obteniendo cliente Stripe'}

    sesion = buscar_sesion_checkout(ctx.stripe, intent_id)
    if sesion is None:
        logger.warning(f"⚠️ Sin sesión de checkout para payment_intent {intent_id}")
        return {'success': True, 'message': 'Pago recibido pero no se encontró sesión de checkout'}

    pagos = ctx.session.query(Pago).filter_by(stripe_session_id=sesion['id']).all()
    if not pagos:
        logger.warning(f"⚠️ Sin pago registrado para la sesión {sesion['id']}")
        return {'success': True, 'message': 'Pago recibido pero no se encontró registro para actualizar'}

    for pago in pagos:
        pago.status = 'succeeded'
        pago.stripe_payment_intent_id = intent_id
    ctx.session.flush()

    logger.info(f"✅ {len(pagos)} pago(s) actualizados para la sesión {sesion['id']}")
    return {'success': True, 'message': 'Pago recibido'}


def handle_payment_intent_event(evt, ctx):
    """Actualiza external_status y receipt_url para cualquier payment_intent.*"""
    intent = (evt.get('data') or {}).get('object') or {}
    intent_id = intent.get('id')
    logger.info(f"💳 {evt.get('type')} {intent_id} (status {intent.get('status')})")

    if ctx.stripe is None:
        return {'success': False, 'error': 'Error obteniendo cliente Stripe'}

    sesion = buscar_sesion_checkout(ctx.stripe, intent_id)
    if sesion is None:
        return {'success': False, 'error': 'No se encontró sesión de checkout'}

    actualizados = (
        ctx.session.query(Pago)
        .filter_by(stripe_session_id=sesion['id'])
        .update(
            {'external_status': intent.get('status'), 'receipt_url': _receipt_url(intent)},
            synchronize_session=False,
        )
    )
    logger.info(f"✅ Pago actualizado ({actualizados}) para payment_intent {intent_id}")
    return {'success': True, 'message': 'Pago actualizado'}
