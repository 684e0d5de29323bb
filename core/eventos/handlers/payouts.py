"""Handler de payout.failed"""

import logging

from database.models import Agencia, PayoutStripe, ahora_utc

logger = logging.getLogger(__name__)

# Códigos que indican un problema con la cuenta bancaria de la agencia
CODIGOS_PROBLEMA_BANCO = ('bank_account_restricted', 'account_closed', 'bank_account_unusable')


def handle_payout_failed(evt, ctx):
    payout = (evt.get('data') or {}).get('object') or {}
    account_id = evt.get('account')
    failure_code = payout.get('failure_code')

    logger.error(
        f"❌ Payout fallido {payout.get('id')}: {payout.get('failure_message')} "
        f"({failure_code}, cuenta {account_id or 'principal'})"
    )

    agencia = None
    if account_id:
        agencia = ctx.session.query(Agencia).filter_by(stripe_account_id=account_id).first()
        if agencia is None:
            logger.warning(f"⚠️ Sin agencia para la cuenta {account_id}")

    ctx.session.add(PayoutStripe(
        payout_id=payout.get('id'),
        agencia_id=agencia.id if agencia else None,
        stripe_account_id=account_id,
        amount=payout.get('amount'),
        currency=payout.get('currency'),
        status='failed',
        failure_code=failure_code,
        failure_message=payout.get('failure_message'),
    ))

    if agencia is not None and failure_code in CODIGOS_PROBLEMA_BANCO:
        agencia.requiere_revision = True
        agencia.estado_pago = 'problema_banco'
        agencia.fecha_actualizacion = ahora_utc()
        logger.warning(f"⚠️ Agencia {agencia.id} marcada para revisión ({failure_code})")

    ctx.session.flush()

    if ctx.email is not None:
        if agencia is not None:
            ctx.email.enviar_payout_fallido(agencia, payout)
        ctx.email.enviar_alerta_interna_payout(agencia, payout)

    return {'success': True, 'message': 'Payout fallido registrado'}
