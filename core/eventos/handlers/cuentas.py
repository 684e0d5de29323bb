"""Handlers de eventos de cuentas conectadas (Stripe Connect)"""

import logging

from core.errores import StripeServiceError
from core.stripe_service import sincronizar_estado_agencia

logger = logging.getLogger(__name__)


def _sincronizar(evt, ctx, descripcion):
    objeto = (evt.get('data') or {}).get('object') or {}
    # En account.application.* el objeto es la aplicación; la cuenta viene en evt['account']
    account_id = evt.get('account') or objeto.get('id')
    logger.info(f"🏦 Procesando {descripcion} para {account_id}")

    if ctx.stripe is None:
        return {'success': False, 'error': 'Error obteniendo cliente Stripe'}

    resultado = sincronizar_estado_agencia(ctx.session, ctx.stripe, account_id)
    if resultado.is_success:
        logger.info(f"✅ Estado de cuenta sincronizado: {resultado.value}")
        return {'success': True, 'message': f'{descripcion} procesado'}

    error = resultado.error
    if isinstance(error, StripeServiceError):
        # Fallo de la API de Stripe: merece reintento
        return {'success': False, 'error': str(error)}

    logger.error(f"❌ No se pudo sincronizar {account_id}: {error}")
    return {'success': True, 'message': f'{descripcion} ignorado: {error}'}


def handle_account_updated(evt, ctx):
    return _sincronizar(evt, ctx, 'account.updated')


def handle_account_authorized(evt, ctx):
    return _sincronizar(evt, ctx, 'account.application.authorized')


def handle_account_deauthorized(evt, ctx):
    return _sincronizar(evt, ctx, 'account.application.deauthorized')
