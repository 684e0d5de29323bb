"""
Integración con Stripe: cliente, verificación de webhooks y sincronización
de cuentas conectadas de las agencias.
"""

import os
import logging

import stripe

from core.errores import FirmaWebhookInvalidaError, StripeServiceError
from core.resultado import Resultado
from database.models import Agencia, ahora_utc

logger = logging.getLogger(__name__)


def obtener_cliente_stripe(api_key=None):
    """Devuelve el módulo stripe configurado, o un fallo si no hay clave."""
    api_key = api_key or os.getenv('STRIPE_SECRET_KEY')
    if not api_key:
        return Resultado.fail('STRIPE_SECRET_KEY no está configurada')
    stripe.api_key = api_key
    return Resultado.ok(stripe)


def verificar_firma_webhook(payload, firma, secreto, tolerancia=300):
    """
    Verifica la cabecera Stripe-Signature (HMAC-SHA256, comparación en
    tiempo constante y ventana de tolerancia en segundos).

    Returns:
        El evento de Stripe construido a partir del payload
    Raises:
        FirmaWebhookInvalidaError si la firma o el payload no son válidos
    """
    if not firma:
        raise FirmaWebhookInvalidaError('Firma del webhook no proporcionada')
    try:
        evento = stripe.Webhook.construct_event(payload, firma, secreto, tolerance=tolerancia)
    except stripe.SignatureVerificationError as e:
        logger.error(f"⚠️ Firma de webhook inválida: {e}")
        raise FirmaWebhookInvalidaError(f"Webhook Error: {e}") from e
    except ValueError as e:
        logger.error(f"⚠️ Payload de webhook inválido: {e}")
        raise FirmaWebhookInvalidaError(f"Webhook Error: payload inválido ({e})") from e

    logger.info(f"✅ Webhook verificado: {evento['type']} ({evento['id']})")
    return evento


def buscar_sesion_checkout(cliente, payment_intent_id):
    """Primera sesión de checkout asociada a un payment_intent, o None."""
    try:
        sesiones = cliente.checkout.Session.list(payment_intent=payment_intent_id, limit=1)
    except stripe.StripeError as e:
        raise StripeServiceError(
            'Error listando sesiones de checkout', e,
            {'payment_intent_id': payment_intent_id}
        ) from e

    datos = sesiones.get('data') if isinstance(sesiones, dict) else getattr(sesiones, 'data', None)
    if not datos:
        return None
    return datos[0]


def cuenta_deberia_estar_activa(cuenta):
    requisitos = cuenta.get('requirements') or {}
    return bool(
        cuenta.get('charges_enabled')
        and cuenta.get('details_submitted')
        and not requisitos.get('disabled_reason')
    )


def sincronizar_estado_agencia(session, cliente, stripe_account_id):
    """
    Alinea `Agencia.activa` con el estado real de la cuenta en Stripe.

    No hace commit: el despachador confirma la transacción al terminar
    todos los handlers del evento.
    """
    agencia = session.query(Agencia).filter_by(stripe_account_id=stripe_account_id).first()
    if agencia is None:
        return Resultado.fail('No existe una agencia asociada a esta cuenta Stripe')

    try:
        cuenta = cliente.Account.retrieve(stripe_account_id)
    except stripe.StripeError as e:
        error = StripeServiceError(
            'Error al obtener la cuenta de Stripe', e,
            {'stripe_account_id': stripe_account_id, 'agencia_id': agencia.id}
        )
        logger.error(f"❌ {error} {error.to_dict()}")
        return Resultado.fail(error)

    activa = cuenta_deberia_estar_activa(cuenta)
    if agencia.activa != activa:
        logger.info(
            f"🔄 Agencia {agencia.id}: activa {agencia.activa} -> {activa} "
            f"(charges={cuenta.get('charges_enabled')}, details={cuenta.get('details_submitted')})"
        )
        agencia.activa = activa
        agencia.fecha_actualizacion = ahora_utc()

    return Resultado.ok({'agencia_id': agencia.id, 'activa': activa})
