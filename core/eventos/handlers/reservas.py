"""Handlers de eventos internos de reservas"""

import logging

from database.models import Reserva

logger = logging.getLogger(__name__)


def confirmar_reserva(ctx, reserva_id):
    """
    Marca la reserva como 'confirmed' y envía la confirmación al cliente.

    El email es best-effort: si falla, la reserva sigue confirmada.
    """
    reserva = ctx.session.get(Reserva, reserva_id)
    if reserva is None:
        logger.error(f"❌ Reserva {reserva_id} no encontrada")
        return {'success': False, 'error': f'Reserva {reserva_id} no encontrada'}

    if not reserva.email_cliente:
        logger.error(f"❌ Reserva {reserva_id} sin email de contacto")
        return {'success': False, 'error': 'Sin email de contacto'}

    reserva.estado = 'confirmed'
    reserva.cancelled_at = None
    ctx.session.flush()
    logger.info(f"✅ Reserva {reserva_id} confirmada")

    if ctx.email is not None:
        ctx.email.enviar_confirmacion_reserva(reserva)

    return {'success': True, 'message': 'Reserva confirmada'}


def handle_reserva_creada(payload, ctx):
    logger.info(f"📋 Procesando reserva.creada (reserva {payload.get('reservaId')})")
    return {'success': True, 'message': 'Evento reserva.creada procesado'}
