"""
Escritura en el outbox (`eventos`).

`publicar_evento` no hace commit: debe llamarse dentro de la misma
transacción que la lógica de negocio que genera el evento.
"""

import logging

from sqlalchemy.exc import IntegrityError

from database.models import Evento, PENDIENTE, ahora_utc

logger = logging.getLogger(__name__)


def publicar_evento(session, origen, tipo, payload, externo_id=None):
    """Añade un evento 'pendiente' a la sesión del llamador y lo devuelve."""
    if not origen or not tipo:
        raise ValueError('origen y tipo son obligatorios para publicar un evento')

    evento = Evento(
        origen=origen,
        tipo=tipo,
        payload=payload if payload is not None else {},
        externo_id=externo_id,
        estado=PENDIENTE,
        intentos=0,
        recibido_en=ahora_utc(),
    )
    session.add(evento)
    session.flush()
    logger.debug(f"📨 Evento publicado {evento.id} ({origen}/{tipo})")
    return evento


def buscar_evento_externo(session, origen, externo_id):
    if not externo_id:
        return None
    return session.query(Evento).filter_by(origen=origen, externo_id=externo_id).first()


def registrar_evento_externo(session, origen, tipo, payload, externo_id):
    """
    Inserta un evento recibido de un proveedor externo y hace commit.

    Si el proveedor reenvía un evento ya registrado (mismo origen y
    externo_id) devuelve la fila existente.

    Returns:
        (evento, creado)
    """
    existente = buscar_evento_externo(session, origen, externo_id)
    if existente is not None:
        logger.info(f"🔁 Evento {origen}/{externo_id} ya registrado ({existente.estado})")
        return existente, False

    try:
        evento = publicar_evento(session, origen, tipo, payload, externo_id=externo_id)
        session.commit()
        return evento, True
    except IntegrityError:
        # Otra petición insertó el mismo evento entre la consulta y el insert
        session.rollback()
        existente = buscar_evento_externo(session, origen, externo_id)
        if existente is None:
            raise
        logger.info(f"🔁 Evento {origen}/{externo_id} insertado en paralelo, se reutiliza")
        return existente, False
