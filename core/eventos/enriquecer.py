"""Añade metadatos del outbox al payload que reciben los handlers."""


def categoria_de(tipo):
    """'checkout.session.completed' -> 'checkout'"""
    return (tipo or '').split('.')[0]


def enriquecer_payload(evento):
    """
    Copia el payload del evento y le añade `_meta`.

    Args:
        evento: fila de `eventos` (o cualquier objeto con los mismos atributos)

    Returns:
        dict con las claves del payload original más
        `_meta = {id, origen, tipo, categoria, recibido_en}`
    """
    payload = evento.payload
    if isinstance(payload, dict):
        enriquecido = dict(payload)
    elif payload is None:
        enriquecido = {}
    else:
        enriquecido = {'data': payload}

    recibido_en = evento.recibido_en
    enriquecido['_meta'] = {
        'id': evento.id,
        'origen': evento.origen,
        'tipo': evento.tipo,
        'categoria': categoria_de(evento.tipo),
        'recibido_en': recibido_en.isoformat() if recibido_en is not None else None,
    }
    return enriquecido
