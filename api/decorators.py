"""
Decoradores de la API: autenticación por token y documentación Swagger
"""

import hmac
import logging
from functools import wraps

from flask import current_app, jsonify, request
from flasgger import swag_from

from api.schemas import (
    webhook_stripe_schema,
    procesar_lote_schema,
    reintentar_evento_schema,
    listar_eventos_schema,
    salud_schema,
)

logger = logging.getLogger(__name__)


def _token_bearer():
    cabecera = request.headers.get('Authorization', '')
    if not cabecera.startswith('Bearer '):
        return None
    return cabecera[len('Bearer '):].strip() or None


def requiere_token(config_key, obligatorio=True):
    """
    Exige `Authorization: Bearer <token>` igual a app.config[config_key].

    Si el token no está configurado el endpoint queda cerrado (401), salvo
    con obligatorio=False, en cuyo caso queda abierto.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            esperado = current_app.config.get(config_key)
            if not esperado and not obligatorio:
                return f(*args, **kwargs)
            recibido = _token_bearer()
            if not esperado or not recibido or not hmac.compare_digest(recibido.encode(), esperado.encode()):
                logger.warning(f"🚫 Acceso denegado a {request.path} desde {request.remote_addr}")
                return jsonify({'error': 'No autorizado'}), 401
            return f(*args, **kwargs)
        return decorated_function
    return decorator


ESQUEMAS_POR_ENDPOINT = {
    'webhooks.stripe_webhook': webhook_stripe_schema,
    'trabajadores.procesar_lote': procesar_lote_schema,
    'admin_eventos.reintentar_evento': reintentar_evento_schema,
    'admin_eventos.listar_eventos': listar_eventos_schema,
    'publico.salud': salud_schema,
}


def documentar_endpoints(app):
    """
    Agrega documentación Swagger a los endpoints registrados
    Esta función debe llamarse después de registrar todos los blueprints
    """
    for endpoint, schema in ESQUEMAS_POR_ENDPOINT.items():
        if endpoint in app.view_functions:
            app.view_functions[endpoint] = swag_from(schema)(app.view_functions[endpoint])
