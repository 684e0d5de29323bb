"""
OpenAPI/Swagger Configuration
Configuración para documentación de la API con flasgger
"""

# Configuración principal de Swagger
swagger_config = {
    "headers": [],
    "specs": [
        {
            "endpoint": 'apispec',
            "route": '/apispec.json',
            "rule_filter": lambda rule: rule.rule.startswith('/api/'),
            "model_filter": lambda tag: True,
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/api/docs"
}

_error = {
    "description": "",
    "content": {
        "application/json": {
            "schema": {
                "type": "object",
                "properties": {
                    "error": {"type": "string"}
                }
            }
        }
    }
}

# Plantilla base OpenAPI 3.0
swagger_template = {
    "openapi": "3.0.0",
    "info": {
        "title": "Reservas de Tours - Eventos API",
        "description": """
        Outbox de eventos y despachador de la plataforma de reservas.

        ## Flujo
        - Stripe envía webhooks, que se guardan como eventos 'pendiente'
        - Un cron llama a /api/trabajadores/procesar_lote
        - Cada evento pasa por sus handlers y termina 'procesado', 'error' o 'fallido'

        ## Autenticación
        Los endpoints de trabajadores y admin usan `Authorization: Bearer <token>`.

        ## Rate Limiting
        Los endpoints públicos están limitados por IP (RATELIMIT_PUBLICO).
        El webhook de Stripe y el worker no tienen límite.
        """,
        "version": "1.0.0",
    },
    "tags": [
        {"name": "Webhooks", "description": "Recepción de eventos externos"},
        {"name": "Trabajadores", "description": "Procesamiento del outbox"},
        {"name": "Admin", "description": "Operación del outbox (requieren token)"},
        {"name": "Público", "description": "Estado del servicio"}
    ],
    "components": {
        "securitySchemes": {
            "bearerAuth": {
                "type": "http",
                "scheme": "bearer"
            }
        },
        "responses": {
            "Unauthorized": dict(_error, description="No autenticado"),
            "NotFound": dict(_error, description="Recurso no encontrado"),
            "RateLimitExceeded": dict(_error, description="Límite de solicitudes excedido"),
            "ServerError": dict(_error, description="Error interno del servidor")
        }
    }
}

# Configuración de la UI de Swagger
swagger_ui_config = {
    "docExpansion": "list",
    "displayRequestDuration": True,
    "filter": True,
    "persistAuthorization": True
}
