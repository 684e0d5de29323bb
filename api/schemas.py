"""
OpenAPI Schemas
Definiciones de esquemas para request/response de la API
"""

_error_json = {
    "application/json": {
        "schema": {
            "type": "object",
            "properties": {
                "error": {"type": "string"}
            }
        }
    }
}

_stats_lote = {
    "type": "object",
    "properties": {
        "reclamados": {"type": "integer", "example": 3},
        "procesados": {"type": "integer", "example": 2},
        "errores": {"type": "integer", "example": 1},
        "fallidos": {"type": "integer", "example": 0},
        "sin_resolver": {"type": "integer", "example": 0},
        "liberados": {"type": "integer", "example": 0},
        "reencolados": {"type": "integer", "example": 1},
        "finalizado_en": {"type": "string", "format": "date-time"}
    }
}

# ==================== WEBHOOKS ====================

webhook_stripe_schema = {
    "tags": ["Webhooks"],
    "summary": "Webhook de Stripe",
    "description": """
    Recibe eventos de Stripe. Se verifica la firma `Stripe-Signature` con el
    secreto del endpoint, se guarda el evento en el outbox (idempotente por id
    de Stripe) y, si está habilitado, se despacha en el momento.
    Sin rate limit.
    """,
    "parameters": [
        {
            "name": "Stripe-Signature",
            "in": "header",
            "required": True,
            "schema": {"type": "string", "example": "t=1700000000,v1=5257a869..."}
        }
    ],
    "requestBody": {
        "required": True,
        "content": {
            "application/json": {
                "schema": {
                    "type": "object",
                    "properties": {
                        "id": {"type": "string", "example": "evt_1NxYz"},
                        "type": {"type": "string", "example": "checkout.session.completed"},
                        "account": {"type": "string", "example": "acct_1Abc"},
                        "data": {"type": "object"}
                    }
                }
            }
        }
    },
    "responses": {
        "200": {
            "description": "Evento recibido",
            "content": {
                "application/json": {
                    "schema": {
                        "type": "object",
                        "properties": {
                            "received": {"type": "boolean", "example": True},
                            "evento_id": {"type": "string"},
                            "estado": {"type": "string", "example": "procesado"},
                            "duplicado": {"type": "boolean", "example": False}
                        }
                    }
                }
            }
        },
        "400": {"description": "Firma ausente o inválida", "content": _error_json},
        "500": {"description": "Webhook no configurado", "content": _error_json}
    }
}

# ==================== TRABAJADORES ====================

procesar_lote_schema = {
    "tags": ["Trabajadores"],
    "summary": "Procesar un lote de eventos",
    "description": """
    Ejecuta una pasada del despachador: libera reclamos vencidos, reencola
    errores cuyo backoff pasó y procesa hasta TAMANO_LOTE eventos pendientes.
    Pensado para un cron. Requiere `Authorization: Bearer <CRON_SECRET_TOKEN>`.
    """,
    "security": [{"bearerAuth": []}],
    "responses": {
        "200": {
            "description": "Estadísticas del lote",
            "content": {"application/json": {"schema": _stats_lote}}
        },
        "401": {"description": "Token ausente o incorrecto", "content": _error_json},
        "503": {"description": "Despachador deshabilitado", "content": _error_json}
    }
}

# ==================== ADMIN ====================

reintentar_evento_schema = {
    "tags": ["Admin"],
    "summary": "Reencolar un evento fallido",
    "description": "Devuelve a 'pendiente' un evento 'fallido' con los intentos a cero. Requiere ADMIN_API_TOKEN.",
    "security": [{"bearerAuth": []}],
    "parameters": [
        {
            "name": "evento_id",
            "in": "path",
            "required": True,
            "schema": {"type": "string", "format": "uuid"}
        }
    ],
    "responses": {
        "200": {
            "description": "Evento reencolado",
            "content": {
                "application/json": {
                    "schema": {
                        "type": "object",
                        "properties": {
                            "success": {"type": "boolean"},
                            "evento_id": {"type": "string"},
                            "estado": {"type": "string", "example": "pendiente"}
                        }
                    }
                }
            }
        },
        "401": {"description": "Token ausente o incorrecto", "content": _error_json},
        "404": {"description": "No existe un evento fallido con ese id", "content": _error_json}
    }
}

listar_eventos_schema = {
    "tags": ["Admin"],
    "summary": "Listar eventos del outbox",
    "description": "Lista los eventos más recientes, opcionalmente filtrados por estado. Requiere ADMIN_API_TOKEN.",
    "security": [{"bearerAuth": []}],
    "parameters": [
        {
            "name": "estado",
            "in": "query",
            "required": False,
            "schema": {
                "type": "string",
                "enum": ["pendiente", "en_proceso", "procesado", "error", "fallido"]
            }
        },
        {
            "name": "limite",
            "in": "query",
            "required": False,
            "schema": {"type": "integer", "default": 50, "maximum": 200}
        }
    ],
    "responses": {
        "200": {"description": "Lista de eventos"},
        "400": {"description": "Estado desconocido", "content": _error_json},
        "401": {"description": "Token ausente o incorrecto", "content": _error_json}
    }
}

# ==================== PÚBLICO ====================

salud_schema = {
    "tags": ["Público"],
    "summary": "Estado del outbox",
    "description": "Conteo de eventos por estado y estadísticas de la última ejecución. Rate limit: RATELIMIT_PUBLICO.",
    "responses": {
        "200": {
            "description": "Estado del servicio",
            "content": {
                "application/json": {
                    "schema": {
                        "type": "object",
                        "properties": {
                            "status": {"type": "string", "example": "ok"},
                            "eventos": {"type": "object"},
                            "ultima_ejecucion": _stats_lote
                        }
                    }
                }
            }
        },
        "429": {"description": "Límite de solicitudes excedido", "content": _error_json}
    }
}
