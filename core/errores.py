"""Excepciones propias del sistema de eventos e integración con Stripe."""


class EventosError(Exception):
    """Base de los errores del outbox de eventos."""


class HandlerFallidoError(EventosError):
    """Un handler devolvió {'success': False}."""

    def __init__(self, mensaje, tipo=None, handler=None):
        super().__init__(mensaje or 'Error desconocido en handler')
        self.tipo = tipo
        self.handler = handler


class RegistroInvalidoError(EventosError):
    """El registro de handlers no pasó la validación de arranque."""


class FirmaWebhookInvalidaError(EventosError):
    """La firma del webhook no es válida o está fuera de la ventana de tolerancia."""


class StripeServiceError(Exception):
    """
    Error al operar con Stripe.

    Extrae del error original los campos útiles para logs
    (status HTTP, código, tipo y decline_code si existe).
    """

    def __init__(self, mensaje, raw_error=None, contexto=None):
        super().__init__(mensaje or 'Error al procesar operación con Stripe')
        self.raw_error = raw_error
        self.contexto = contexto or {}
        self.status_code = getattr(raw_error, 'http_status', None)
        self.stripe_code = getattr(raw_error, 'code', None)
        self.stripe_type = None
        self.decline_code = None

        error_body = getattr(raw_error, 'error', None)
        if error_body is not None:
            self.stripe_type = getattr(error_body, 'type', None)
            self.decline_code = getattr(error_body, 'decline_code', None)
        if self.decline_code is None:
            json_body = getattr(raw_error, 'json_body', None) or {}
            self.decline_code = (json_body.get('error') or {}).get('decline_code')

    def to_dict(self):
        return {
            'name': type(self).__name__,
            'message': str(self),
            'status_code': self.status_code,
            'stripe_code': self.stripe_code,
            'stripe_type': self.stripe_type,
            'decline_code': self.decline_code,
            'contexto': self.contexto,
        }
