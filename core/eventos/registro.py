"""
Registro de handlers por tipo de evento.

Cada tipo de evento admitido está en `TipoEvento`; el registro asocia a
cada tipo una lista ordenada de handlers. `validar()` se llama una vez al
arrancar la aplicación para detectar errores de cableado antes de recibir
eventos.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from core.errores import RegistroInvalidoError

logger = logging.getLogger(__name__)


class TipoEvento(str, Enum):
    # Checkout
    CHECKOUT_SESSION_COMPLETED = 'checkout.session.completed'
    CHECKOUT_SESSION_ASYNC_PAYMENT_FAILED = 'checkout.session.async_payment_failed'
    CHECKOUT_SESSION_ASYNC_PAYMENT_SUCCEEDED = 'checkout.session.async_payment_succeeded'
    CHECKOUT_SESSION_EXPIRED = 'checkout.session.expired'

    # Payment intents
    PAYMENT_INTENT_SUCCEEDED = 'payment_intent.succeeded'
    PAYMENT_INTENT_PAYMENT_FAILED = 'payment_intent.payment_failed'
    PAYMENT_INTENT_CANCELED = 'payment_intent.canceled'
    PAYMENT_INTENT_PROCESSING = 'payment_intent.processing'
    PAYMENT_INTENT_CREATED = 'payment_intent.created'
    PAYMENT_INTENT_REQUIRES_ACTION = 'payment_intent.requires_action'

    # Cuentas conectadas
    ACCOUNT_UPDATED = 'account.updated'
    ACCOUNT_APPLICATION_AUTHORIZED = 'account.application.authorized'
    ACCOUNT_APPLICATION_DEAUTHORIZED = 'account.application.deauthorized'
    ACCOUNT_EXTERNAL_ACCOUNT_CREATED = 'account.external_account.created'
    ACCOUNT_EXTERNAL_ACCOUNT_DELETED = 'account.external_account.deleted'
    ACCOUNT_EXTERNAL_ACCOUNT_UPDATED = 'account.external_account.updated'

    # Payouts y reembolsos
    PAYOUT_FAILED = 'payout.failed'
    PAYOUT_PAID = 'payout.paid'
    REFUND_CREATED = 'refund.created'
    REFUND_FAILED = 'refund.failed'
    REFUND_UPDATED = 'refund.updated'

    # Reservas (eventos internos)
    RESERVA_CREADA = 'reserva.creada'
    RESERVA_CONFIRMADA = 'reserva.confirmada'
    RESERVA_CANCELADA = 'reserva.cancelada'

    @classmethod
    def desde_valor(cls, valor):
        """Devuelve el miembro para un string, o None si el tipo no existe."""
        if isinstance(valor, cls):
            return valor
        try:
            return cls(valor)
        except ValueError:
            return None


@dataclass
class ContextoEvento:
    """Dependencias que el despachador entrega a cada handler."""
    session: Any
    email: Any = None
    stripe: Any = None
    admin_email: Optional[str] = None
    support_email: Optional[str] = None


Handler = Callable[[dict, ContextoEvento], Any]


class RegistroHandlers:
    """Mapa TipoEvento -> [handler, ...] en orden de registro."""

    def __init__(self):
        self._handlers: Dict[Any, List[Handler]] = {}

    def registrar(self, tipo, *handlers):
        """Añade handlers al final de la lista del tipo. Acepta el enum o su valor."""
        clave = TipoEvento.desde_valor(tipo) or tipo
        self._handlers.setdefault(clave, []).extend(handlers)
        return self

    def handler(self, tipo):
        """Decorador equivalente a registrar(tipo, fn)."""
        def decorator(func):
            self.registrar(tipo, func)
            return func
        return decorator

    def handlers_para(self, tipo) -> List[Handler]:
        """Handlers del tipo; lista vacía para tipos desconocidos o sin handlers."""
        clave = TipoEvento.desde_valor(tipo)
        if clave is None:
            return []
        return list(self._handlers.get(clave, []))

    def tipos_registrados(self):
        return [tipo for tipo in self._handlers if self._handlers[tipo]]

    def validar(self):
        """Comprueba claves y handlers. Lanza RegistroInvalidoError con todos los problemas."""
        problemas = []
        for clave, handlers in self._handlers.items():
            if not isinstance(clave, TipoEvento):
                problemas.append(f"tipo de evento desconocido: {clave!r}")
                continue
            vistos = set()
            for handler in handlers:
                if not callable(handler):
                    problemas.append(f"{clave.value}: handler no invocable {handler!r}")
                    continue
                if id(handler) in vistos:
                    nombre = getattr(handler, '__name__', repr(handler))
                    problemas.append(f"{clave.value}: handler duplicado {nombre}")
                vistos.add(id(handler))

        if problemas:
            raise RegistroInvalidoError('; '.join(problemas))

        logger.info(f"✅ Registro de handlers validado ({len(self.tipos_registrados())} tipos)")
        return True

    def __len__(self):
        return sum(len(h) for h in self._handlers.values())


def construir_registro_por_defecto():
    """Registro con los handlers de la plataforma."""
    from core.eventos.handlers import (
        handle_checkout_session_completed,
        handle_payment_intent_succeeded,
        handle_payment_intent_event,
        handle_account_updated,
        handle_account_authorized,
        handle_account_deauthorized,
        handle_payout_failed,
        handle_reserva_creada,
    )

    registro = RegistroHandlers()
    registro.registrar(TipoEvento.CHECKOUT_SESSION_COMPLETED, handle_checkout_session_completed)
    registro.registrar(TipoEvento.PAYMENT_INTENT_SUCCEEDED, handle_payment_intent_succeeded)
    registro.registrar(TipoEvento.PAYMENT_INTENT_PAYMENT_FAILED, handle_payment_intent_event)
    registro.registrar(TipoEvento.PAYMENT_INTENT_CANCELED, handle_payment_intent_event)
    registro.registrar(TipoEvento.PAYMENT_INTENT_PROCESSING, handle_payment_intent_event)
    registro.registrar(TipoEvento.ACCOUNT_UPDATED, handle_account_updated)
    registro.registrar(TipoEvento.ACCOUNT_APPLICATION_AUTHORIZED, handle_account_authorized)
    registro.registrar(TipoEvento.ACCOUNT_APPLICATION_DEAUTHORIZED, handle_account_deauthorized)
    registro.registrar(TipoEvento.PAYOUT_FAILED, handle_payout_failed)
    registro.registrar(TipoEvento.RESERVA_CREADA, handle_reserva_creada)
    return registro
