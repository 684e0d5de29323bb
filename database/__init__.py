"""
Database package
Módulo de base de datos - Configuración centralizada
"""

import logging

from .connection import (
    engine,
    session_factory,
    test_connection,
    DATABASE_URL,
)

from .models import (
    Base,
    Agencia,
    Reserva,
    Pago,
    PayoutStripe,
    Evento,
    ahora_utc,
    PENDIENTE,
    EN_PROCESO,
    PROCESADO,
    ERROR,
    FALLIDO,
    ESTADOS_EVENTO,
)

logger = logging.getLogger(__name__)

__all__ = [
    # Connection
    'engine',
    'session_factory',
    'test_connection',
    'DATABASE_URL',
    # Models
    'Base',
    'Agencia',
    'Reserva',
    'Pago',
    'PayoutStripe',
    'Evento',
    'ahora_utc',
    # Estados del outbox
    'PENDIENTE',
    'EN_PROCESO',
    'PROCESADO',
    'ERROR',
    'FALLIDO',
    'ESTADOS_EVENTO',
    'init_db',
]


def init_db(bind=None):
    """
    Inicializa todas las tablas en la base de datos
    """
    bind = bind or engine
    logger.info("🔧 Creando tablas...")
    Base.metadata.create_all(bind)

    from sqlalchemy import inspect
    tablas = inspect(bind).get_table_names()
    logger.info(f"✅ Tablas creadas: {', '.join(tablas)}")
    return tablas
