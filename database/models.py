"""
Modelos de base de datos para la plataforma de reservas de actividades
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column, Integer, String, Text, Float, Boolean, DateTime, ForeignKey, Index,
    UniqueConstraint, JSON,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()

# JSONB en PostgreSQL, JSON genérico en el resto (tests con SQLite)
JSONType = JSON().with_variant(JSONB(), 'postgresql')


def ahora_utc():
    """Fecha actual en UTC sin tzinfo, igual que guarda la base de datos."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# Estados del outbox
PENDIENTE = 'pendiente'
EN_PROCESO = 'en_proceso'
PROCESADO = 'procesado'
ERROR = 'error'
FALLIDO = 'fallido'
ESTADOS_EVENTO = (PENDIENTE, EN_PROCESO, PROCESADO, ERROR, FALLIDO)


class Agencia(Base):
    """Agencias (tenants) con su cuenta conectada de Stripe"""
    __tablename__ = 'agencias'

    id = Column(Integer, primary_key=True, autoincrement=True)
    nombre = Column(String(200), nullable=False)
    email_contacto = Column(String(255))
    stripe_account_id = Column(String(255), unique=True, index=True)

    activa = Column(Boolean, default=False)
    requiere_revision = Column(Boolean, default=False)
    estado_pago = Column(String(50))  # ok, problema_banco

    fecha_creacion = Column(DateTime, default=ahora_utc)
    fecha_actualizacion = Column(DateTime, default=ahora_utc, onupdate=ahora_utc)

    reservas = relationship('Reserva', back_populates='agencia')

    def to_dict(self):
        return {
            'id': self.id,
            'nombre': self.nombre,
            'email_contacto': self.email_contacto,
            'stripe_account_id': self.stripe_account_id,
            'activa': self.activa,
            'requiere_revision': self.requiere_revision,
            'estado_pago': self.estado_pago,
        }

    def __repr__(self):
        return f"<Agencia {self.id}: {self.nombre} (activa={self.activa})>"


class Reserva(Base):
    """Reserva de un turno de actividad por un cliente final"""
    __tablename__ = 'reservas'

    id = Column(Integer, primary_key=True, autoincrement=True)
    agencia_id = Column(Integer, ForeignKey('agencias.id', ondelete='SET NULL'), index=True)

    email_cliente = Column(String(255), index=True)
    nombre_cliente = Column(String(200))
    actividad = Column(String(300))
    fecha_actividad = Column(DateTime)
    monto_total = Column(Float, default=0.0)
    idioma = Column(String(5), default='es')

    estado = Column(String(20), default='pending', index=True)  # pending, confirmed, cancelled
    cancelled_at = Column(DateTime)

    fecha_creacion = Column(DateTime, default=ahora_utc)
    fecha_actualizacion = Column(DateTime, default=ahora_utc, onupdate=ahora_utc)

    agencia = relationship('Agencia', back_populates='reservas')
    pagos = relationship('Pago', back_populates='reserva')

    def __repr__(self):
        return f"<Reserva {self.id} - {self.estado}>"


class Pago(Base):
    """Pagos cobrados mediante Stripe Checkout"""
    __tablename__ = 'pagos'

    id = Column(Integer, primary_key=True, autoincrement=True)
    reserva_id = Column(Integer, ForeignKey('reservas.id', ondelete='SET NULL'), index=True)
    agencia_id = Column(Integer, ForeignKey('agencias.id', ondelete='SET NULL'), index=True)

    stripe_session_id = Column(String(255), unique=True)
    stripe_payment_intent_id = Column(String(255), index=True)
    customer_email = Column(String(255))
    customer_name = Column(String(200))

    status = Column(String(50), default='pending')
    external_status = Column(String(50))
    amount = Column(Float, nullable=False, default=0.0)
    currency = Column(String(8), default='usd')
    receipt_url = Column(String(500))
    fee_plataforma = Column(Float, default=0.0)

    fecha_creacion = Column(DateTime, default=ahora_utc)

    reserva = relationship('Reserva', back_populates='pagos')

    def __repr__(self):
        return f"<Pago {self.id}: {self.amount} {self.currency} ({self.status})>"


class PayoutStripe(Base):
    """Payouts de Stripe hacia las cuentas conectadas (solo se registran los fallidos)"""
    __tablename__ = 'stripe_payouts'

    id = Column(Integer, primary_key=True, autoincrement=True)
    payout_id = Column(String(255), index=True, nullable=False)
    agencia_id = Column(Integer, ForeignKey('agencias.id', ondelete='SET NULL'))
    stripe_account_id = Column(String(255))

    amount = Column(Integer)  # centavos
    currency = Column(String(8))
    status = Column(String(30))
    failure_code = Column(String(100))
    failure_message = Column(Text)

    fecha_creacion = Column(DateTime, default=ahora_utc)

    def __repr__(self):
        return f"<PayoutStripe {self.payout_id} ({self.status})>"


class Evento(Base):
    """
    Outbox de eventos de dominio.

    Ciclo de vida: pendiente -> en_proceso -> procesado | error | fallido.
    Los productores (webhooks, lógica de negocio) insertan en 'pendiente';
    el despachador reclama lotes y los procesa.
    """
    __tablename__ = 'eventos'

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    origen = Column(String(50), nullable=False)
    externo_id = Column(String(255))
    tipo = Column(String(150), nullable=False, index=True)
    payload = Column(JSONType, nullable=False, default=dict)

    estado = Column(String(20), nullable=False, default=PENDIENTE)
    intentos = Column(Integer, nullable=False, default=0)

    recibido_en = Column(DateTime, nullable=False, default=ahora_utc)
    reclamado_en = Column(DateTime)
    procesado_en = Column(DateTime)
    ultimo_intento = Column(DateTime)
    error_msg = Column(Text)

    __table_args__ = (
        UniqueConstraint('origen', 'externo_id', name='uq_eventos_origen_externo'),
        Index('idx_eventos_estado_recibido', 'estado', 'recibido_en'),
    )

    @property
    def categoria(self):
        return (self.tipo or '').split('.')[0]

    def to_dict(self):
        return {
            'id': self.id,
            'origen': self.origen,
            'externo_id': self.externo_id,
            'tipo': self.tipo,
            'estado': self.estado,
            'intentos': self.intentos,
            'recibido_en': self.recibido_en.isoformat() if self.recibido_en else None,
            'procesado_en': self.procesado_en.isoformat() if self.procesado_en else None,
            'ultimo_intento': self.ultimo_intento.isoformat() if self.ultimo_intento else None,
            'error_msg': self.error_msg,
        }

    def __repr__(self):
        return f"<Evento {self.id} {self.tipo} ({self.estado}, intentos={self.intentos})>"
