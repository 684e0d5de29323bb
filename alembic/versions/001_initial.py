"""Initial migration - create all tables

Revision ID: 001_initial
Revises: 
Create Date: 2026-09-28 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Crear tabla agencias
    op.create_table(
        'agencias',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('nombre', sa.String(length=200), nullable=False),
        sa.Column('email_contacto', sa.String(length=255)),
        sa.Column('stripe_account_id', sa.String(length=255)),
        sa.Column('activa', sa.Boolean(), server_default=sa.text('false')),
        sa.Column('requiere_revision', sa.Boolean(), server_default=sa.text('false')),
        sa.Column('estado_pago', sa.String(length=50)),
        sa.Column('fecha_creacion', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('fecha_actualizacion', sa.DateTime(), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('stripe_account_id')
    )
    op.create_index('ix_agencias_stripe_account_id', 'agencias', ['stripe_account_id'])

    # Crear tabla reservas
    op.create_table(
        'reservas',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('agencia_id', sa.Integer(), sa.ForeignKey('agencias.id', ondelete='SET NULL')),
        sa.Column('email_cliente', sa.String(length=255)),
        sa.Column('nombre_cliente', sa.String(length=200)),
        sa.Column('actividad', sa.String(length=300)),
        sa.Column('fecha_actividad', sa.DateTime()),
        sa.Column('monto_total', sa.Float(), server_default='0'),
        sa.Column('idioma', sa.String(length=5), server_default='es'),
        sa.Column('estado', sa.String(length=20), server_default='pending'),
        sa.Column('cancelled_at', sa.DateTime()),
        sa.Column('fecha_creacion', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('fecha_actualizacion', sa.DateTime(), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_reservas_agencia_id', 'reservas', ['agencia_id'])
    op.create_index('ix_reservas_email_cliente', 'reservas', ['email_cliente'])
    op.create_index('ix_reservas_estado', 'reservas', ['estado'])

    # Crear tabla pagos
    op.create_table(
        'pagos',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('reserva_id', sa.Integer(), sa.ForeignKey('reservas.id', ondelete='SET NULL')),
        sa.Column('agencia_id', sa.Integer(), sa.ForeignKey('agencias.id', ondelete='SET NULL')),
        sa.Column('stripe_session_id', sa.String(length=255)),
        sa.Column('stripe_payment_intent_id', sa.String(length=255)),
        sa.Column('customer_email', sa.String(length=255)),
        sa.Column('customer_name', sa.String(length=200)),
        sa.Column('status', sa.String(length=50), server_default='pending'),
        sa.Column('external_status', sa.String(length=50)),
        sa.Column('amount', sa.Float(), nullable=False, server_default='0'),
        sa.Column('currency', sa.String(length=8), server_default='usd'),
        sa.Column('receipt_url', sa.String(length=500)),
        sa.Column('fee_plataforma', sa.Float(), server_default='0'),
        sa.Column('fecha_creacion', sa.DateTime(), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('stripe_session_id')
    )
    op.create_index('ix_pagos_reserva_id', 'pagos', ['reserva_id'])
    op.create_index('ix_pagos_agencia_id', 'pagos', ['agencia_id'])
    op.create_index('ix_pagos_stripe_payment_intent_id', 'pagos', ['stripe_payment_intent_id'])

    # Crear tabla stripe_payouts
    op.create_table(
        'stripe_payouts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('payout_id', sa.String(length=255), nullable=False),
        sa.Column('agencia_id', sa.Integer(), sa.ForeignKey('agencias.id', ondelete='SET NULL')),
        sa.Column('stripe_account_id', sa.String(length=255)),
        sa.Column('amount', sa.Integer()),
        sa.Column('currency', sa.String(length=8)),
        sa.Column('status', sa.String(length=30)),
        sa.Column('failure_code', sa.String(length=100)),
        sa.Column('failure_message', sa.Text()),
        sa.Column('fecha_creacion', sa.DateTime(), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_stripe_payouts_payout_id', 'stripe_payouts', ['payout_id'])

    # Crear tabla eventos (outbox)
    op.create_table(
        'eventos',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('origen', sa.String(length=50), nullable=False),
        sa.Column('externo_id', sa.String(length=255)),
        sa.Column('tipo', sa.String(length=150), nullable=False),
        sa.Column('payload', postgresql.JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column('estado', sa.String(length=20), nullable=False, server_default='pendiente'),
        sa.Column('intentos', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('recibido_en', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('procesado_en', sa.DateTime()),
        sa.Column('ultimo_intento', sa.DateTime()),
        sa.Column('error_msg', sa.Text()),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_eventos_tipo', 'eventos', ['tipo'])
    op.create_index('idx_eventos_estado_recibido', 'eventos', ['estado', 'recibido_en'])


def downgrade() -> None:
    op.drop_index('idx_eventos_estado_recibido', table_name='eventos')
    op.drop_index('ix_eventos_tipo', table_name='eventos')
    op.drop_table('eventos')

    op.drop_index('ix_stripe_payouts_payout_id', table_name='stripe_payouts')
    op.drop_table('stripe_payouts')

    op.drop_index('ix_pagos_stripe_payment_intent_id', table_name='pagos')
    op.drop_index('ix_pagos_agencia_id', table_name='pagos')
    op.drop_index('ix_pagos_reserva_id', table_name='pagos')
    op.drop_table('pagos')

    op.drop_index('ix_reservas_estado', table_name='reservas')
    op.drop_index('ix_reservas_email_cliente', table_name='reservas')
    op.drop_index('ix_reservas_agencia_id', table_name='reservas')
    op.drop_table('reservas')

    op.drop_index('ix_agencias_stripe_account_id', table_name='agencias')
    op.drop_table('agencias')
