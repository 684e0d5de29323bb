"""Add lease column and idempotency key to eventos

Revision ID: 002_add_eventos_lease_fields
Revises: 001_initial
Create Date: 2026-10-05 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '002_add_eventos_lease_fields'
down_revision = '001_initial'
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column('eventos', sa.Column('reclamado_en', sa.DateTime(), nullable=True))
    op.create_unique_constraint('uq_eventos_origen_externo', 'eventos', ['origen', 'externo_id'])


def downgrade() -> None:
    op.drop_constraint('uq_eventos_origen_externo', 'eventos', type_='unique')
    op.drop_column('eventos', 'reclamado_en')
