"""
Migración: Crear tabla eventos (outbox) sin pasar por Alembic
"""

import sys
import os

# Añadir el directorio padre al path para imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database import engine, Evento
from sqlalchemy import inspect

def migrar():
    """Crea la tabla eventos si no existe"""

    inspector = inspect(engine)

    if 'eventos' in inspector.get_table_names():
        print("✅ Tabla 'eventos' ya existe")
        return

    print("📋 Creando tabla 'eventos'...")

    Evento.__table__.create(engine)

    print("✅ Tabla 'eventos' creada exitosamente")
    print("\nColumnas creadas:")
    print("  - id (UUID, PK)")
    print("  - origen, externo_id (UNIQUE juntos)")
    print("  - tipo, payload (JSONB)")
    print("  - estado (pendiente/en_proceso/procesado/error/fallido)")
    print("  - intentos, error_msg")
    print("  - recibido_en, reclamado_en, procesado_en, ultimo_intento")

if __name__ == '__main__':
    migrar()
