"""
Configuración de conexión a PostgreSQL
"""

import os
import logging

from dotenv import load_dotenv
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import QueuePool

load_dotenv()

logger = logging.getLogger(__name__)

# Configuración desde variables de entorno
DB_HOST = os.getenv('DB_HOST', 'localhost')
DB_PORT = os.getenv('DB_PORT', '5432')
DB_USER = os.getenv('DB_USER', 'reservas_user')
DB_PASSWORD = os.getenv('DB_PASSWORD', 'reservas_pass')
DB_NAME = os.getenv('DB_NAME', 'reservas_db')

# DATABASE_URL completa tiene prioridad sobre las variables sueltas
DATABASE_URL = os.getenv(
    'DATABASE_URL',
    f'postgresql+psycopg2://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}'
)

# Engine con pool; create_engine no abre conexiones hasta el primer uso
engine = create_engine(
    DATABASE_URL,
    poolclass=QueuePool,
    pool_size=10,
    max_overflow=20,
    pool_pre_ping=True,        # Verificar conexión antes de usar
    pool_recycle=3600,         # Reciclar conexiones cada hora
    echo=False,
)

# Cada unidad de trabajo (un webhook, un evento) abre y cierra su propia sesión
session_factory = sessionmaker(bind=engine)


def test_connection():
    """Verifica que la conexión a PostgreSQL funciona"""
    try:
        with engine.connect() as conn:
            version = conn.execute(text("SELECT version();")).scalar()
            logger.info(f"✅ Conectado a PostgreSQL: {version}")
            return True
    except Exception as e:
        logger.error(f"❌ Error de conexión: {e}")
        return False
