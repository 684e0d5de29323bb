"""
Crea las tablas en la base de datos configurada (DATABASE_URL).

En producción usar las revisiones de alembic/; esto es para entornos locales.
"""

from database import init_db, test_connection, DATABASE_URL

if __name__ == '__main__':
    print(f"🔌 Conectando a {DATABASE_URL.split('@')[-1]}...")
    if not test_connection():
        raise SystemExit("❌ No se pudo conectar a la base de datos")

    tablas = init_db()
    print(f"🚀 ¡LISTO! Tablas: {', '.join(tablas)}")
