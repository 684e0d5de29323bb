"""Configuración de la aplicación a partir de variables de entorno."""

import os
from dotenv import load_dotenv

load_dotenv()


def parse_entero(value, default, minimo=None, maximo=None):
    """Parse an integer from env/config with safe bounds."""
    try:
        numero = int(str(value).strip())
    except (TypeError, ValueError):
        return default

    if minimo is not None and numero < minimo:
        return minimo
    if maximo is not None and numero > maximo:
        return maximo
    return numero


def parse_bool(value, default=False):
    """Interpreta 'true/1/yes/si' como verdadero; None devuelve el default."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ('true', '1', 'yes', 'si', 'sí', 'on')


class Config:
    """Valores por defecto leídos del entorno. create_app() permite sobrescribirlos."""

    SECRET_KEY = os.getenv('SECRET_KEY')
    FLASK_ENV = os.getenv('FLASK_ENV', 'development')

    # Logs
    LOG_FILE = os.getenv('LOG_FILE', 'app.log')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    # Stripe
    STRIPE_SECRET_KEY = os.getenv('STRIPE_SECRET_KEY')
    STRIPE_WEBHOOK_SECRET = os.getenv('STRIPE_WEBHOOK_SECRET')
    STRIPE_WEBHOOK_TOLERANCIA = parse_entero(os.getenv('STRIPE_WEBHOOK_TOLERANCIA'), 300, minimo=0)

    # Despachador de eventos
    DESPACHADOR_HABILITADO = parse_bool(os.getenv('DESPACHADOR_HABILITADO'), True)
    DESPACHO_SINCRONO_WEBHOOK = parse_bool(os.getenv('DESPACHO_SINCRONO_WEBHOOK'), True)
    MAX_INTENTOS = parse_entero(os.getenv('MAX_INTENTOS'), 5, minimo=1)
    TAMANO_LOTE = parse_entero(os.getenv('TAMANO_LOTE'), 100, minimo=1, maximo=1000)
    LEASE_MINUTOS = parse_entero(os.getenv('LEASE_MINUTOS'), 15, minimo=1)
    BACKOFF_BASE_SEGUNDOS = parse_entero(os.getenv('BACKOFF_BASE_SEGUNDOS'), 60, minimo=0)
    BACKOFF_MAX_SEGUNDOS = parse_entero(os.getenv('BACKOFF_MAX_SEGUNDOS'), 3600, minimo=0)

    # Scheduler interno (alternativa al cron externo)
    SCHEDULER_HABILITADO = parse_bool(os.getenv('SCHEDULER_HABILITADO'), False)
    DESPACHADOR_INTERVALO_SEGUNDOS = parse_entero(os.getenv('DESPACHADOR_INTERVALO_SEGUNDOS'), 60, minimo=5)

    # Tokens de acceso para rutas internas
    CRON_SECRET_TOKEN = os.getenv('CRON_SECRET_TOKEN')
    ADMIN_API_TOKEN = os.getenv('ADMIN_API_TOKEN')

    # Notificaciones
    ADMIN_EMAIL = os.getenv('ADMIN_EMAIL', 'manuel@labba.studio')
    SUPPORT_EMAIL = os.getenv('SUPPORT_EMAIL', os.getenv('ADMIN_EMAIL', 'manuel@labba.studio'))
    MAIL_SERVER = os.getenv('MAIL_SERVER', 'smtp.gmail.com')
    MAIL_PORT = parse_entero(os.getenv('MAIL_PORT'), 587)
    MAIL_USE_TLS = parse_bool(os.getenv('MAIL_USE_TLS'), True)
    MAIL_USERNAME = os.getenv('MAIL_USERNAME')
    MAIL_PASSWORD = os.getenv('MAIL_PASSWORD')
    MAIL_DEFAULT_SENDER = os.getenv('MAIL_DEFAULT_SENDER', os.getenv('MAIL_USERNAME'))
    APP_URL = os.getenv('APP_URL', 'http://localhost:8000')

    # Redis / rate limiting
    REDIS_HABILITADO = parse_bool(os.getenv('REDIS_HABILITADO'), True)
    RATELIMIT_STORAGE_URI = os.getenv('REDIS_URL', 'memory://')
    RATELIMIT_DEFAULT = os.getenv('RATELIMIT_DEFAULT', '200 per day;50 per hour')
    RATELIMIT_PUBLICO = os.getenv('RATELIMIT_PUBLICO', '60 per minute')

    # Extras
    METRICS_HABILITADAS = parse_bool(os.getenv('METRICS_HABILITADAS'), True)
    SWAGGER_HABILITADO = parse_bool(os.getenv('SWAGGER_HABILITADO'), True)
