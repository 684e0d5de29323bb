import os
import logging
import secrets
from decimal import Decimal
from logging.handlers import RotatingFileHandler

from flask import Flask, request, jsonify
from flask.json.provider import DefaultJSONProvider
from flask_apscheduler import APScheduler
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_cors import CORS
from flasgger import Swagger

from api import swagger_config, swagger_template, documentar_endpoints
from blueprints import (
    init_webhooks_blueprint,
    init_trabajadores_blueprint,
    init_admin_eventos_blueprint,
    init_publico_blueprint,
)
from cache import get_redis_cache
from core.config import Config
from core.email_service import EmailService
from core.eventos import DespachadorEventos, construir_registro_por_defecto
from core.stripe_service import obtener_cliente_stripe
from monitoring.prometheus_metrics import init_metrics

logger = logging.getLogger(__name__)


# ==========================================
# CUSTOM JSON PROVIDER FOR DECIMAL
# ==========================================
class CustomJSONProvider(DefaultJSONProvider):
    def default(self, obj):
        if isinstance(obj, Decimal):
            return float(obj)
        return super().default(obj)


# ==========================================
# 1. LOGS
# ==========================================

def configurar_logging(app):
    """Logging con rotación (max 10MB, 5 backups) y salida por consola"""
    handlers = [logging.StreamHandler()]
    if app.config.get('LOG_FILE'):
        log_handler = RotatingFileHandler(
            app.config['LOG_FILE'],
            maxBytes=10*1024*1024,  # 10MB
            backupCount=5,
            encoding='utf-8'
        )
        log_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        handlers.insert(0, log_handler)

    # basicConfig no hace nada si el logger raíz ya tiene handlers
    logging.basicConfig(
        level=getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


def ip_cliente():
    """Primera IP de X-Forwarded-For (detrás del proxy), o la del socket"""
    reenviada = request.headers.get('X-Forwarded-For', '')
    primera = reenviada.split(',')[0].strip()
    return primera or get_remote_address()


# ==========================================
# 2. APP FACTORY
# ==========================================

def create_app(overrides=None, session_factory=None, cache=None, stripe_client=None,
               notificador=None, registro=None):
    app = Flask(__name__)
    app.json = CustomJSONProvider(app)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    configurar_logging(app)

    # Clave secreta
    if not app.config.get('SECRET_KEY'):
        if app.config.get('FLASK_ENV') == 'production':
            logger.critical("⚠️ SECRET_KEY es OBLIGATORIA en producción!")
            raise SystemExit("SECRET_KEY no configurada")
        app.config['SECRET_KEY'] = secrets.token_hex(32)
        logger.warning("⚠️ Usando SECRET_KEY temporal (solo desarrollo)")

    if session_factory is None:
        from database import session_factory

    # Email
    if notificador is None:
        notificador = EmailService(app)
    app.extensions['email_service'] = notificador

    # Stripe
    if stripe_client is None:
        resultado = obtener_cliente_stripe(app.config.get('STRIPE_SECRET_KEY'))
        if resultado.is_success:
            stripe_client = resultado.value
        else:
            logger.warning(f"⚠️ {resultado.error}: los handlers que llaman a Stripe fallarán")

    # Redis
    if cache is None and app.config.get('REDIS_HABILITADO'):
        cache = get_redis_cache()
        if not cache.available:
            logger.warning("⚠️ Redis no disponible: despachador sin lock compartido")

    # Registro de handlers: un error de cableado debe impedir el arranque
    registro = registro or construir_registro_por_defecto()
    registro.validar()

    despachador = DespachadorEventos(
        session_factory,
        registro,
        notificador=notificador,
        cache=cache,
        stripe_client=stripe_client,
        max_intentos=app.config['MAX_INTENTOS'],
        tamano_lote=app.config['TAMANO_LOTE'],
        lease_minutos=app.config['LEASE_MINUTOS'],
        backoff_base_segundos=app.config['BACKOFF_BASE_SEGUNDOS'],
        backoff_max_segundos=app.config['BACKOFF_MAX_SEGUNDOS'],
        admin_email=app.config.get('ADMIN_EMAIL'),
        support_email=app.config.get('SUPPORT_EMAIL'),
    )
    app.extensions['despachador'] = despachador

    # 🔒 Rate Limiting Configuration
    limiter = Limiter(
        key_func=ip_cliente,
        app=app,
        default_limits=[l.strip() for l in app.config['RATELIMIT_DEFAULT'].split(';') if l.strip()],
        storage_uri=app.config['RATELIMIT_STORAGE_URI'],
        headers_enabled=True,
        strategy="fixed-window"
    )
    app.extensions['rate_limiter'] = limiter

    webhooks_bp = init_webhooks_blueprint(despachador, session_factory)
    trabajadores_bp = init_trabajadores_blueprint(despachador)
    admin_bp = init_admin_eventos_blueprint(despachador, session_factory)
    publico_bp = init_publico_blueprint(despachador)

    limiter.exempt(webhooks_bp)
    limiter.exempt(trabajadores_bp)
    limiter.limit(lambda: app.config['RATELIMIT_PUBLICO'])(publico_bp)

    for bp in (webhooks_bp, trabajadores_bp, admin_bp, publico_bp):
        app.register_blueprint(bp)

    @app.errorhandler(429)
    def ratelimit_handler(e):
        logger.warning(f"🚦 Rate limit excedido para {ip_cliente()} en {request.path}")
        return jsonify({'error': 'Demasiadas solicitudes', 'detalle': str(e.description)}), 429

    # ==========================================
    # CORS CONFIGURATION
    # ==========================================
    CORS(app, resources={
        r"/api/*": {
            "origins": ["*"],
            "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"],
            "max_age": 86400
        }
    })

    # ==========================================
    # PROMETHEUS METRICS
    # ==========================================
    if app.config.get('METRICS_HABILITADAS'):
        try:
            init_metrics(app)
            logger.info("✅ Métricas Prometheus habilitadas en /metrics")
        except Exception as e:
            logger.warning(f"⚠️ No se pudieron inicializar métricas: {e}")

    # ==========================================
    # SWAGGER/OPENAPI CONFIGURATION
    # ==========================================
    if app.config.get('SWAGGER_HABILITADO'):
        app.config['SWAGGER'] = {
            'title': 'Reservas de Tours - Eventos API',
            'uiversion': 3,
            'openapi': '3.0.0',
        }
        documentar_endpoints(app)
        try:
            Swagger(app, config=swagger_config, template=swagger_template)
            logger.info("✅ Swagger UI habilitado en /api/docs")
        except Exception as e:
            logger.warning(f"⚠️ No se pudo inicializar Swagger: {e}")

    # ==========================================
    # SCHEDULER
    # ==========================================
    if app.config.get('SCHEDULER_HABILITADO'):
        _init_scheduler(app, despachador)

    logger.info("🚀 Despachador de eventos listo")
    return app


def _init_scheduler(app, despachador):
    scheduler = APScheduler()
    scheduler.init_app(app)
    scheduler.add_job(
        id='despachar-eventos',
        func=despachador.procesar_lote,
        trigger='interval',
        seconds=app.config['DESPACHADOR_INTERVALO_SEGUNDOS'],
        max_instances=1,
        coalesce=True,
        replace_existing=True
    )
    scheduler.start()
    app.extensions['scheduler'] = scheduler
    logger.info(f"✅ Despachador programado cada {app.config['DESPACHADOR_INTERVALO_SEGUNDOS']}s")
    return scheduler


# ==========================================
# ARRANQUE
# ==========================================

if __name__ == '__main__':
    FLASK_ENV = os.getenv("FLASK_ENV", "production")
    DEBUG = FLASK_ENV == "development"

    print("\n" + "="*50)
    print("🚀 DESPACHADOR DE EVENTOS ONLINE")
    print(f"📡 Entorno: {FLASK_ENV} | Debug: {DEBUG}")
    print("="*50 + "\n")

    create_app().run(host='0.0.0.0', port=8000, debug=DEBUG)
