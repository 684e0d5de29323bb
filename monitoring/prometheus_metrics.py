"""
Configuración de Prometheus para monitoreo
"""

from prometheus_flask_exporter import PrometheusMetrics
from prometheus_client import Counter, Histogram, Gauge
import logging

logger = logging.getLogger(__name__)


class AppMetrics:
    """Clase para gestionar métricas de la aplicación"""

    def __init__(self, app=None):
        self.metrics = None
        self.app = app

        # Métricas personalizadas
        self.webhooks_recibidos = Counter(
            'reservas_webhooks_recibidos_total',
            'Total de webhooks recibidos',
            ['origen', 'resultado']  # aceptado, duplicado, firma_invalida
        )

        self.eventos_reclamados = Counter(
            'reservas_eventos_reclamados_total',
            'Total de eventos reclamados por el despachador'
        )

        self.eventos_procesados = Counter(
            'reservas_eventos_procesados_total',
            'Eventos procesados por tipo y estado final',
            ['tipo', 'estado']  # procesado, error, fallido
        )

        self.eventos_recuperados = Counter(
            'reservas_eventos_recuperados_total',
            'Eventos devueltos a pendiente por mantenimiento',
            ['motivo']  # lease_vencido, reintento
        )

        self.duracion_evento = Histogram(
            'reservas_evento_duracion_seconds',
            'Tiempo de procesamiento de un evento',
            ['tipo'],
            buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0]
        )

        self.eventos_por_estado = Gauge(
            'reservas_eventos_por_estado',
            'Número de eventos en el outbox por estado',
            ['estado']
        )

        if app:
            self.init_app(app)

    def init_app(self, app):
        """Inicializa las métricas HTTP con la aplicación Flask"""
        self.app = app

        self.metrics = PrometheusMetrics(
            app,
            group_by='endpoint',
            buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0],
            path='/metrics',
            export_defaults=True,
            defaults_prefix='flask'
        )
        self.metrics.info('app_info', 'Application info', version='1.0.0')

        logger.info("✅ Prometheus metrics initialized")

    def track_webhook(self, origen, resultado):
        """Registra un webhook recibido"""
        self.webhooks_recibidos.labels(origen=origen, resultado=resultado).inc()

    def track_claim(self, cantidad):
        """Registra eventos reclamados"""
        if cantidad:
            self.eventos_reclamados.inc(cantidad)

    def track_evento(self, tipo, estado, duracion=None):
        """Registra el resultado de procesar un evento"""
        self.eventos_procesados.labels(tipo=tipo, estado=estado).inc()
        if duracion is not None:
            self.duracion_evento.labels(tipo=tipo).observe(duracion)

    def track_recuperados(self, motivo, cantidad):
        if cantidad:
            self.eventos_recuperados.labels(motivo=motivo).inc(cantidad)

    def update_backlog(self, conteos):
        """Actualiza el gauge de eventos por estado"""
        for estado, cantidad in conteos.items():
            self.eventos_por_estado.labels(estado=estado).set(cantidad)


# Instancia global
app_metrics = AppMetrics()


def init_metrics(app):
    """Initialize Prometheus metrics with the Flask app."""
    app_metrics.init_app(app)
    return app_metrics
