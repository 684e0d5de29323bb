"""
Blueprint para webhooks entrantes (Stripe)
"""

from flask import Blueprint, request, jsonify, current_app
import json
import logging

from core.errores import FirmaWebhookInvalidaError
from core.eventos.outbox import registrar_evento_externo
from core.stripe_service import verificar_firma_webhook
from monitoring.prometheus_metrics import app_metrics

logger = logging.getLogger(__name__)

ORIGEN_STRIPE = 'stripe'


def init_webhooks_blueprint(despachador, session_factory):
    """Inicializa el blueprint con dependencias"""

    webhooks_bp = Blueprint('webhooks', __name__, url_prefix='/api/webhooks')

    @webhooks_bp.route('/stripe', methods=['POST'])
    def stripe_webhook():
        """Webhook de Stripe: guarda el evento en el outbox y lo despacha"""
        secreto = current_app.config.get('STRIPE_WEBHOOK_SECRET')
        if not secreto:
            logger.error("❌ STRIPE_WEBHOOK_SECRET no configurado")
            return jsonify({'error': 'Webhook no configurado'}), 500

        payload = request.get_data()
        firma = request.headers.get('Stripe-Signature')
        if not firma:
            app_metrics.track_webhook(ORIGEN_STRIPE, 'firma_invalida')
            return jsonify({'error': 'Falta la cabecera Stripe-Signature'}), 400

        try:
            verificar_firma_webhook(
                payload, firma, secreto,
                tolerancia=current_app.config.get('STRIPE_WEBHOOK_TOLERANCIA', 300)
            )
        except FirmaWebhookInvalidaError as e:
            logger.error(f"⚠️ Webhook signature verification failed: {e}")
            app_metrics.track_webhook(ORIGEN_STRIPE, 'firma_invalida')
            return jsonify({'error': str(e)}), 400

        datos = json.loads(payload)
        tipo = datos.get('type')
        externo_id = datos.get('id')
        if not tipo or not externo_id:
            return jsonify({'error': 'Evento sin id o type'}), 400

        logger.info(f"📬 Webhook Stripe recibido: {tipo} ({externo_id})")

        session = session_factory()
        try:
            evento, creado = registrar_evento_externo(session, ORIGEN_STRIPE, tipo, datos, externo_id)
            evento_id = evento.id
            estado = evento.estado
        except Exception as e:
            session.rollback()
            logger.error(f"❌ Error guardando evento {externo_id}: {e}")
            return jsonify({'error': 'No se pudo registrar el evento'}), 500
        finally:
            session.close()

        app_metrics.track_webhook(ORIGEN_STRIPE, 'aceptado' if creado else 'duplicado')

        despachar = (
            creado
            and current_app.config.get('DESPACHADOR_HABILITADO', True)
            and current_app.config.get('DESPACHO_SINCRONO_WEBHOOK', True)
        )
        if despachar:
            try:
                estado = despachador.procesar_evento_por_id(evento_id) or estado
            except Exception as e:
                # El evento ya está en el outbox; el worker lo recupera
                logger.error(f"❌ Error en despacho síncrono de {evento_id}: {e}")

        return jsonify({
            'received': True,
            'evento_id': evento_id,
            'estado': estado,
            'duplicado': not creado,
        })

    return webhooks_bp
