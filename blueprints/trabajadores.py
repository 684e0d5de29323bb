"""
Blueprint del worker del outbox (invocado por cron)
"""

from flask import Blueprint, jsonify, current_app
import logging

from api.decorators import requiere_token

logger = logging.getLogger(__name__)


def init_trabajadores_blueprint(despachador):
    """Inicializa el blueprint con dependencias"""

    trabajadores_bp = Blueprint('trabajadores', __name__, url_prefix='/api/trabajadores')

    @trabajadores_bp.route('/procesar_lote', methods=['GET', 'POST'])
    @requiere_token('CRON_SECRET_TOKEN', obligatorio=False)
    def procesar_lote():
        """Ejecuta una pasada del despachador"""
        if not current_app.config.get('DESPACHADOR_HABILITADO', True):
            return jsonify({'error': 'Deshabilitado temporalmente'}), 503

        try:
            stats = despachador.procesar_lote()
        except Exception as e:
            logger.exception(f"❌ Error procesando lote: {e}")
            return jsonify({'error': 'Error procesando el lote'}), 500

        return jsonify(stats)

    return trabajadores_bp
