"""
Blueprint de endpoints públicos (con rate limit)
"""

from flask import Blueprint, jsonify
import logging

logger = logging.getLogger(__name__)


def init_publico_blueprint(despachador):
    """Inicializa el blueprint con dependencias"""

    publico_bp = Blueprint('publico', __name__, url_prefix='/api/public')

    @publico_bp.route('/salud', methods=['GET'])
    def salud():
        """Estado del outbox"""
        try:
            conteos = despachador.contar_por_estado()
        except Exception as e:
            logger.error(f"❌ Health check falló: {e}")
            return jsonify({'status': 'error', 'error': 'Base de datos no disponible'}), 503

        return jsonify({
            'status': 'ok',
            'eventos': conteos,
            'ultima_ejecucion': despachador.ultima_ejecucion(),
        })

    return publico_bp
