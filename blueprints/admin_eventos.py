"""
Blueprint de operación del outbox (reintentos manuales y consulta)
"""

from flask import Blueprint, request, jsonify
import logging

from api.decorators import requiere_token
from core.config import parse_entero
from database.models import Evento, ESTADOS_EVENTO, PENDIENTE

logger = logging.getLogger(__name__)


def init_admin_eventos_blueprint(despachador, session_factory):
    """Inicializa el blueprint con dependencias"""

    admin_bp = Blueprint('admin_eventos', __name__, url_prefix='/api/admin/eventos')

    @admin_bp.route('', methods=['GET'])
    @requiere_token('ADMIN_API_TOKEN')
    def listar_eventos():
        """Eventos más recientes, filtrables por estado"""
        estado = request.args.get('estado')
        if estado and estado not in ESTADOS_EVENTO:
            return jsonify({'error': f'Estado desconocido: {estado}'}), 400
        limite = parse_entero(request.args.get('limite'), 50, minimo=1, maximo=200)

        session = session_factory()
        try:
            query = session.query(Evento)
            if estado:
                query = query.filter(Evento.estado == estado)
            eventos = query.order_by(Evento.recibido_en.desc()).limit(limite).all()
            return jsonify({'eventos': [ev.to_dict() for ev in eventos]})
        finally:
            session.close()

    @admin_bp.route('/<evento_id>/reintentar', methods=['POST'])
    @requiere_token('ADMIN_API_TOKEN')
    def reintentar_evento(evento_id):
        """Reencola un evento fallido"""
        if not despachador.reintentar_fallido(evento_id):
            return jsonify({'error': 'Evento fallido no encontrado'}), 404

        logger.info(f"🔁 Reintento manual del evento {evento_id}")
        return jsonify({'success': True, 'evento_id': evento_id, 'estado': PENDIENTE})

    return admin_bp
