"""
Outbox de eventos: publicación, registro de handlers y despacho.
"""

from .outbox import publicar_evento, registrar_evento_externo, buscar_evento_externo
from .registro import TipoEvento, ContextoEvento, RegistroHandlers, construir_registro_por_defecto
from .despachador import DespachadorEventos, MAX_INTENTOS
from .enriquecer import enriquecer_payload, categoria_de

__all__ = [
    'publicar_evento',
    'registrar_evento_externo',
    'buscar_evento_externo',
    'TipoEvento',
    'ContextoEvento',
    'RegistroHandlers',
    'construir_registro_por_defecto',
    'DespachadorEventos',
    'MAX_INTENTOS',
    'enriquecer_payload',
    'categoria_de',
]
