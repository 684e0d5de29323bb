"""
Blueprints package
"""

from .webhooks import init_webhooks_blueprint
from .trabajadores import init_trabajadores_blueprint
from .admin_eventos import init_admin_eventos_blueprint
from .publico import init_publico_blueprint

__all__ = [
    'init_webhooks_blueprint',
    'init_trabajadores_blueprint',
    'init_admin_eventos_blueprint',
    'init_publico_blueprint',
]
