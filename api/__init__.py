"""
API Documentation Package
Provides OpenAPI/Swagger documentation and auth decorators for the events API
"""

from .swagger_config import swagger_config, swagger_template, swagger_ui_config
from .decorators import requiere_token, documentar_endpoints

__all__ = ['swagger_config', 'swagger_template', 'swagger_ui_config', 'requiere_token', 'documentar_endpoints']
