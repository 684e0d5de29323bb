"""
Resultado genérico de éxito/fallo.

Permite devolver errores esperados (cliente Stripe sin configurar, agencia
inexistente...) sin usar excepciones para el flujo normal.
"""


class Resultado:
    __slots__ = ('_exito', '_valor', '_error')

    def __init__(self, exito, valor=None, error=None):
        object.__setattr__(self, '_exito', exito)
        object.__setattr__(self, '_valor', valor)
        object.__setattr__(self, '_error', error)

    def __setattr__(self, name, value):
        raise AttributeError('Resultado es inmutable')

    @classmethod
    def ok(cls, valor=None):
        return cls(True, valor=valor)

    @classmethod
    def fail(cls, error):
        return cls(False, error=error)

    @property
    def is_success(self):
        return self._exito

    @property
    def is_failure(self):
        return not self._exito

    @property
    def value(self):
        if not self._exito:
            raise ValueError('No se puede obtener el valor de un resultado fallido')
        return self._valor

    @property
    def error(self):
        if self._exito:
            raise ValueError('No se puede obtener el error de un resultado exitoso')
        return self._error

    def on_success(self, fn):
        if self._exito:
            fn(self._valor)
        return self

    def on_failure(self, fn):
        if not self._exito:
            fn(self._error)
        return self

    def map(self, fn):
        if self._exito:
            return Resultado.ok(fn(self._valor))
        return Resultado.fail(self._error)

    def get_or_else(self, default):
        return self._valor if self._exito else default

    def get_or_throw(self):
        if self._exito:
            return self._valor
        if isinstance(self._error, Exception):
            raise self._error
        raise RuntimeError(str(self._error))

    def to_dict(self):
        if self._exito:
            return {'success': True, 'data': self._valor}
        return {'success': False, 'error': str(self._error)}

    def __repr__(self):
        if self._exito:
            return f"<Resultado ok={self._valor!r}>"
        return f"<Resultado fail={self._error!r}>"
