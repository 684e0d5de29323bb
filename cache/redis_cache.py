"""
Configuración de Redis para estado compartido entre workers
(lock del despachador y estadísticas de la última ejecución)
"""

import os
import logging
import pickle

import redis

logger = logging.getLogger(__name__)


class RedisCache:
    """ Gestiona el estado compartido en Redis"""

    def __init__(self, url=None, client=None):
        self._locks = {}
        try:
            if client is not None:
                self.redis_client = client
            else:
                self.redis_client = redis.Redis.from_url(
                    url or 'redis://localhost:6379/0',
                    socket_timeout=5,
                    socket_connect_timeout=5,
                    retry_on_timeout=True,
                    health_check_interval=30
                )

            # Test connection
            self.redis_client.ping()
            logger.info("✅ Redis conectado")
            self.available = True

        except Exception as e:
            logger.warning(f"⚠️ Redis no disponible: {e}. Usando fallback.")
            self.redis_client = None
            self.available = False

    def get(self, key):
        """Obtiene valor de caché"""
        if not self.available:
            return None

        try:
            value = self.redis_client.get(key)
            if value:
                logger.debug(f"🎯 Cache HIT: {key}")
                return pickle.loads(value)
            logger.debug(f"❌ Cache MISS: {key}")
            return None
        except Exception as e:
            logger.error(f"Error obteniendo de cache: {e}")
            return None

    def set(self, key, value, ttl=300):
        """Guarda valor en caché

        Args:
            key: Clave del cache
            value: Valor a guardar (cualquier tipo serializable)
            ttl: Tiempo de vida en segundos (default 5 minutos)
        """
        if not self.available:
            return False

        try:
            serialized = pickle.dumps(value)
            self.redis_client.setex(key, ttl, serialized)
            logger.debug(f"💾 Cache SET: {key} (TTL: {ttl}s)")
            return True
        except Exception as e:
            logger.error(f"Error guardando en cache: {e}")
            return False

    def adquirir_lock(self, key, ttl=900):
        """
        Intenta tomar un lock de Redis sin bloquear.

        Returns:
            True si se obtuvo, False si otro proceso lo tiene,
            None si Redis no está disponible (el llamador decide).
        """
        if not self.available:
            return None

        try:
            lock = self.redis_client.lock(key, timeout=ttl)
            obtenido = lock.acquire(blocking=False)
        except redis.exceptions.RedisError as e:
            logger.error(f"Error tomando lock {key}: {e}")
            return None

        if obtenido:
            self._locks[key] = lock
            logger.debug(f"🔒 Lock tomado: {key}")
            return True
        return False

    def liberar_lock(self, key):
        """Libera el lock solo si sigue siendo nuestro"""
        lock = self._locks.pop(key, None)
        if not self.available or lock is None:
            return False

        try:
            lock.release()
            logger.debug(f"🔓 Lock liberado: {key}")
            return True
        except redis.exceptions.LockError:
            logger.warning(f"⚠️ Lock {key} expiró antes de liberarse")
            return False
        except redis.exceptions.RedisError as e:
            logger.error(f"Error liberando lock {key}: {e}")
            return False


# ==========================================
# INICIALIZACIÓN
# ==========================================

_redis_cache = None


def get_redis_cache():
    """Instancia compartida, creada en el primer uso"""
    global _redis_cache
    if _redis_cache is None:
        _redis_cache = RedisCache(url=os.getenv('REDIS_URL', 'redis://localhost:6379/0'))
    return _redis_cache
