"""
Tests de RedisCache con un cliente simulado
"""

import unittest
from unittest.mock import MagicMock
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import redis

from cache.redis_cache import RedisCache


class TestRedisCache(unittest.TestCase):

    def setUp(self):
        self.client = MagicMock()
        self.cache = RedisCache(client=self.client)

    def test_disponible(self):
        self.assertTrue(self.cache.available)
        self.client.ping.assert_called_once()

    def test_set_y_get(self):
        self.assertTrue(self.cache.set('k', {'a': 1}, ttl=60))
        clave, ttl, valor = self.client.setex.call_args[0]
        self.assertEqual((clave, ttl), ('k', 60))

        self.client.get.return_value = valor
        self.assertEqual(self.cache.get('k'), {'a': 1})

    def test_get_miss(self):
        self.client.get.return_value = None
        self.assertIsNone(self.cache.get('k'))

    def test_error_de_redis_no_se_propaga(self):
        self.client.get.side_effect = redis.ConnectionError('caído')
        self.assertIsNone(self.cache.get('k'))

    def test_lock(self):
        lock = self.client.lock.return_value
        lock.acquire.return_value = True

        self.assertTrue(self.cache.adquirir_lock('despachador:lock', ttl=900))
        self.client.lock.assert_called_once_with('despachador:lock', timeout=900)
        lock.acquire.assert_called_once_with(blocking=False)

        self.assertTrue(self.cache.liberar_lock('despachador:lock'))
        lock.release.assert_called_once_with()

    def test_lock_ocupado(self):
        lock = self.client.lock.return_value
        lock.acquire.return_value = False

        self.assertFalse(self.cache.adquirir_lock('despachador:lock'))
        self.assertFalse(self.cache.liberar_lock('despachador:lock'))
        lock.release.assert_not_called()

    def test_lock_expirado_no_borra_el_de_otro(self):
        """Si el lock expiró y lo tomó otro proceso, release() lo rechaza"""
        lock = self.client.lock.return_value
        lock.acquire.return_value = True
        lock.release.side_effect = redis.exceptions.LockError('no es nuestro')
        self.cache.adquirir_lock('despachador:lock')

        self.assertFalse(self.cache.liberar_lock('despachador:lock'))
        self.client.delete.assert_not_called()

    def test_error_de_redis_al_tomar_lock(self):
        self.client.lock.return_value.acquire.side_effect = redis.ConnectionError('caído')
        self.assertIsNone(self.cache.adquirir_lock('despachador:lock'))


class TestRedisNoDisponible(unittest.TestCase):

    def setUp(self):
        client = MagicMock()
        client.ping.side_effect = redis.ConnectionError('sin servidor')
        self.cache = RedisCache(client=client)

    def test_fallback(self):
        self.assertFalse(self.cache.available)
        self.assertIsNone(self.cache.get('k'))
        self.assertFalse(self.cache.set('k', 1))
        self.assertIsNone(self.cache.adquirir_lock('k'))


if __name__ == "__main__":
    unittest.main()
