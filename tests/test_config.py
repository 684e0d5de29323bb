"""Tests de los helpers de configuración."""

import unittest
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from core.config import parse_entero, parse_bool


class TestParseEntero(unittest.TestCase):
    def test_valores_validos(self):
        self.assertEqual(parse_entero("25", 5), 25)
        self.assertEqual(parse_entero(" 7 ", 5), 7)
        self.assertEqual(parse_entero(3, 5), 3)

    def test_default_si_invalido(self):
        self.assertEqual(parse_entero(None, 5), 5)
        self.assertEqual(parse_entero("abc", 5), 5)
        self.assertEqual(parse_entero("", 100), 100)

    def test_limites(self):
        self.assertEqual(parse_entero("0", 5, minimo=1), 1)
        self.assertEqual(parse_entero("5000", 100, minimo=1, maximo=1000), 1000)


class TestParseBool(unittest.TestCase):
    def test_verdaderos(self):
        for valor in ('true', 'True', '1', 'yes', 'si', 'on'):
            self.assertTrue(parse_bool(valor), valor)

    def test_falsos(self):
        for valor in ('false', '0', 'no', 'off', ''):
            self.assertFalse(parse_bool(valor, default=True), valor)

    def test_default(self):
        self.assertTrue(parse_bool(None, default=True))
        self.assertFalse(parse_bool(None))
        self.assertTrue(parse_bool(True))


if __name__ == "__main__":
    unittest.main()
