"""Tests del registro de handlers y del enriquecimiento de payloads."""

import unittest
from datetime import datetime
from types import SimpleNamespace
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from core.errores import RegistroInvalidoError
from core.eventos.enriquecer import enriquecer_payload, categoria_de
from core.eventos.registro import TipoEvento, RegistroHandlers, construir_registro_por_defecto


def h1(payload, ctx):
    return {'success': True}


def h2(payload, ctx):
    return None


class TestRegistroHandlers(unittest.TestCase):
    def test_orden_de_registro(self):
        registro = RegistroHandlers()
        registro.registrar(TipoEvento.PAYOUT_FAILED, h1)
        registro.registrar('payout.failed', h2)
        self.assertEqual(registro.handlers_para('payout.failed'), [h1, h2])
        self.assertEqual(registro.handlers_para(TipoEvento.PAYOUT_FAILED), [h1, h2])
        self.assertEqual(len(registro), 2)

    def test_decorador(self):
        registro = RegistroHandlers()

        @registro.handler(TipoEvento.RESERVA_CREADA)
        def on_reserva(payload, ctx):
            return None

        self.assertEqual(registro.handlers_para('reserva.creada'), [on_reserva])

    def test_tipo_desconocido_o_sin_handlers(self):
        registro = RegistroHandlers()
        self.assertEqual(registro.handlers_para('no.existe'), [])
        self.assertEqual(registro.handlers_para('refund.created'), [])

    def test_validar_ok(self):
        registro = RegistroHandlers().registrar(TipoEvento.PAYOUT_FAILED, h1, h2)
        self.assertTrue(registro.validar())

    def test_validar_tipo_desconocido(self):
        registro = RegistroHandlers().registrar('tipo.inventado', h1)
        with self.assertRaises(RegistroInvalidoError):
            registro.validar()

    def test_validar_no_invocable(self):
        registro = RegistroHandlers().registrar(TipoEvento.PAYOUT_FAILED, 'no soy una función')
        with self.assertRaises(RegistroInvalidoError):
            registro.validar()

    def test_validar_duplicado(self):
        registro = RegistroHandlers().registrar(TipoEvento.PAYOUT_FAILED, h1, h1)
        with self.assertRaises(RegistroInvalidoError) as ctx:
            registro.validar()
        self.assertIn('duplicado', str(ctx.exception))

    def test_registro_por_defecto(self):
        registro = construir_registro_por_defecto()
        self.assertTrue(registro.validar())
        self.assertEqual(len(registro.handlers_para('checkout.session.completed')), 1)
        self.assertEqual(
            registro.handlers_para('payment_intent.canceled'),
            registro.handlers_para('payment_intent.payment_failed'),
        )
        self.assertEqual(registro.handlers_para('refund.created'), [])

    def test_desde_valor(self):
        self.assertIs(TipoEvento.desde_valor('payout.failed'), TipoEvento.PAYOUT_FAILED)
        self.assertIsNone(TipoEvento.desde_valor('payout.exploded'))


class TestEnriquecerPayload(unittest.TestCase):
    def _evento(self, payload):
        return SimpleNamespace(
            id='e1', origen='stripe', tipo='checkout.session.completed',
            payload=payload, recibido_en=datetime(2026, 10, 1, 12, 0, 0),
        )

    def test_payload_dict(self):
        original = {'type': 'checkout.session.completed', 'data': {'object': {}}}
        enriquecido = enriquecer_payload(self._evento(original))
        self.assertEqual(enriquecido['type'], 'checkout.session.completed')
        self.assertEqual(enriquecido['_meta'], {
            'id': 'e1',
            'origen': 'stripe',
            'tipo': 'checkout.session.completed',
            'categoria': 'checkout',
            'recibido_en': '2026-10-01T12:00:00',
        })
        self.assertNotIn('_meta', original)

    def test_payload_no_dict(self):
        self.assertEqual(enriquecer_payload(self._evento([1, 2]))['data'], [1, 2])
        enriquecido = enriquecer_payload(self._evento(None))
        self.assertEqual(set(enriquecido), {'_meta'})

    def test_categoria(self):
        self.assertEqual(categoria_de('account.application.authorized'), 'account')
        self.assertEqual(categoria_de(None), '')


if __name__ == "__main__":
    unittest.main()
