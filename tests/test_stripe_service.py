"""
Tests de la integración con Stripe (firma de webhooks y sincronización de cuentas)
"""

import unittest
from unittest.mock import Mock, patch
import hashlib
import hmac
import json
import time
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import stripe

from tests.base_db import BaseDBTestCase
from core.errores import FirmaWebhookInvalidaError, StripeServiceError
from core.stripe_service import (
    obtener_cliente_stripe,
    verificar_firma_webhook,
    buscar_sesion_checkout,
    cuenta_deberia_estar_activa,
    sincronizar_estado_agencia,
)
from database.models import Agencia

SECRETO = 'whsec_test_secreto'


def firmar(payload, secreto=SECRETO, timestamp=None):
    """Cabecera Stripe-Signature igual que la genera Stripe"""
    timestamp = timestamp or int(time.time())
    firma = hmac.new(secreto.encode(), f"{timestamp}.{payload}".encode(), hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={firma}"


class TestFirmaWebhook(unittest.TestCase):

    def setUp(self):
        self.payload = json.dumps({'id': 'evt_1', 'object': 'event', 'type': 'payout.failed', 'data': {'object': {}}})

    def test_firma_valida(self):
        evento = verificar_firma_webhook(self.payload, firmar(self.payload), SECRETO)
        self.assertEqual(evento['id'], 'evt_1')
        self.assertEqual(evento['type'], 'payout.failed')

    def test_firma_valida_con_bytes(self):
        evento = verificar_firma_webhook(self.payload.encode(), firmar(self.payload), SECRETO)
        self.assertEqual(evento['id'], 'evt_1')

    def test_sin_firma(self):
        with self.assertRaises(FirmaWebhookInvalidaError):
            verificar_firma_webhook(self.payload, None, SECRETO)

    def test_secreto_incorrecto(self):
        with self.assertRaises(FirmaWebhookInvalidaError):
            verificar_firma_webhook(self.payload, firmar(self.payload, secreto='otro'), SECRETO)

    def test_payload_alterado(self):
        firma = firmar(self.payload)
        with self.assertRaises(FirmaWebhookInvalidaError):
            verificar_firma_webhook(self.payload.replace('evt_1', 'evt_2'), firma, SECRETO)

    def test_fuera_de_tolerancia(self):
        viejo = int(time.time()) - 1000
        with self.assertRaises(FirmaWebhookInvalidaError):
            verificar_firma_webhook(self.payload, firmar(self.payload, timestamp=viejo), SECRETO, tolerancia=300)

    def test_cabecera_mal_formada(self):
        with self.assertRaises(FirmaWebhookInvalidaError):
            verificar_firma_webhook(self.payload, 'basura', SECRETO)


class TestClienteStripe(unittest.TestCase):

    def test_sin_clave(self):
        with patch.dict('os.environ', {}, clear=True):
            resultado = obtener_cliente_stripe(None)
        self.assertTrue(resultado.is_failure)

    def test_con_clave(self):
        resultado = obtener_cliente_stripe('sk_test_123')
        self.assertTrue(resultado.is_success)
        self.assertEqual(resultado.value.api_key, 'sk_test_123')

    def test_buscar_sesion_checkout(self):
        cliente = Mock()
        cliente.checkout.Session.list.return_value = {'data': [{'id': 'cs_1'}, {'id': 'cs_2'}]}
        self.assertEqual(buscar_sesion_checkout(cliente, 'pi_1'), {'id': 'cs_1'})

        cliente.checkout.Session.list.return_value = {'data': []}
        self.assertIsNone(buscar_sesion_checkout(cliente, 'pi_1'))

    def test_buscar_sesion_error(self):
        cliente = Mock()
        cliente.checkout.Session.list.side_effect = stripe.APIConnectionError('sin red')
        with self.assertRaises(StripeServiceError) as ctx:
            buscar_sesion_checkout(cliente, 'pi_1')
        self.assertEqual(ctx.exception.contexto, {'payment_intent_id': 'pi_1'})

    def test_cuenta_activa(self):
        self.assertTrue(cuenta_deberia_estar_activa({'charges_enabled': True, 'details_submitted': True}))
        self.assertFalse(cuenta_deberia_estar_activa({'charges_enabled': True, 'details_submitted': False}))
        self.assertFalse(cuenta_deberia_estar_activa({
            'charges_enabled': True, 'details_submitted': True,
            'requirements': {'disabled_reason': 'requirements.past_due'},
        }))


class TestStripeServiceError(unittest.TestCase):

    def test_extrae_campos_del_error(self):
        raw = stripe.CardError(
            'Tarjeta rechazada', param=None, code='card_declined', http_status=402,
            json_body={'error': {'type': 'card_error', 'decline_code': 'insufficient_funds'}},
        )
        error = StripeServiceError('Error cobrando', raw, {'reserva_id': 1})

        datos = error.to_dict()
        self.assertEqual(datos['status_code'], 402)
        self.assertEqual(datos['stripe_code'], 'card_declined')
        self.assertEqual(datos['decline_code'], 'insufficient_funds')
        self.assertEqual(datos['contexto'], {'reserva_id': 1})

    def test_mensaje_por_defecto(self):
        self.assertEqual(str(StripeServiceError(None)), 'Error al procesar operación con Stripe')


class TestSincronizarAgencia(BaseDBTestCase):

    def setUp(self):
        super().setUp()
        self.session = self.session_factory()
        self.session.add(Agencia(nombre='Tours Norte', stripe_account_id='acct_9', activa=True))
        self.session.commit()
        self.cliente = Mock()

    def tearDown(self):
        self.session.close()
        super().tearDown()

    def test_desactiva_agencia(self):
        self.cliente.Account.retrieve.return_value = {'charges_enabled': False, 'details_submitted': True}

        resultado = sincronizar_estado_agencia(self.session, self.cliente, 'acct_9')

        self.assertTrue(resultado.is_success)
        self.assertFalse(resultado.value['activa'])
        self.assertFalse(self.session.query(Agencia).one().activa)

    def test_agencia_inexistente(self):
        resultado = sincronizar_estado_agencia(self.session, self.cliente, 'acct_nadie')
        self.assertTrue(resultado.is_failure)
        self.cliente.Account.retrieve.assert_not_called()

    def test_error_api(self):
        self.cliente.Account.retrieve.side_effect = stripe.APIConnectionError('timeout')
        resultado = sincronizar_estado_agencia(self.session, self.cliente, 'acct_9')
        self.assertIsInstance(resultado.error, StripeServiceError)
        self.assertTrue(self.session.query(Agencia).one().activa)


if __name__ == "__main__":
    unittest.main()
