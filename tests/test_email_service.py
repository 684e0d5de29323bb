"""
Tests del servicio de email (Flask-Mail en modo testing, sin SMTP)
"""

import unittest
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from flask import Flask

from core.email_service import EmailService
from database.models import Agencia, Evento, Reserva, ahora_utc


class TestEmailService(unittest.TestCase):

    def setUp(self):
        self.app = Flask(__name__)
        self.app.config.update(
            TESTING=True,
            MAIL_DEFAULT_SENDER='noreply@example.com',
            ADMIN_EMAIL='ops@example.com',
            SUPPORT_EMAIL='soporte@example.com',
        )
        self.servicio = EmailService(self.app)

    def test_evento_fallido_al_admin(self):
        evento = Evento(id='e-1', origen='stripe', tipo='payout.failed', payload={'id': 'evt_1'},
                        intentos=5, ultimo_intento=ahora_utc())

        with self.servicio.mail.record_messages() as enviados:
            self.assertTrue(self.servicio.enviar_evento_fallido(evento, 'Reserva no encontrada', 5))

        self.assertEqual(len(enviados), 1)
        self.assertEqual(enviados[0].recipients, ['ops@example.com'])
        self.assertIn('5 intentos', enviados[0].subject)
        self.assertIn('Reserva no encontrada', enviados[0].html)
        self.assertIn('evt_1', enviados[0].html)

    def test_confirmacion_al_cliente(self):
        reserva = Reserva(id=3, email_cliente='ana@example.com', nombre_cliente='Ana', actividad='Kayak')

        with self.servicio.mail.record_messages() as enviados:
            self.assertTrue(self.servicio.enviar_confirmacion_reserva(reserva))

        self.assertEqual(enviados[0].recipients, ['ana@example.com'])
        self.assertIn('Kayak', enviados[0].subject)

    def test_payout_fallido(self):
        agencia = Agencia(id=2, nombre='Tours Sur', email_contacto='agencia@example.com')
        payout = {'id': 'po_1', 'amount': 5000, 'currency': 'usd', 'failure_message': 'Cuenta cerrada'}

        with self.servicio.mail.record_messages() as enviados:
            self.servicio.enviar_payout_fallido(agencia, payout)
            self.servicio.enviar_alerta_interna_payout(None, payout)

        self.assertEqual([m.recipients for m in enviados], [['agencia@example.com'], ['soporte@example.com']])
        self.assertIn('50.00 USD', enviados[0].html)

    def test_sin_destinatario(self):
        reserva = Reserva(id=4, email_cliente=None)
        self.assertFalse(self.servicio.enviar_confirmacion_reserva(reserva))

    def test_sin_inicializar(self):
        self.assertFalse(EmailService().enviar_pago_no_completado('cs_1', 1, 'unpaid', None))


if __name__ == "__main__":
    unittest.main()
