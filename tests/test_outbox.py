"""Tests de escritura en el outbox."""

import unittest
from unittest.mock import patch
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from tests.base_db import BaseDBTestCase
from core.eventos import outbox
from core.eventos.outbox import publicar_evento, registrar_evento_externo
from database.models import Evento, PENDIENTE


class TestOutbox(BaseDBTestCase):

    def test_publicar_no_hace_commit(self):
        session = self.session_factory()
        evento = publicar_evento(session, 'interno', 'reserva.creada', {'reservaId': 1})
        self.assertIsNotNone(evento.id)
        self.assertEqual(evento.estado, PENDIENTE)
        self.assertEqual(evento.intentos, 0)
        session.rollback()
        session.close()
        self.assertEqual(self.contar(Evento), 0)

    def test_publicar_con_commit_del_llamador(self):
        session = self.session_factory()
        publicar_evento(session, 'interno', 'reserva.creada', None)
        session.commit()
        session.close()
        self.assertEqual(self.contar(Evento, estado=PENDIENTE), 1)

    def test_publicar_requiere_origen_y_tipo(self):
        session = self.session_factory()
        with self.assertRaises(ValueError):
            publicar_evento(session, '', 'reserva.creada', {})
        with self.assertRaises(ValueError):
            publicar_evento(session, 'stripe', None, {})
        session.close()

    def test_registrar_externo_idempotente(self):
        session = self.session_factory()
        evento, creado = registrar_evento_externo(session, 'stripe', 'payout.failed', {'id': 'evt_1'}, 'evt_1')
        primer_id = evento.id
        self.assertTrue(creado)

        repetido, creado = registrar_evento_externo(session, 'stripe', 'payout.failed', {'id': 'evt_1'}, 'evt_1')
        self.assertFalse(creado)
        self.assertEqual(repetido.id, primer_id)
        session.close()

        self.assertEqual(self.contar(Evento), 1)

    def test_mismo_externo_id_en_otro_origen(self):
        session = self.session_factory()
        registrar_evento_externo(session, 'stripe', 'payout.failed', {}, 'x1')
        _, creado = registrar_evento_externo(session, 'otro', 'payout.failed', {}, 'x1')
        session.close()
        self.assertTrue(creado)
        self.assertEqual(self.contar(Evento), 2)

    def test_insert_concurrente_reutiliza_la_fila(self):
        """Otra petición insertó el mismo evento entre la consulta y el insert"""
        existente_id = self.crear_evento('payout.failed', origen='stripe', externo_id='evt_carrera')
        buscar_real = outbox.buscar_evento_externo
        llamadas = []

        def buscar_tarde(session, origen, externo_id):
            llamadas.append(externo_id)
            if len(llamadas) == 1:
                return None
            return buscar_real(session, origen, externo_id)

        session = self.session_factory()
        with patch('core.eventos.outbox.buscar_evento_externo', side_effect=buscar_tarde):
            evento, creado = registrar_evento_externo(session, 'stripe', 'payout.failed', {}, 'evt_carrera')
        evento_id = evento.id
        session.close()

        self.assertFalse(creado)
        self.assertEqual(evento_id, existente_id)
        self.assertEqual(len(llamadas), 2)
        self.assertEqual(self.contar(Evento), 1)


if __name__ == "__main__":
    unittest.main()
