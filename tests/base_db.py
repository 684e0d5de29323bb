"""
Base para tests con base de datos: SQLite en memoria compartida entre sesiones
"""

import unittest
import sys
import os

# Añadir el directorio raíz al path para imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database.models import Base, Evento, PENDIENTE, ahora_utc


class BaseDBTestCase(unittest.TestCase):

    def setUp(self):
        self.engine = create_engine(
            'sqlite://',
            connect_args={'check_same_thread': False},
            poolclass=StaticPool,
        )
        Base.metadata.create_all(self.engine)
        self.session_factory = sessionmaker(bind=self.engine)

    def tearDown(self):
        Base.metadata.drop_all(self.engine)
        self.engine.dispose()

    def crear(self, *objetos):
        """Inserta y devuelve los ids de los objetos"""
        session = self.session_factory()
        try:
            session.add_all(objetos)
            session.commit()
            return [obj.id for obj in objetos]
        finally:
            session.close()

    def crear_evento(self, tipo='reserva.creada', origen='stripe', payload=None, **campos):
        campos.setdefault('estado', PENDIENTE)
        campos.setdefault('intentos', 0)
        campos.setdefault('recibido_en', ahora_utc())
        evento = Evento(origen=origen, tipo=tipo, payload=payload if payload is not None else {}, **campos)
        return self.crear(evento)[0]

    def obtener(self, modelo, id_):
        session = self.session_factory()
        try:
            obj = session.get(modelo, id_)
            if obj is not None:
                session.expunge(obj)
            return obj
        finally:
            session.close()

    def contar(self, modelo, **filtros):
        session = self.session_factory()
        try:
            return session.query(modelo).filter_by(**filtros).count()
        finally:
            session.close()
