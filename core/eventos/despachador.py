"""
Despachador del outbox de eventos.

Reclama lotes de eventos 'pendiente', ejecuta los handlers registrados para
cada tipo y registra el resultado:

    pendiente -> en_proceso -> procesado
                            -> error    (reintentable tras un backoff)
                            -> fallido  (tras MAX_INTENTOS, se avisa al operador)

Cada evento se procesa en su propia sesión: si un handler falla se hace
rollback del trabajo en base de datos de todos los handlers del evento.
Los efectos externos (emails, llamadas a Stripe) no se deshacen.
"""

import logging
import time
from datetime import timedelta

from sqlalchemy import case, func, or_

from core.errores import HandlerFallidoError
from core.eventos.enriquecer import enriquecer_payload
from core.eventos.registro import ContextoEvento
from core.resultado import Resultado
from database.models import (
    Evento, ahora_utc, PENDIENTE, EN_PROCESO, PROCESADO, ERROR, FALLIDO, ESTADOS_EVENTO,
)
from monitoring.prometheus_metrics import app_metrics

logger = logging.getLogger(__name__)

MAX_INTENTOS = 5
TAMANO_LOTE = 100
LONGITUD_MAX_ERROR = 500
ORIGEN_PRIORITARIO = 'stripe'


class DespachadorEventos:
    LOCK_KEY = 'despachador:lock'
    STATS_KEY = 'despachador:ultima_ejecucion'

    def __init__(self, session_factory, registro, notificador=None, cache=None, stripe_client=None,
                 max_intentos=MAX_INTENTOS, tamano_lote=TAMANO_LOTE, lease_minutos=15,
                 backoff_base_segundos=60, backoff_max_segundos=3600,
                 admin_email=None, support_email=None, metricas=app_metrics, reloj=ahora_utc):
        self.session_factory = session_factory
        self.registro = registro
        self.notificador = notificador
        self.cache = cache
        self.stripe_client = stripe_client
        self.max_intentos = max_intentos
        self.tamano_lote = tamano_lote
        self.lease_minutos = lease_minutos
        self.backoff_base_segundos = backoff_base_segundos
        self.backoff_max_segundos = backoff_max_segundos
        self.admin_email = admin_email
        self.support_email = support_email
        self.metricas = metricas
        self.reloj = reloj

    # ------------------------------------------------------------------
    # Reclamo
    # ------------------------------------------------------------------

    def reclamar_lote(self, limite=None):
        """
        Marca como 'en_proceso' hasta `limite` eventos pendientes y los devuelve.

        Orden: origen 'stripe' primero, después por recibido_en ascendente.
        En PostgreSQL se usa FOR UPDATE SKIP LOCKED para que dos ejecuciones
        solapadas no reclamen las mismas filas.
        """
        limite = limite or self.tamano_lote
        session = self.session_factory()
        try:
            prioridad = case((Evento.origen == ORIGEN_PRIORITARIO, 0), else_=1)
            candidatos = (
                session.query(Evento)
                .filter(Evento.estado == PENDIENTE)
                .order_by(prioridad, Evento.recibido_en.asc())
                .limit(limite)
                .with_for_update(skip_locked=True)
                .all()
            )
            ahora = self.reloj()
            ids = []
            for evento in candidatos:
                evento.estado = EN_PROCESO
                evento.reclamado_en = ahora
                ids.append(evento.id)
            session.commit()

            if not ids:
                return []

            por_id = {ev.id: ev for ev in session.query(Evento).filter(Evento.id.in_(ids)).all()}
            session.expunge_all()
            reclamados = [por_id[i] for i in ids]
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

        if self.metricas is not None:
            self.metricas.track_claim(len(reclamados))
        logger.info(f"📥 {len(reclamados)} eventos reclamados")
        return reclamados

    # ------------------------------------------------------------------
    # Procesamiento
    # ------------------------------------------------------------------

    def procesar_evento(self, evento):
        """Procesa un evento ya reclamado. Devuelve el estado final."""
        evento_id = evento.id if isinstance(evento, Evento) else evento
        return self._procesar(evento_id)

    def procesar_evento_por_id(self, evento_id):
        """
        Reclama y procesa un único evento (despacho síncrono desde el webhook).

        Devuelve None si el evento no estaba 'pendiente' (otro proceso lo tiene
        o ya terminó).
        """
        session = self.session_factory()
        try:
            reclamados = (
                session.query(Evento)
                .filter(Evento.id == evento_id, Evento.estado == PENDIENTE)
                .update({'estado': EN_PROCESO, 'reclamado_en': self.reloj()}, synchronize_session=False)
            )
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

        if not reclamados:
            logger.info(f"ℹ️ Evento {evento_id} no está pendiente, no se despacha")
            return None
        return self._procesar(evento_id)

    def _procesar(self, evento_id):
        session = self.session_factory()
        inicio = time.monotonic()
        tipo = None
        try:
            evento = session.get(Evento, evento_id)
            if evento is None:
                logger.warning(f"⚠️ Evento {evento_id} no existe")
                return None
            tipo = evento.tipo

            try:
                payload = enriquecer_payload(evento)
                handlers = self.registro.handlers_para(tipo)
                if not handlers:
                    logger.info(f"ℹ️ Sin handlers registrados para {tipo}")

                ctx = ContextoEvento(
                    session=session,
                    email=self.notificador,
                    stripe=self.stripe_client,
                    admin_email=self.admin_email,
                    support_email=self.support_email,
                )
                for handler in handlers:
                    resultado = handler(payload, ctx)
                    self._verificar_resultado(resultado, tipo, handler)

                evento.estado = PROCESADO
                evento.procesado_en = self.reloj()
                evento.error_msg = None
                session.commit()
                estado = PROCESADO
                logger.info(f"✅ Evento {evento_id} ({tipo}) procesado")
            except Exception as e:
                session.rollback()
                logger.error(f"❌ Fallo procesando evento {evento_id} ({tipo}): {e}")
                estado = self._registrar_fallo(session, evento_id, e)
        finally:
            session.close()

        if self.metricas is not None and estado is not None:
            self.metricas.track_evento(tipo, estado, time.monotonic() - inicio)
        return estado

    @staticmethod
    def _verificar_resultado(resultado, tipo, handler):
        """Convierte un fallo "suave" ({'success': False}) en excepción."""
        nombre = getattr(handler, '__name__', repr(handler))
        if isinstance(resultado, Resultado):
            if resultado.is_failure:
                raise HandlerFallidoError(str(resultado.error), tipo=tipo, handler=nombre)
            return
        if isinstance(resultado, dict) and resultado.get('success') is False:
            mensaje = resultado.get('error') or resultado.get('message')
            raise HandlerFallidoError(str(mensaje) if mensaje else None, tipo=tipo, handler=nombre)

    def _registrar_fallo(self, session, evento_id, error):
        evento = session.get(Evento, evento_id)
        intentos = (evento.intentos or 0) + 1
        evento.intentos = intentos
        evento.error_msg = str(error)[:LONGITUD_MAX_ERROR]
        evento.ultimo_intento = self.reloj()
        evento.reclamado_en = None
        evento.estado = FALLIDO if intentos >= self.max_intentos else ERROR
        session.commit()

        if evento.estado == FALLIDO:
            logger.error(f"💀 Evento {evento_id} fallido tras {intentos} intentos")
            self._notificar_fallido(evento, error)
        else:
            logger.warning(f"⚠️ Evento {evento_id} en error (intento {intentos}/{self.max_intentos})")
        return evento.estado

    def _notificar_fallido(self, evento, error):
        if self.notificador is None:
            logger.warning(f"⚠️ Sin notificador configurado para el evento fallido {evento.id}")
            return False
        try:
            enviado = self.notificador.enviar_evento_fallido(evento, error, self.max_intentos)
        except Exception as e:
            logger.error(f"❌ Error notificando evento fallido {evento.id}: {e}")
            return False
        if not enviado:
            logger.error(f"❌ No se pudo notificar el evento fallido {evento.id}")
        return bool(enviado)

    # ------------------------------------------------------------------
    # Mantenimiento
    # ------------------------------------------------------------------

    def backoff(self, intentos):
        """Segundos de espera antes de reintentar un evento con `intentos` fallos."""
        exponente = max(intentos - 1, 0)
        return min(self.backoff_base_segundos * (2 ** exponente), self.backoff_max_segundos)

    def liberar_reclamos_vencidos(self):
        """Devuelve a 'pendiente' los eventos 'en_proceso' cuyo lease venció."""
        limite = self.reloj() - timedelta(minutes=self.lease_minutos)
        session = self.session_factory()
        try:
            liberados = (
                session.query(Evento)
                .filter(
                    Evento.estado == EN_PROCESO,
                    or_(Evento.reclamado_en.is_(None), Evento.reclamado_en < limite),
                )
                .update({'estado': PENDIENTE, 'reclamado_en': None}, synchronize_session=False)
            )
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

        if liberados:
            logger.warning(f"♻️ {liberados} eventos atascados en 'en_proceso' devueltos a pendiente")
            if self.metricas is not None:
                self.metricas.track_recuperados('lease_vencido', liberados)
        return liberados

    def reencolar_errores(self):
        """Devuelve a 'pendiente' los eventos en 'error' cuyo backoff ya pasó."""
        ahora = self.reloj()
        # Ningún evento espera menos que el backoff del primer intento
        corte = ahora - timedelta(seconds=self.backoff(1))
        session = self.session_factory()
        reencolados = 0
        try:
            eventos = (
                session.query(Evento)
                .filter(
                    Evento.estado == ERROR,
                    or_(Evento.ultimo_intento.is_(None), Evento.ultimo_intento <= corte),
                )
                .order_by(Evento.ultimo_intento.asc())
                .limit(self.tamano_lote)
                .with_for_update(skip_locked=True)
                .all()
            )
            for evento in eventos:
                espera = timedelta(seconds=self.backoff(evento.intentos or 0))
                if evento.ultimo_intento is None or evento.ultimo_intento + espera <= ahora:
                    evento.estado = PENDIENTE
                    reencolados += 1
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

        if reencolados:
            logger.info(f"🔁 {reencolados} eventos en error reencolados")
            if self.metricas is not None:
                self.metricas.track_recuperados('reintento', reencolados)
        return reencolados

    def reintentar_fallido(self, evento_id):
        """Reencola manualmente un evento 'fallido' (acción de operador)."""
        session = self.session_factory()
        try:
            actualizados = (
                session.query(Evento)
                .filter(Evento.id == evento_id, Evento.estado == FALLIDO)
                .update(
                    {'estado': PENDIENTE, 'intentos': 0, 'error_msg': None, 'reclamado_en': None},
                    synchronize_session=False,
                )
            )
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

        if actualizados:
            logger.info(f"🔁 Evento fallido {evento_id} reencolado por un operador")
        return bool(actualizados)

    def contar_por_estado(self):
        session = self.session_factory()
        try:
            filas = session.query(Evento.estado, func.count(Evento.id)).group_by(Evento.estado).all()
        finally:
            session.close()

        conteos = {estado: 0 for estado in ESTADOS_EVENTO}
        conteos.update({estado: cantidad for estado, cantidad in filas})
        if self.metricas is not None:
            self.metricas.update_backlog(conteos)
        return conteos

    # ------------------------------------------------------------------
    # Lote completo
    # ------------------------------------------------------------------

    def procesar_lote(self):
        """
        Una ejecución del worker: mantenimiento, reclamo y procesamiento.

        Si hay cache compartida se toma un lock para no solapar ejecuciones;
        sin cache el reclamo con SKIP LOCKED sigue evitando trabajo duplicado.
        """
        lock = self._adquirir_lock()
        if lock is False:
            logger.info("⏭️ Otra ejecución del despachador está en curso, se omite")
            return {'omitido': True}

        try:
            stats = {
                'reclamados': 0,
                'procesados': 0,
                'errores': 0,
                'fallidos': 0,
                'sin_resolver': 0,
                'liberados': self.liberar_reclamos_vencidos(),
                'reencolados': self.reencolar_errores(),
            }

            eventos = self.reclamar_lote()
            stats['reclamados'] = len(eventos)

            for evento in eventos:
                try:
                    estado = self._procesar(evento.id)
                except Exception as e:
                    # El evento queda en 'en_proceso' y lo recupera el lease
                    logger.exception(f"❌ No se pudo registrar el resultado del evento {evento.id}: {e}")
                    stats['sin_resolver'] += 1
                    continue

                if estado == PROCESADO:
                    stats['procesados'] += 1
                elif estado == ERROR:
                    stats['errores'] += 1
                elif estado == FALLIDO:
                    stats['fallidos'] += 1

            stats['finalizado_en'] = self.reloj().isoformat()
            logger.info(f"📊 Lote terminado: {stats}")
            self._guardar_stats(stats)
            return stats
        finally:
            if lock:
                self._liberar_lock()

    def ultima_ejecucion(self):
        if self.cache is None:
            return None
        return self.cache.get(self.STATS_KEY)

    def _adquirir_lock(self):
        """True si se obtuvo el lock, False si lo tiene otro, None si no hay cache."""
        if self.cache is None or not getattr(self.cache, 'available', False):
            return None
        return self.cache.adquirir_lock(self.LOCK_KEY, ttl=self.lease_minutos * 60)

    def _liberar_lock(self):
        self.cache.liberar_lock(self.LOCK_KEY)

    def _guardar_stats(self, stats):
        if self.cache is not None:
            self.cache.set(self.STATS_KEY, stats, ttl=24 * 3600)
