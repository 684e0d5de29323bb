from flask_mail import Mail, Message
import json
import logging
import os

logger = logging.getLogger(__name__)


class EmailService:
    """
    Correos transaccionales y avisos a operadores.

    Todos los envíos son best-effort: un fallo se registra en el log y se
    devuelve False, nunca se propaga al llamador.
    """

    def __init__(self, app=None):
        self.mail = None
        self.app = None
        self.admin_email = None
        self.support_email = None
        if app:
            self.init_app(app)

    def init_app(self, app):
        app.config.setdefault('MAIL_SERVER', os.getenv('MAIL_SERVER', 'smtp.gmail.com'))
        app.config.setdefault('MAIL_PORT', int(os.getenv('MAIL_PORT', 587)))
        app.config.setdefault('MAIL_USE_TLS', os.getenv('MAIL_USE_TLS', 'True') == 'True')
        app.config.setdefault('MAIL_USERNAME', os.getenv('MAIL_USERNAME'))
        app.config.setdefault('MAIL_PASSWORD', os.getenv('MAIL_PASSWORD'))
        app.config.setdefault('MAIL_DEFAULT_SENDER', os.getenv('MAIL_DEFAULT_SENDER', os.getenv('MAIL_USERNAME')))

        self.app = app
        self.mail = Mail(app)
        self.admin_email = app.config.get('ADMIN_EMAIL') or os.getenv('ADMIN_EMAIL', app.config.get('MAIL_USERNAME'))
        self.support_email = app.config.get('SUPPORT_EMAIL') or self.admin_email

    def enviar_evento_fallido(self, evento, error, max_intentos):
        """Aviso al operador: un evento agotó sus reintentos y quedó en 'fallido'."""
        subject = f"Evento fallido tras {max_intentos} intentos"
        payload = json.dumps(evento.payload, ensure_ascii=False, default=str)
        html_body = f"""
        <html>
        <body style="font-family: sans-serif; padding: 20px;">
            <h2 style="color: #b91c1c;">Evento fallido</h2>
            <ul>
                <li><strong>ID:</strong> {evento.id}</li>
                <li><strong>Origen:</strong> {evento.origen}</li>
                <li><strong>Tipo:</strong> {evento.tipo}</li>
                <li><strong>Intentos:</strong> {evento.intentos}</li>
                <li><strong>Último intento:</strong> {evento.ultimo_intento}</li>
            </ul>
            <p style="background:#fef2f2; padding:15px; border-left:4px solid #b91c1c;">{str(error)[:500]}</p>
            <pre style="background:#f3f4f6; padding:15px; white-space: pre-wrap;">{payload}</pre>
        </body>
        </html>
        """
        return self._send_raw(self.admin_email, subject, html_body)

    def enviar_pago_no_completado(self, session_id, reserva_id, payment_status, agencia_id):
        subject = f"Pago no completado para reserva {reserva_id}"
        html_body = f"""
        <html>
        <body style="font-family: sans-serif; padding: 20px;">
            <h2>Pago no completado</h2>
            <ul>
                <li><strong>Sesión:</strong> {session_id}</li>
                <li><strong>Reserva:</strong> {reserva_id}</li>
                <li><strong>Agencia:</strong> {agencia_id}</li>
                <li><strong>Estado del pago:</strong> {payment_status}</li>
            </ul>
        </body>
        </html>
        """
        return self._send_raw(self.admin_email, subject, html_body)

    def enviar_confirmacion_reserva(self, reserva):
        """Confirmación al cliente final tras el pago"""
        subject = f"✅ Reserva Confirmada: {reserva.actividad or reserva.id}"
        fecha = reserva.fecha_actividad.strftime('%d/%m/%Y %H:%M') if reserva.fecha_actividad else 'A confirmar'
        html_body = f"""
        <html>
        <body style="font-family: sans-serif; background-color: #f8fafc; padding: 20px;">
        <div style="max-width: 600px; margin: auto; background: white; padding: 30px; border-radius: 12px; border-top: 6px solid #bfa15f;">
            <h1 style="color: #1e293b; margin-top:0;">¡Tu reserva está confirmada!</h1>
            <p>Hola {reserva.nombre_cliente or ''},</p>
            <p>Hemos recibido tu pago para <strong>{reserva.actividad or 'tu actividad'}</strong>.</p>
            <ul>
                <li><strong>Código de reserva:</strong> {reserva.id}</li>
                <li><strong>Fecha:</strong> {fecha}</li>
                <li><strong>Total:</strong> {reserva.monto_total}</li>
            </ul>
        </div>
        </body>
        </html>
        """
        return self._send_raw(reserva.email_cliente, subject, html_body)

    def enviar_payout_fallido(self, agencia, payout):
        """Aviso a la agencia de que su payout no llegó a la cuenta bancaria"""
        subject = "Alerta: Problema con pago a tu cuenta bancaria"
        html_body = f"""
        <html>
        <body style="font-family: sans-serif; padding: 20px;">
            <h2>Hola {agencia.nombre},</h2>
            <p>No hemos podido transferir {payout.get('amount', 0) / 100:.2f} {str(payout.get('currency', '')).upper()} a tu cuenta.</p>
            <p><strong>Motivo:</strong> {payout.get('failure_message') or payout.get('failure_code')}</p>
            <p>Referencia: {payout.get('id')}</p>
        </body>
        </html>
        """
        return self._send_raw(agencia.email_contacto, subject, html_body)

    def enviar_alerta_interna_payout(self, agencia, payout):
        subject = f"Payout fallido - Agencia: {agencia.nombre if agencia else 'cuenta principal'}"
        detalles = json.dumps(payout, ensure_ascii=False, default=str, indent=2)
        html_body = f"""
        <html>
        <body style="font-family: sans-serif; padding: 20px;">
            <h2>Payout fallido</h2>
            <p>Agencia: {agencia.id if agencia else '-'}</p>
            <pre style="background:#f3f4f6; padding:15px; white-space: pre-wrap;">{detalles}</pre>
        </body>
        </html>
        """
        return self._send_raw(self.support_email, subject, html_body)

    def _send_raw(self, to, subject, html):
        if not to:
            logger.warning(f"⚠️ Email '{subject}' sin destinatario, no se envía")
            return False
        if self.mail is None:
            logger.error(f"❌ EmailService sin inicializar, no se envía '{subject}'")
            return False
        try:
            # Message lee el remitente por defecto de current_app
            with self.app.app_context():
                msg = Message(subject=subject, recipients=[to], html=html)
                self.mail.send(msg)
            logger.info(f"✅ Email enviado a {to}: {subject}")
            return True
        except Exception as e:
            logger.error(f"❌ Error enviando email a {to}: {e}")
            return False

