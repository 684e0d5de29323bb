"""
Envía un webhook de Stripe firmado al servidor local.

Uso:
    python scripts/simular_webhook.py checkout.session.completed --reserva 42
    python scripts/simular_webhook.py payout.failed --cuenta acct_123

La firma se calcula igual que Stripe (HMAC-SHA256 de "<timestamp>.<payload>")
con STRIPE_WEBHOOK_SECRET, así que no hace falta la CLI de Stripe.
"""

import argparse
import hashlib
import hmac
import json
import os
import time
import uuid

import requests
from dotenv import load_dotenv

load_dotenv()

# URL local
BASE_URL = os.getenv('APP_URL', 'http://127.0.0.1:8000')


def firmar(payload, secreto, timestamp=None):
    timestamp = timestamp or int(time.time())
    firmado = f"{timestamp}.{payload}".encode('utf-8')
    firma = hmac.new(secreto.encode('utf-8'), firmado, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={firma}"


def construir_evento(tipo, reserva_id=None, cuenta=None):
    objeto = {'id': f"obj_{uuid.uuid4().hex[:14]}"}

    if tipo.startswith('checkout.session'):
        objeto.update({
            'object': 'checkout.session',
            'payment_status': 'paid',
            'payment_intent': f"pi_{uuid.uuid4().hex[:14]}",
            'amount_total': 12000,
            'currency': 'usd',
            'customer_details': {'email': 'cliente@example.com', 'name': 'Cliente Prueba'},
            'metadata': {'reservaId': str(reserva_id or 1), 'feeFloraPlusCents': '600'},
        })
    elif tipo.startswith('payout'):
        objeto.update({
            'object': 'payout',
            'amount': 5000,
            'currency': 'usd',
            'failure_code': 'account_closed',
            'failure_message': 'The bank account has been closed',
        })

    evento = {
        'id': f"evt_{uuid.uuid4().hex[:14]}",
        'object': 'event',
        'type': tipo,
        'created': int(time.time()),
        'data': {'object': objeto},
    }
    if cuenta:
        evento['account'] = cuenta
    return evento


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description='Simular webhook de Stripe')
    parser.add_argument('tipo', help='Tipo de evento, p.ej. checkout.session.completed')
    parser.add_argument('--reserva', type=int, help='ID de reserva para checkout')
    parser.add_argument('--cuenta', help='Cuenta conectada (acct_...)')
    args = parser.parse_args()

    secreto = os.getenv('STRIPE_WEBHOOK_SECRET')
    if not secreto:
        raise SystemExit("❌ STRIPE_WEBHOOK_SECRET no configurado")

    payload = json.dumps(construir_evento(args.tipo, args.reserva, args.cuenta))
    respuesta = requests.post(
        f"{BASE_URL}/api/webhooks/stripe",
        data=payload,
        headers={'Content-Type': 'application/json', 'Stripe-Signature': firmar(payload, secreto)},
        timeout=30,
    )
    print(f"📡 {respuesta.status_code}: {respuesta.text}")
