# gunicorn -c gunicorn_config.py "app:create_app()"

# Gunicorn config variables
workers = 4
bind = "0.0.0.0:8000"
keepalive = 120
errorlog = "-"
accesslog = "-"
loglevel = "info"
worker_class = "gthread"
threads = 4
# El despacho síncrono del webhook puede llamar a Stripe y enviar emails
timeout = 120

# Environment variables
raw_env = [
    "FLASK_ENV=production",
    "PYTHONUNBUFFERED=true",
    # Con varios workers el scheduler interno correría en cada uno: usar cron externo
    "SCHEDULER_HABILITADO=false",
]
