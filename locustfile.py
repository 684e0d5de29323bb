import os

from locust import HttpUser, task, between

CRON_SECRET_TOKEN = os.getenv('CRON_SECRET_TOKEN', '')


class ClientePublico(HttpUser):
    # Simula que el usuario espera entre 1 y 3 segundos entre cada acción
    wait_time = between(1, 3)

    @task(5)
    def consultar_salud(self):
        """Consulta el estado del outbox (endpoint con rate limit)"""
        with self.client.get("/api/public/salud", catch_response=True) as respuesta:
            # 429 es la respuesta esperada al superar RATELIMIT_PUBLICO
            if respuesta.status_code in (200, 429):
                respuesta.success()

    @task(1)
    def simular_error(self):
        """Entra en una ruta que no existe para ver cómo responde el servidor"""
        self.client.get("/api/ruta-inexistente")


class CronWorker(HttpUser):
    """Simula ticks del cron solapados contra el worker"""
    wait_time = between(5, 10)

    @task
    def procesar_lote(self):
        self.client.post(
            "/api/trabajadores/procesar_lote",
            headers={"Authorization": f"Bearer {CRON_SECRET_TOKEN}"}
        )
