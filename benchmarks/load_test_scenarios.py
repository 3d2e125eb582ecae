import random
from locust import HttpUser, task, between

# --- Skenario 1: Lookup (read-heavy) ---

class LookupUser(HttpUser):
    wait_time = between(0.01, 0.1)

    def on_start(self):
        """Pastikan ring tidak kosong sebelum lookup dimulai."""
        for i in range(5):
            with self.client.post(
                "/ring/nodes",
                json={"identity": i, "address": f"10.0.0.{i}", "port": 8080, "weight": 1 + i % 3},
                name="/ring/nodes (bootstrap)",
                catch_response=True,
            ) as resp:
                if resp.status_code == 409:
                    resp.success() # User lain sudah menambahkan node ini

    @task(10) # Bobot 10: Mayoritas trafik adalah lookup
    def lookup_random_key(self):
        key = f"key_{random.randint(1, 1_000_000)}"
        self.client.get("/ring/lookup", params={"key": key}, name="/ring/lookup")

    @task(1)
    def batch_distribution(self):
        """Skenario: Satu request, banyak key (lock read dipegang lebih lama)."""
        keys = [f"batch_{random.randint(1, 1_000_000)}" for _ in range(500)]
        self.client.post("/ring/distribution", json={"keys": keys}, name="/ring/distribution")

# --- Skenario 2: Churn membership (write) ---

class ChurnUser(HttpUser):
    wait_time = between(0.5, 2.0)

    @task
    def add_then_remove_node(self):
        """
        Skenario: Node ditambah lalu dihapus lagi.
        Setiap operasi memegang lock eksklusif, jadi lookup ikut tertahan.
        """
        identity = random.randint(1000, 1100)
        with self.client.post(
            "/ring/nodes",
            json={"identity": identity, "address": f"10.1.0.{identity % 255}", "port": 9000, "weight": 2},
            name="/ring/nodes (churn add)",
            catch_response=True,
        ) as resp:
            if resp.status_code == 409:
                resp.success() # Sudah ditambah user lain, bukan error

        with self.client.delete(
            f"/ring/nodes/{identity}",
            name="/ring/nodes/[id] (churn remove)",
            catch_response=True,
        ) as resp:
            if resp.status_code == 404:
                resp.success()
