"""
Load testing script for the Textile Ledger service using Locust.

Run with:
    locust -f locustfile.py --host=http://localhost:8000 --headless -u 50 -r 5 -t 60s

Parameters:
    -u: Number of concurrent users
    -r: Spawn rate (users per second)
    -t: Test duration
"""

from locust import HttpUser, task, between
import random
import uuid


class LedgerUser(HttpUser):
    """
    Simulates a clerk working in one khata.

    Task weights determine request distribution:
    - 50% entry listings filtered by khata
    - 20% dashboard summary
    - 15% new entries
    - 10% payments against a bill
    - 5% health checks
    """

    # Wait 1-3 seconds between requests per user
    wait_time = between(1, 3)

    def on_start(self):
        """Create a khata and a bill to work against (not counted in stats)"""
        khata = self.client.post(
            "/api/v1/ledger/khatas",
            json={"name": f"Load test {uuid.uuid4().hex[:8]}"},
            name="/api/v1/ledger/khatas (setup)"
        ).json()
        self.khata_id = khata["id"]

        bill = self.client.post(
            "/api/v1/ledger/bills",
            json={
                "khata_id": self.khata_id,
                "bill_type": "PURCHASE",
                "amount": 1000000.00,
                "bill_date": "2024-01-01T00:00:00"
            },
            name="/api/v1/ledger/bills (setup)"
        ).json()
        self.bill_id = bill["id"]

    @task(50)
    def list_entries(self):
        self.client.get(
            f"/api/v1/entries?khataId={self.khata_id}&pageSize=20",
            name="/api/v1/entries?khataId"
        )

    @task(20)
    def summary(self):
        self.client.get(
            f"/api/v1/entries/summary?khata_id={self.khata_id}",
            name="/api/v1/entries/summary"
        )

    @task(15)
    def create_entry(self):
        self.client.post(
            "/api/v1/entries",
            json={
                "entry_type": random.choice(["BANK", "INVENTORY", "CHEQUE"]),
                "description": "Load test entry",
                "amount": round(random.uniform(10.0, 5000.0), 2),
                "khata_id": self.khata_id
            },
            name="/api/v1/entries"
        )

    @task(10)
    def pay_bill(self):
        """Small payments so the bill stays open for the whole run"""
        self.client.post(
            f"/api/v1/ledger/bills/{self.bill_id}/payments",
            json={"amount": round(random.uniform(1.0, 20.0), 2)},
            name="/api/v1/ledger/bills/:id/payments"
        )

    @task(5)
    def health_check(self):
        """Hit health endpoint (5% of requests)"""
        self.client.get("/health", name="/health")
