#!/usr/bin/env python3
"""
Smoke test against a running server.

Logs in as each seeded demo account (``manage.py seed_demo_data``) and
checks that every read endpoint answers with the status expected for that
role.  Prints a summary and exits non-zero when anything failed.

    MEDICORE_URL=http://127.0.0.1:8000 python api_smoke_test.py
"""
import os
import sys
import time
from dataclasses import dataclass
from typing import Dict, List, Optional

import requests

BASE_URL = os.getenv("MEDICORE_URL", "http://127.0.0.1:8000")
PASSWORD = os.getenv("DEMO_PASSWORD", "password123")

DEMO_USERS = {
    "admin": "admin@hospital.com",
    "doctor": "doctor@hospital.com",
    "nurse": "nurse@hospital.com",
    "patient": "patient@hospital.com",
}

# (method, path, {role: expected status}); roles not listed expect 200
CASES = [
    ("GET", "/api/health", {}),
    ("GET", "/api/auth/profile", {}),
    ("GET", "/api/patients", {"patient": 403}),
    ("GET", "/api/patients/stats", {"doctor": 403, "nurse": 403, "patient": 403}),
    ("GET", "/api/doctors", {}),
    ("GET", "/api/doctors/available", {}),
    ("GET", "/api/appointments", {}),
    ("GET", "/api/appointments/today", {}),
    ("GET", "/api/appointments/stats", {"nurse": 403, "patient": 403}),
    ("GET", "/api/records", {}),
    ("GET", "/api/bills", {}),
    ("GET", "/api/bills/stats", {"doctor": 403, "nurse": 403, "patient": 403}),
    ("GET", "/api/inventory", {}),
    ("GET", "/api/inventory/low-stock", {}),
    ("GET", "/api/inventory/expired", {}),
    ("GET", "/api/inventory/expiring-soon", {}),
    ("GET", "/api/inventory/stats", {"doctor": 403, "nurse": 403, "patient": 403}),
    ("GET", "/api/no-such-route", {"admin": 404, "doctor": 404, "nurse": 404, "patient": 404}),
]


@dataclass
class Result:
    role: str
    method: str
    path: str
    expected: int
    status: int
    elapsed: float
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.status == self.expected


class SmokeTester:
    def __init__(self):
        self.session = requests.Session()
        self.results: List[Result] = []

    def login(self, role: str) -> Optional[Dict[str, str]]:
        start = time.time()
        try:
            resp = self.session.post(f"{BASE_URL}/api/auth/login",
                                     json={"email": DEMO_USERS[role], "password": PASSWORD}, timeout=10)
        except requests.RequestException as e:
            self.results.append(Result(role, "POST", "/api/auth/login", 200, 0, 0, str(e)))
            return None
        self.results.append(Result(role, "POST", "/api/auth/login", 200, resp.status_code,
                                   time.time() - start, "" if resp.ok else resp.text[:200]))
        if not resp.ok:
            return None
        token = resp.json()["data"]["token"]
        return {"Authorization": f"Bearer {token}"}

    def check(self, role: str, method: str, path: str, expected: int, headers: Dict[str, str]) -> Result:
        start = time.time()
        try:
            resp = self.session.request(method, f"{BASE_URL}{path}", headers=headers, timeout=10)
            body = resp.json()
            error = "" if resp.status_code == expected else resp.text[:200]
            if "success" not in body:
                error = "response is not an envelope"
            result = Result(role, method, path, expected, resp.status_code, time.time() - start, error)
        except (requests.RequestException, ValueError) as e:
            result = Result(role, method, path, expected, 0, time.time() - start, str(e))
        self.results.append(result)
        mark = "ok " if result.ok and not result.error else "ERR"
        print(f"[{mark}] {role:<8} {method} {path} -> {result.status} ({result.elapsed:.2f}s)")
        return result

    def run(self) -> bool:
        for role in DEMO_USERS:
            headers = self.login(role)
            if headers is None:
                print(f"[ERR] {role}: login failed")
                continue
            for method, path, expected in CASES:
                self.check(role, method, path, expected.get(role, 200), headers)
            self.session = requests.Session()
        failures = [r for r in self.results if not r.ok or r.error]
        print(f"\n{len(self.results)} checks, {len(failures)} failed")
        for r in failures:
            print(f"  [{r.role}] {r.method} {r.path}: expected {r.expected}, got {r.status} {r.error}")
        return not failures


def main():
    sys.exit(0 if SmokeTester().run() else 1)


if __name__ == "__main__":
    main()
