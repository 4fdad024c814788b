"""Smoke-check a configured deployment: python run_checks.py"""

from fastapi.testclient import TestClient
from app.main import app

client = TestClient(app, raise_server_exceptions=False)

CHECKS = [
    ('ROOT', '/'),
    ('HEALTH', '/health'),
    ('DB HEALTH', '/health/db'),
    ('REPORT COUNT', '/reports/count'),
    ('MAP DATA', '/reports/map-data'),
]

for label, path in CHECKS:
    print(f'\n{label} ({path}):')
    resp = client.get(path)
    print(resp.status_code)
    try:
        print(resp.json())
    except ValueError:
        print(resp.text)
