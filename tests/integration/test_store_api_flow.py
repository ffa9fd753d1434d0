"""
Tests de integración del API HTTP completo (FastAPI TestClient).

El cliente se usa como context manager para que el lifespan corra y el
loop del portal siga vivo: los despliegues se ejecutan en segundo plano
y se observan consultando el estado, igual que lo haría un cliente real.
"""

import re
import time

import pytest
from fastapi.testclient import TestClient

from app.db.store_registry import get_store_registry
from app.main import app
from app.services import store_service as store_service_module
from app.services.store_service import StoreService

API = "/api/v1/stores"
STORE_HOST_PATTERN = re.compile(r"^janes-bakery-[0-9a-f]{6}$")


@pytest.fixture
def client(monkeypatch, manual_settings):
    service = StoreService(registry=get_store_registry(), settings=manual_settings)
    monkeypatch.setattr(store_service_module, "_store_service", service)

    with TestClient(app) as test_client:
        yield test_client


def create_store(client, store_name="Jane's Bakery!!", custom_subdomain=None):
    body = {"storeName": store_name}
    if custom_subdomain is not None:
        body["customSubdomain"] = custom_subdomain
    return client.post(f"{API}/create", json=body)


def wait_for_terminal_status(client, store_id, attempts=100):
    """Consulta el estado hasta que la tienda llegue a active o failed."""
    for _ in range(attempts):
        data = client.get(f"{API}/{store_id}/status").json()["data"]
        if data["status"] in ("active", "failed"):
            return data
        time.sleep(0.01)
    raise AssertionError(f"Store {store_id} did not finish deploying")


class TestCreateStoreFlow:
    """Creación y despliegue de punta a punta."""

    def test_create_and_deploy(self, client):
        """La tienda pasa de creating a active con la instrucción de DNS manual."""
        response = create_store(client)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Store creation initiated"
        data = body["data"]
        assert STORE_HOST_PATTERN.match(data["subdomain"])
        assert data["fullDomain"] == f"{data['subdomain']}.myoutlet.app"
        assert data["storeName"] == "Jane's Bakery!!"
        assert data["status"] == "creating"

        status = wait_for_terminal_status(client, data["storeId"])

        assert status["status"] == "active"
        assert status["publicUrl"] == f"http://{data['subdomain']}.myoutlet.app"
        assert status["errorMessage"] is None
        assert status["deployment"]["timeSeconds"] >= 0
        assert status["deployment"]["logs"] == [
            "Creating DNS record...",
            f"Manual DNS setup required: {data['subdomain']}.myoutlet.app → 1.2.3.4",
        ]

        logs = client.get(f"{API}/{data['storeId']}/logs").json()["data"]
        assert logs["status"] == "active"
        assert logs["logs"] == status["deployment"]["logs"]
        assert logs["timestamps"]["deploymentCompleted"] is not None
        assert logs["timestamps"]["deploymentFailed"] is None

    def test_custom_subdomain(self, client):
        response = create_store(client, custom_subdomain="janes")

        assert response.status_code == 201
        assert response.json()["data"]["fullDomain"] == "janes.myoutlet.app"

    def test_invalid_custom_subdomain(self, client):
        """Un subdominio inválido responde 400 y no registra nada."""
        response = create_store(client, custom_subdomain="ab")

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error_code"] == "INVALID_SUBDOMAIN"
        assert "Invalid subdomain format" in body["message"]
        assert client.get(API).json()["data"] == []

    @pytest.mark.parametrize("body", [{}, {"storeName": ""}, {"storeName": "   "}])
    def test_missing_store_name(self, client, body):
        response = client.post(f"{API}/create", json=body)

        assert response.status_code == 400
        assert response.json()["message"] == "Store name is required"

    def test_malformed_body(self, client):
        response = client.post(f"{API}/create", json={"storeName": ["not", "a", "string"]})

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_subdomain_conflict(self, client):
        """El segundo registro del mismo subdominio responde 409 con sugerencia."""
        assert create_store(client, custom_subdomain="janes").status_code == 201

        response = create_store(client, store_name="Jane's Bakery", custom_subdomain="janes")

        assert response.status_code == 409
        body = response.json()
        assert body["message"] == "Subdomain already taken"
        assert body["error_code"] == "SUBDOMAIN_CONFLICT"
        assert STORE_HOST_PATTERN.match(body["suggestion"])
        assert len(client.get(API).json()["data"]) == 1


class TestQueries:
    """Listado, verificación de subdominios, 404 y borrado."""

    def test_list_newest_first_with_summary(self, client):
        first = create_store(client, "First Store", "first-store").json()["data"]
        second = create_store(client, "Second Store", "second-store").json()["data"]
        for store in (first, second):
            wait_for_terminal_status(client, store["storeId"])

        body = client.get(API).json()

        ids = [item["storeId"] for item in body["data"]]
        assert set(ids) == {first["storeId"], second["storeId"]}
        created = [item["createdAt"] for item in body["data"]]
        assert created == sorted(created, reverse=True)
        assert body["summary"] == {"total": 2, "active": 2, "configuring": 0, "failed": 0}

    def test_check_subdomain(self, client):
        create_store(client, custom_subdomain="janes")

        free = client.get(f"{API}/check-subdomain/other-shop")
        taken = client.get(f"{API}/check-subdomain/janes")
        invalid = client.get(f"{API}/check-subdomain/ab")

        assert free.status_code == 200
        assert free.json() == {"available": True, "valid": True, "subdomain": "other-shop", "suggestion": None}

        assert taken.status_code == 200
        assert taken.json()["available"] is False
        assert taken.json()["suggestion"].startswith("janes-")

        assert invalid.status_code == 400
        assert invalid.json()["valid"] is False
        assert invalid.json()["available"] is False
        assert invalid.json()["suggestion"].startswith("ab-")

    @pytest.mark.parametrize("suffix", ["status", "logs"])
    def test_unknown_store(self, client, suffix):
        response = client.get(f"{API}/does-not-exist/{suffix}")

        assert response.status_code == 404
        assert response.json()["message"] == "Store not found"

    def test_delete_store(self, client):
        """Borrar responde 200, libera el subdominio y un segundo borrado da 404."""
        store = create_store(client, custom_subdomain="janes").json()["data"]
        wait_for_terminal_status(client, store["storeId"])

        response = client.delete(f"{API}/{store['storeId']}")

        assert response.status_code == 200
        assert response.json()["data"]["subdomain"] == "janes"
        assert client.get(f"{API}/{store['storeId']}/status").status_code == 404
        assert client.get(f"{API}/check-subdomain/janes").json()["available"] is True
        assert client.delete(f"{API}/{store['storeId']}").status_code == 404


class TestSystemStatus:
    def test_counts_and_no_secrets(self, client, monkeypatch, cloudflare_settings):
        """El estado del sistema informa la configuración sin exponer credenciales."""
        monkeypatch.setattr("app.core.config.get_settings", lambda: cloudflare_settings)
        store = create_store(client).json()["data"]
        wait_for_terminal_status(client, store["storeId"])

        response = client.get("/api/v1/system/status")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["system"]["main_domain"] == "myoutlet.app"
        assert data["system"]["dns_provider"] == "cloudflare"
        assert data["cloudflare"] == {"configured": True, "zone_id": "configured", "api_token": "configured"}
        assert data["stores"]["total"] == 1
        assert data["stores"]["active"] == 1
        assert "cf-secret-token" not in response.text
        assert "zone123" not in response.text


class TestSubdomainRouting:
    """Resolución de tiendas por header Host."""

    def test_store_page_and_details(self, client):
        store = create_store(client, custom_subdomain="janes").json()["data"]
        wait_for_terminal_status(client, store["storeId"])

        page = client.get("/", headers={"host": "janes.myoutlet.app"})
        details = client.get("/store", headers={"host": "janes.myoutlet.app:3000"})

        assert page.status_code == 200
        assert page.headers["content-type"].startswith("text/html")
        assert "Jane&#39;s Bakery!!" in page.text
        assert "ACTIVE" in page.text

        assert details.status_code == 200
        data = details.json()["data"]
        assert data["storeId"] == store["storeId"]
        assert data["status"] == "active"
        assert [p["price"] for p in data["products"]] == [29.99, 39.99, 49.99]

    def test_unknown_subdomain(self, client):
        response = client.get("/", headers={"host": "nobody.myoutlet.app"})

        assert response.status_code == 404
        assert response.json()["message"] == 'Subdomain "nobody" not found'

    def test_unknown_subdomain_store_details(self, client):
        assert client.get("/store", headers={"host": "nobody.myoutlet.app"}).status_code == 404

    def test_store_details_on_main_domain(self, client):
        assert client.get("/store").status_code == 404

    def test_invalid_subdomain_format(self, client):
        response = client.get("/", headers={"host": "ab.myoutlet.app"})

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid subdomain format"

    def test_main_domain_returns_api_info(self, client):
        response = client.get("/", headers={"host": "myoutlet.app"})

        assert response.status_code == 200
        assert response.json()["message"] == "Welcome to MyStore API"


class TestPlatformEndpoints:
    """Health, rutas inválidas y rutas desconocidas."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["uptime"] >= 0

    def test_invalid_path_blocked(self, client):
        response = client.get("/(admin)")

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid request path. URLs or special characters are not allowed."

    def test_unknown_route(self, client):
        response = client.get("/api/v1/nothing-here")

        assert response.status_code == 404
        assert response.json()["message"] == "Route not found"
        assert response.headers["X-Request-ID"]

    def test_security_headers(self, client):
        response = client.get("/health")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
