"""Fixtures compartidos: configuración aislada y estado global limpio entre tests."""

import pytest

from app.core.config import Settings
from app.db.store_registry import get_store_registry
from app.services import deployment_manager
from app.services.store_service import reset_store_service

MAIN_DOMAIN = "myoutlet.app"
SERVER_IP = "1.2.3.4"


def make_settings(**overrides) -> Settings:
    """Settings sin leer .env, en modo manual por defecto."""
    values = {
        "ENVIRONMENT": "testing",
        "MAIN_DOMAIN": MAIN_DOMAIN,
        "SERVER_IP": SERVER_IP,
        "DNS_PROVIDER": "manual",
        "CLOUDFLARE_ZONE_ID": None,
        "CLOUDFLARE_API_TOKEN": None,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings_factory():
    return make_settings


@pytest.fixture
def manual_settings() -> Settings:
    return make_settings()


@pytest.fixture
def cloudflare_settings() -> Settings:
    return make_settings(
        DNS_PROVIDER="cloudflare",
        CLOUDFLARE_ZONE_ID="zone123",
        CLOUDFLARE_API_TOKEN="cf-secret-token",
    )


@pytest.fixture(autouse=True)
def clean_global_state():
    """Vacía el registro global, el servicio global y el historial de despliegues."""
    get_store_registry().clear()
    reset_store_service()
    deployment_manager.reset_deployment_tracking()
    yield
    get_store_registry().clear()
    reset_store_service()
    deployment_manager.reset_deployment_tracking()
