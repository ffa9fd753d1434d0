"""Tests unitarios para StoreService."""

import re
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.db.store_registry import StoreRegistry
from app.domain.models import StoreStatus
from app.services.deployment_orchestrator import DeploymentResult
from app.services.store_service import StoreService, get_store_service, reset_store_service
from app.utils.error_handler import (
    ErrorCode,
    StoreNotFoundException,
    SubdomainConflictException,
    ValidationException,
)
from app.utils.subdomain_utils import INVALID_FORMAT_MESSAGE


@pytest.fixture
def orchestrator() -> MagicMock:
    orchestrator = MagicMock()
    orchestrator.run = AsyncMock(return_value=DeploymentResult(success=True, url="http://x", deployment_time=0))
    return orchestrator


@pytest.fixture
def service(orchestrator, manual_settings) -> StoreService:
    return StoreService(registry=StoreRegistry(), orchestrator=orchestrator, settings=manual_settings)


class TestRegisterStore:
    """Tests para el alta de tiendas."""

    def test_generated_subdomain(self, service):
        """Sin subdominio propio se genera uno a partir del nombre."""
        store = service.register_store("Jane's Bakery!!")

        assert re.fullmatch(r"janes-bakery-[0-9a-f]{6}", store.subdomain)
        assert store.full_domain == f"{store.subdomain}.myoutlet.app"
        assert store.status is StoreStatus.CREATING
        assert service.get_status(store.id) is store

    def test_custom_subdomain(self, service):
        store = service.register_store("Jane's Bakery", "janes")

        assert store.subdomain == "janes"
        assert store.full_domain == "janes.myoutlet.app"

    @pytest.mark.parametrize("subdomain", ["ab", "www", "Bad-Case", "-abc", "a" * 64])
    def test_invalid_custom_subdomain(self, service, subdomain):
        """Debe rechazar subdominios inválidos sin registrar nada."""
        with pytest.raises(ValidationException) as exc_info:
            service.register_store("Jane's Bakery", subdomain)

        assert exc_info.value.message == INVALID_FORMAT_MESSAGE
        assert exc_info.value.error_code is ErrorCode.INVALID_SUBDOMAIN
        assert exc_info.value.field == "customSubdomain"
        assert service.list_stores() == []

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_missing_name(self, service, name):
        with pytest.raises(ValidationException, match="Store name is required"):
            service.register_store(name)

    def test_conflict_carries_valid_suggestion(self, service):
        """Un subdominio tomado produce 409 con una sugerencia libre y válida."""
        service.register_store("Jane's Bakery", "janes")

        with pytest.raises(SubdomainConflictException) as exc_info:
            service.register_store("Jane's Bakery", "janes")

        suggestion = exc_info.value.suggestion
        assert re.fullmatch(r"janes-bakery-[0-9a-f]{6}", suggestion)
        assert service.check_subdomain_availability(suggestion).available
        assert len(service.list_stores()) == 1


class TestCreateStore:
    """Tests para creación con despliegue en segundo plano."""

    def test_create_store_schedules_deployment(self, service, orchestrator):
        """Debe registrar y programar el despliegue sin esperarlo."""
        with patch("app.services.store_service.deployment_manager.schedule_deployment") as schedule:
            store = service.create_store("Jane's Bakery!!")

        schedule.assert_called_once_with(orchestrator, store.id, store.subdomain)
        assert store.status is StoreStatus.CREATING

    def test_failed_registration_schedules_nothing(self, service):
        with patch("app.services.store_service.deployment_manager.schedule_deployment") as schedule:
            with pytest.raises(ValidationException):
                service.create_store("Jane's Bakery", "ab")

        schedule.assert_not_called()

    @pytest.mark.asyncio
    async def test_begin_deployment_runs_orchestrator(self, service, orchestrator):
        store = service.register_store("Jane's Bakery")

        task = service.begin_deployment(store.id, store.subdomain)
        result = await task

        assert result.success
        orchestrator.run.assert_awaited_once_with(store.id, store.subdomain)


class TestQueries:
    """Tests para consultas, listado, borrado y disponibilidad."""

    def test_list_newest_first(self, service):
        older = service.register_store("Older", "older-store")
        newer = service.register_store("Newer", "newer-store")
        older.created_at = datetime.now(UTC) - timedelta(minutes=5)

        assert [s.id for s in service.list_stores()] == [newer.id, older.id]

    def test_require_store_unknown(self, service):
        with pytest.raises(StoreNotFoundException):
            service.require_store("missing")
        assert service.get_status("missing") is None

    def test_find_by_subdomain(self, service):
        store = service.register_store("Jane's Bakery", "janes")
        assert service.find_by_subdomain("janes") is store
        assert service.find_by_subdomain("nobody") is None

    def test_delete_store(self, service):
        """Borrar libera el subdominio; un segundo borrado devuelve False."""
        store = service.register_store("Jane's Bakery", "janes")

        assert service.delete_store(store.id) is True
        assert service.get_status(store.id) is None
        assert service.check_subdomain_availability("janes").available
        assert service.delete_store(store.id) is False

    def test_availability(self, service):
        service.register_store("Jane's Bakery", "janes")

        free = service.check_subdomain_availability("other")
        taken = service.check_subdomain_availability("janes")

        assert free.available and free.valid and free.suggestion is None
        assert not taken.available
        assert re.fullmatch(r"janes-[0-9a-f]{6}", taken.suggestion)

    @pytest.mark.parametrize("subdomain", ["ab", "admin", "UPPER"])
    def test_availability_invalid(self, service, subdomain):
        """Un subdominio inválido se rechaza con una sugerencia válida."""
        with pytest.raises(ValidationException) as exc_info:
            service.check_subdomain_availability(subdomain)

        assert exc_info.value.message == INVALID_FORMAT_MESSAGE
        assert re.fullmatch(r"[a-z0-9-]+-[0-9a-f]{6}", exc_info.value.suggestion)

    def test_status_counts(self, service):
        active = service.register_store("A", "store-a")
        failed = service.register_store("B", "store-b")
        configuring = service.register_store("C", "store-c")
        service.register_store("D", "store-d")

        for store in (active, failed, configuring):
            store.begin_configuring()
        active.mark_active("http://store-a.myoutlet.app")
        failed.mark_failed("boom")

        assert service.get_status_counts() == {"total": 4, "active": 1, "configuring": 1, "failed": 1}


def test_global_service_is_cached():
    first = get_store_service()
    assert get_store_service() is first

    reset_store_service()
    assert get_store_service() is not first
