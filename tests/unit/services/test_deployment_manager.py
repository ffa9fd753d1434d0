"""Tests unitarios para el seguimiento de despliegues en segundo plano."""

import asyncio
from unittest.mock import MagicMock

import pytest

from app.services import deployment_manager
from app.services.deployment_orchestrator import DeploymentResult
from app.utils.error_handler import DeploymentException


class FakeOrchestrator:
    def __init__(self, delay=0.0, error=None):
        self.delay = delay
        self.error = error

    async def run(self, store_id, subdomain):
        await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return DeploymentResult(success=True, url=f"http://{subdomain}.myoutlet.app", deployment_time=0)


async def settle(task):
    """Espera la tarea y deja correr sus callbacks."""
    await asyncio.gather(task, return_exceptions=True)
    await asyncio.sleep(0)


class TestScheduleDeployment:
    """Tests para la programación de despliegues."""

    @pytest.mark.asyncio
    async def test_successful_deployment_is_recorded(self):
        """Debe registrar el despliegue como activo y luego como completado."""
        task = deployment_manager.schedule_deployment(FakeOrchestrator(), "store-1", "janes-bakery")

        assert task.get_name() == "deploy-store-1"
        assert deployment_manager.get_deployment_status("store-1")["status"] == "running"
        assert len(deployment_manager.get_active_deployments()) == 1

        await settle(task)

        status = deployment_manager.get_deployment_status("store-1")
        assert status["status"] == "completed"
        assert status["success"] is True
        assert status["url"] == "http://janes-bakery.myoutlet.app"
        assert status["duration_seconds"] >= 0
        assert deployment_manager.get_active_deployments() == []

    @pytest.mark.asyncio
    async def test_failed_deployment_does_not_propagate(self, monkeypatch):
        """Un fallo queda en el historial y se loggea, sin excepción sin recoger."""
        error = DeploymentException("DNS creation failed: boom", store_id="store-2", step="dns")
        log_error = MagicMock()
        monkeypatch.setattr(deployment_manager, "log_error", log_error)

        task = deployment_manager.schedule_deployment(FakeOrchestrator(error=error), "store-2", "bad")
        await settle(task)

        status = deployment_manager.get_deployment_status("store-2")
        assert status["status"] == "failed"
        assert status["success"] is False
        assert "DNS creation failed: boom" in status["error"]
        log_error.assert_called_once()
        assert log_error.call_args.args[0] is error

    @pytest.mark.asyncio
    async def test_cancelled_deployment(self):
        task = deployment_manager.schedule_deployment(FakeOrchestrator(delay=10), "store-3", "slow")
        task.cancel()
        await settle(task)

        assert deployment_manager.get_deployment_status("store-3")["status"] == "cancelled"

    def test_unknown_store_has_no_status(self):
        assert deployment_manager.get_deployment_status("nope") is None


class TestStatistics:
    """Tests para estadísticas e historial."""

    @pytest.mark.asyncio
    async def test_statistics(self):
        ok = deployment_manager.schedule_deployment(FakeOrchestrator(), "a", "a-store")
        ko = deployment_manager.schedule_deployment(FakeOrchestrator(error=RuntimeError("x")), "b", "b-store")
        await settle(ok)
        await settle(ko)

        stats = deployment_manager.get_deployment_statistics()

        assert stats["active_deployments"] == 0
        assert stats["finished_deployments"] == 2
        assert stats["successful_deployments"] == 1
        assert stats["failed_deployments"] == 1
        assert stats["success_rate"] == 50

    def test_empty_statistics(self):
        stats = deployment_manager.get_deployment_statistics()
        assert stats["finished_deployments"] == 0
        assert stats["success_rate"] == 0

    @pytest.mark.asyncio
    async def test_history_is_bounded(self, monkeypatch):
        monkeypatch.setattr(deployment_manager, "MAX_HISTORY", 3)

        for index in range(5):
            await settle(deployment_manager.schedule_deployment(FakeOrchestrator(), f"s{index}", f"s{index}-x"))

        history = deployment_manager.get_deployment_history()
        assert [d["store_id"] for d in history] == ["s2", "s3", "s4"]


class TestWaitForActiveDeployments:
    """Tests para la espera en el apagado."""

    @pytest.mark.asyncio
    async def test_nothing_to_wait_for(self):
        assert await deployment_manager.wait_for_active_deployments(timeout=0.1) is True

    @pytest.mark.asyncio
    async def test_waits_until_finished(self):
        task = deployment_manager.schedule_deployment(FakeOrchestrator(delay=0.01), "s", "s-x")

        assert await deployment_manager.wait_for_active_deployments(timeout=5) is True
        assert task.done()

    @pytest.mark.asyncio
    async def test_timeout_leaves_deployment_running(self):
        """Debe devolver False si algún despliegue no termina a tiempo."""
        task = deployment_manager.schedule_deployment(FakeOrchestrator(delay=10), "slow", "slow-x")

        assert await deployment_manager.wait_for_active_deployments(timeout=0.01) is False
        assert not task.done()

        task.cancel()
        await settle(task)
