"""Tests unitarios para la configuración de logging."""

import json
import logging

from app.core.logging_config import DeploymentContextFilter, StructuredFormatter, get_logging_configuration


def make_record(name, message="hello", **extra):
    record = logging.LogRecord(name, logging.INFO, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestDeploymentContextFilter:
    def test_tags_deployment_loggers(self):
        """Debe marcar los logs del orquestador y del cliente DNS."""
        record = make_record("app.services.deployment_orchestrator")

        assert DeploymentContextFilter().filter(record) is True
        assert record.operation_type == "deployment"

    def test_leaves_other_loggers_untouched(self):
        record = make_record("app.core.routers")

        assert DeploymentContextFilter().filter(record) is True
        assert not hasattr(record, "operation_type")


def test_structured_formatter_includes_extra_fields():
    """El formato JSON incluye los campos extra del evento de despliegue."""
    record = make_record("app.deploy.event", "Deployment started", store_id="s-1", deployment_step="started")

    entry = json.loads(StructuredFormatter().format(record))

    assert entry["message"] == "Deployment started"
    assert entry["extra"]["store_id"] == "s-1"
    assert entry["extra"]["deployment_step"] == "started"


def test_console_only_without_log_file():
    config = get_logging_configuration()

    assert config["root"]["handlers"] == ["console"]
    assert "file" not in config["handlers"]
