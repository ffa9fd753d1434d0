"""Tests unitarios para los helpers de middleware (Host y rutas)."""

import pytest

from app.core.middleware import extract_store_subdomain, get_status_emoji, is_invalid_path


class TestExtractStoreSubdomain:
    """Tests para la detección de subdominios de tienda."""

    @pytest.mark.parametrize(
        "host, expected",
        [
            ("janes-bakery.myoutlet.app", "janes-bakery"),
            ("JANES.myoutlet.app", "janes"),
            ("janes.myoutlet.app:3000", "janes"),
            ("ab.myoutlet.app", "ab"),
        ],
    )
    def test_store_hosts(self, host, expected):
        """Debe devolver la primera etiqueta en minúsculas."""
        assert extract_store_subdomain(host) == expected

    @pytest.mark.parametrize(
        "host",
        [
            "myoutlet.app",
            "localhost",
            "localhost:3000",
            "shop.localhost.dev",
            "www.myoutlet.app",
            "api.myoutlet.app",
            "admin.myoutlet.app",
        ],
    )
    def test_non_store_hosts(self, host):
        """Dominio principal, localhost y subdominios de plataforma no son tiendas."""
        assert extract_store_subdomain(host) is None


class TestIsInvalidPath:
    """Tests para el bloqueo de rutas sospechosas."""

    @pytest.mark.parametrize(
        "path",
        ["/(admin)", "/https://evil.example", "/[x]", "/<script>", "/:colon", "/foo/http://bar"],
    )
    def test_rejected(self, path):
        assert is_invalid_path(path)

    @pytest.mark.parametrize(
        "path",
        ["/", "/health", "/api/v1/stores/create", "/api/v1/stores/abc/status", "/store", "/docs"],
    )
    def test_allowed(self, path):
        assert not is_invalid_path(path)


@pytest.mark.parametrize("status_code, emoji", [(200, "✅"), (201, "✅"), (302, "↩️")])
def test_status_emoji(status_code, emoji):
    assert get_status_emoji(status_code) == emoji
