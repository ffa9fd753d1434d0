"""Tests unitarios para la generación y validación de subdominios."""

import re
from unittest.mock import patch

import pytest

from app.utils.subdomain_utils import (
    RESERVED_SUBDOMAINS,
    build_full_domain,
    generate_unique_subdomain,
    slugify_store_name,
    validate_subdomain,
)

GENERATED_PATTERN = re.compile(r"^[a-z0-9-]{1,15}-[0-9a-f]{6}$")


class TestSlugifyStoreName:
    """Tests para la derivación del slug base."""

    def test_apostrophes_join_words(self):
        """Debe unir palabras separadas por apóstrofo y limpiar signos."""
        assert slugify_store_name("Jane's Bakery!!") == "janes-bakery"

    def test_collapses_and_trims_hyphens(self):
        """Debe colapsar separadores consecutivos y recortar extremos."""
        assert slugify_store_name("  --Super   Shop--  ") == "super-shop"

    def test_truncates_to_fifteen_characters(self):
        """Debe truncar a 15 caracteres."""
        assert slugify_store_name("A Very Long Store Name Indeed") == "a-very-long-sto"

    def test_truncation_does_not_leave_trailing_hyphen(self):
        """Un corte justo después de un separador no debe dejar '-' final."""
        assert slugify_store_name("abcdefghijklmn opq") == "abcdefghijklmn"

    def test_name_without_usable_characters_falls_back(self):
        """Debe usar 'store' si el nombre no tiene caracteres [a-z0-9]."""
        assert slugify_store_name("!!!") == "store"
        assert slugify_store_name("日本の店") == "store"


class TestGenerateUniqueSubdomain:
    """Tests para la asignación de subdominios."""

    def test_appends_six_hex_characters(self):
        """Debe agregar '-' y 6 caracteres hexadecimales al slug."""
        subdomain = generate_unique_subdomain("Jane's Bakery!!")
        assert re.fullmatch(r"janes-bakery-[0-9a-f]{6}", subdomain)

    def test_uses_secure_random_source(self):
        """La entropía proviene de secrets.token_hex."""
        with patch("app.utils.subdomain_utils.secrets.token_hex", return_value="abc123") as token_hex:
            assert generate_unique_subdomain("My Shop") == "my-shop-abc123"
        token_hex.assert_called_once_with(3)

    def test_consecutive_calls_differ(self):
        """Dos llamadas para el mismo nombre producen candidatos distintos (casi siempre)."""
        candidates = {generate_unique_subdomain("Same Name") for _ in range(20)}
        assert len(candidates) > 1

    @pytest.mark.parametrize(
        "store_name",
        ["Jane's Bakery!!", "x", "!!!", "A Very Long Store Name Indeed", "Café Ñandú", "123", "a-b", "   "],
    )
    def test_generated_subdomain_is_always_valid(self, store_name):
        """Todo subdominio generado debe pasar la validación de formato."""
        subdomain = generate_unique_subdomain(store_name)
        assert GENERATED_PATTERN.match(subdomain)
        assert validate_subdomain(subdomain).is_valid


class TestValidateSubdomain:
    """Tests para la validación sintáctica."""

    @pytest.mark.parametrize("subdomain", ["abc", "my-shop", "shop123", "a" * 63, "1-2"])
    def test_accepts_valid_labels(self, subdomain):
        """Debe aceptar etiquetas DNS válidas de 3 a 63 caracteres."""
        result = validate_subdomain(subdomain)
        assert result.is_valid
        assert result.reason is None

    @pytest.mark.parametrize(
        "subdomain",
        ["ab", "a", "", "a" * 64, "-abc", "abc-", "ABC", "My-Shop", "my_shop", "my.shop", "shop!", "tienda ñ"],
    )
    def test_rejects_invalid_labels(self, subdomain):
        """Debe rechazar longitud fuera de rango, mayúsculas y caracteres no permitidos."""
        result = validate_subdomain(subdomain)
        assert not result.is_valid
        assert result.reason

    @pytest.mark.parametrize("subdomain", sorted(RESERVED_SUBDOMAINS))
    def test_rejects_reserved_names(self, subdomain):
        """Debe rechazar www, api, admin y mail."""
        result = validate_subdomain(subdomain)
        assert not result.is_valid
        assert "reserved" in result.reason

    @pytest.mark.parametrize("candidate", [None, 123, ["abc"]])
    def test_rejects_non_strings(self, candidate):
        """Valores que no son texto son inválidos."""
        assert not validate_subdomain(candidate).is_valid


def test_build_full_domain():
    assert build_full_domain("janes-bakery-3fa9c1", "myoutlet.app") == "janes-bakery-3fa9c1.myoutlet.app"
