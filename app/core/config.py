"""
Configuración centralizada de la aplicación.

Este módulo maneja todas las variables de entorno y configuraciones
de la aplicación usando Pydantic Settings para validación automática.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

DNS_PROVIDER_CLOUDFLARE = "cloudflare"
DNS_PROVIDER_MANUAL = "manual"


class Settings(BaseSettings):
    """
    Configuración de la aplicación usando Pydantic Settings.

    Todas las configuraciones se cargan desde variables de entorno
    con valores por defecto apropiados para desarrollo.
    """

    # === CONFIGURACIÓN BÁSICA DE LA APP ===
    APP_NAME: str = "MyStore Subdomain System"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=True)

    # === CONFIGURACIÓN DEL SERVIDOR ===
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=3000)
    LOG_LEVEL: str = Field(default="INFO")

    # === CONFIGURACIÓN DE SEGURIDAD ===
    ALLOWED_HOSTS: Optional[List[str]] = Field(default=None)
    ENABLE_DOCS: bool = Field(default=True)
    SLOW_REQUEST_THRESHOLD: float = Field(default=5.0)

    # === CONFIGURACIÓN DE DOMINIO ===
    MAIN_DOMAIN: str = Field(default="myoutlet.app")
    SERVER_IP: str = Field(default="1.2.3.4")
    DNS_PROVIDER: str = Field(default=DNS_PROVIDER_MANUAL)

    # === CONFIGURACIÓN DE CLOUDFLARE ===
    CLOUDFLARE_ZONE_ID: Optional[str] = Field(default=None)
    CLOUDFLARE_API_TOKEN: Optional[str] = Field(default=None)
    CLOUDFLARE_API_BASE_URL: str = Field(default="https://api.cloudflare.com/client/v4")
    DNS_RECORD_TTL: int = Field(default=300)
    DNS_REQUEST_TIMEOUT_SECONDS: int = Field(default=30)

    # === CONFIGURACIÓN DE LOGGING ===
    LOG_FILE_PATH: Optional[str] = Field(default=None)
    LOG_MAX_SIZE_MB: int = Field(default=10)
    LOG_BACKUP_COUNT: int = Field(default=5)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
    }

    @field_validator("ALLOWED_HOSTS", mode="before")
    @classmethod
    def parse_allowed_hosts(cls, v):
        """Parsea ALLOWED_HOSTS como lista separada por comas."""
        if isinstance(v, str):
            return [host.strip() for host in v.split(",") if host.strip()]
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Valida que el nivel de log sea válido."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL debe ser uno de: {valid_levels}")
        return v.upper()

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        """Valida que el entorno sea válido."""
        valid_envs = ["development", "staging", "production", "testing"]
        if v.lower() not in valid_envs:
            raise ValueError(f"ENVIRONMENT debe ser uno de: {valid_envs}")
        return v.lower()

    @field_validator("PORT")
    @classmethod
    def validate_port(cls, v):
        """Valida que el puerto esté en rango válido."""
        if not 1 <= v <= 65535:
            raise ValueError("PORT debe estar entre 1 y 65535")
        return v

    @field_validator("DNS_PROVIDER")
    @classmethod
    def validate_dns_provider(cls, v):
        """Valida el proveedor DNS (cloudflare o manual)."""
        valid_providers = [DNS_PROVIDER_CLOUDFLARE, DNS_PROVIDER_MANUAL]
        if v.lower() not in valid_providers:
            raise ValueError(f"DNS_PROVIDER debe ser uno de: {valid_providers}")
        return v.lower()

    @field_validator("MAIN_DOMAIN")
    @classmethod
    def normalize_main_domain(cls, v):
        """Normaliza el dominio principal (minúsculas, sin punto final)."""
        return v.strip().lower().rstrip(".")

    @field_validator("CLOUDFLARE_ZONE_ID", "CLOUDFLARE_API_TOKEN", mode="before")
    @classmethod
    def empty_credentials_as_none(cls, v):
        """Trata credenciales vacías como ausentes."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def is_production(self) -> bool:
        """Verifica si está en entorno de producción."""
        return self.ENVIRONMENT == "production"

    @property
    def cloudflare_configured(self) -> bool:
        """Verifica si las credenciales de Cloudflare están presentes."""
        return bool(self.CLOUDFLARE_ZONE_ID and self.CLOUDFLARE_API_TOKEN)

    @property
    def dns_provisioning_enabled(self) -> bool:
        """Indica si el despliegue debe crear registros DNS vía proveedor."""
        return self.DNS_PROVIDER == DNS_PROVIDER_CLOUDFLARE

    def get_cloudflare_headers(self) -> dict:
        """
        Obtiene headers para requests a Cloudflare.

        Returns:
            dict: Headers de autenticación
        """
        return {
            "Authorization": f"Bearer {self.CLOUDFLARE_API_TOKEN}",
            "Content-Type": "application/json",
            "User-Agent": f"{self.APP_NAME}/{self.APP_VERSION}",
        }


@lru_cache()
def get_settings() -> Settings:
    """
    Obtiene instancia singleton de configuración.

    Usa LRU cache para evitar recrear la configuración
    múltiples veces durante la ejecución.

    Returns:
        Settings: Instancia de configuración
    """
    return Settings()


# Instancia global para uso directo
settings = get_settings()


def reload_settings() -> Settings:
    """
    Recarga la configuración (útil para testing).

    Returns:
        Settings: Nueva instancia de configuración
    """
    get_settings.cache_clear()
    return get_settings()


def get_environment_info() -> dict:
    """
    Obtiene información del entorno actual, sin exponer secretos.

    Returns:
        dict: Información del entorno
    """
    settings = get_settings()

    return {
        "app_name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "debug": settings.DEBUG,
        "main_domain": settings.MAIN_DOMAIN,
        "server_ip": settings.SERVER_IP,
        "dns_provider": settings.DNS_PROVIDER,
        "cloudflare": {
            "configured": settings.cloudflare_configured,
            "zone_id": "configured" if settings.CLOUDFLARE_ZONE_ID else "not configured",
            "api_token": "configured" if settings.CLOUDFLARE_API_TOKEN else "not configured",
        },
    }
