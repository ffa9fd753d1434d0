"""
Configuración personalizada de OpenAPI/Swagger para la aplicación FastAPI.

Este módulo agrega a la documentación automática los tags, el esquema de
error común y metadatos de la aplicación.
"""

import logging
from typing import Any, Dict

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi

from app.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)


def get_custom_openapi_schema(app: FastAPI) -> Dict[str, Any]:
    """
    Genera esquema OpenAPI personalizado con información adicional.

    Args:
        app: Instancia de FastAPI

    Returns:
        Dict: Esquema OpenAPI personalizado
    """
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
    )

    openapi_schema["servers"] = get_server_configuration()
    openapi_schema["tags"] = get_custom_tags()
    openapi_schema.setdefault("components", {}).setdefault("schemas", {}).update(get_custom_schemas())

    openapi_schema["x-app-info"] = {
        "environment": settings.ENVIRONMENT,
        "version": settings.APP_VERSION,
        "main_domain": settings.MAIN_DOMAIN,
        "dns_provider": settings.DNS_PROVIDER,
    }

    app.openapi_schema = openapi_schema
    return openapi_schema


def get_server_configuration() -> list:
    """
    Configura los servidores disponibles para la API.

    Returns:
        List: Lista de configuraciones de servidor
    """
    servers = [{"url": f"https://api.{settings.MAIN_DOMAIN}", "description": "Servidor principal"}]

    if settings.DEBUG:
        servers.insert(
            0,
            {
                "url": f"http://localhost:{settings.PORT}",
                "description": "Servidor de Desarrollo",
            },
        )

    return servers


def get_custom_tags() -> list:
    """
    Define tags personalizados para organizar los endpoints.

    Returns:
        List: Lista de tags con descripciones
    """
    return [
        {"name": "Root", "description": "Información de la API y páginas de tienda por subdominio"},
        {"name": "Health", "description": "Salud del proceso"},
        {"name": "Stores", "description": "Creación, estado, logs y eliminación de tiendas"},
        {"name": "System", "description": "Configuración activa y conteo de tiendas"},
        {"name": "Info", "description": "Información de versión"},
    ]


def get_custom_schemas() -> Dict[str, Any]:
    """
    Define esquemas personalizados reutilizables.

    Returns:
        Dict: Esquemas personalizados
    """
    return {
        "ErrorResponse": {
            "type": "object",
            "properties": {
                "success": {"type": "boolean", "example": False},
                "error_type": {"type": "string", "example": "conflict_error"},
                "error_code": {"type": "string", "example": "SUBDOMAIN_CONFLICT"},
                "message": {"type": "string", "example": "Subdomain already taken"},
                "suggestion": {"type": "string", "example": "janes-bakery-3fa9c1"},
                "path": {"type": "string", "example": "/api/v1/stores/create"},
                "timestamp": {"type": "string", "format": "date-time"},
                "request_id": {"type": "string", "example": "abc12345"},
            },
            "required": ["success", "message", "timestamp"],
        },
    }


def configure_openapi(app: FastAPI) -> None:
    """
    Configura OpenAPI personalizado para la aplicación.

    Args:
        app: Instancia de FastAPI
    """
    logger.info("🔧 Configurando documentación OpenAPI...")

    def custom_openapi():
        return get_custom_openapi_schema(app)

    if settings.DEBUG or settings.ENABLE_DOCS:
        app.openapi = custom_openapi
        logger.info("✅ Documentación OpenAPI configurada y habilitada")
    else:
        logger.info("🔒 Documentación OpenAPI deshabilitada")
