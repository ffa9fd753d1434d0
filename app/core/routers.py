"""
Configuración centralizada de routers para la aplicación FastAPI.

Este módulo se encarga de registrar todos los routers de la API,
configurar endpoints base y organizar las rutas de manera estructurada.
"""

import logging
import time
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse

from app.api.v1.endpoints.stores import router as stores_router
from app.api.v1.endpoints.system import router as system_router
from app.api.v1.schemas.store_schemas import StoreDetailsData, StoreDetailsResponse
from app.core.config import get_settings
from app.services.template_service import get_template_service
from app.version import get_version_info

settings = get_settings()
logger = logging.getLogger(__name__)

_started_at = time.monotonic()


def subdomain_not_found_response(request: Request, suggestion: str) -> JSONResponse:
    """
    Respuesta 404 para un subdominio sin tienda registrada.

    Args:
        request: Request de FastAPI
        suggestion: Texto de ayuda para el cliente

    Returns:
        JSONResponse: Respuesta 404
    """
    host = request.headers.get("host") or "unknown"
    return JSONResponse(
        status_code=404,
        content={
            "success": False,
            "message": f'Subdomain "{host.split(".")[0]}" not found',
            "suggestion": suggestion,
        },
    )


def create_root_endpoints(app: FastAPI) -> None:
    """
    Crea endpoints raíz de la aplicación.

    Args:
        app: Instancia de FastAPI
    """

    @app.get("/", tags=["Root"], summary="API Info / Store Page")
    async def root(request: Request):
        """
        En un subdominio de tienda sirve la página HTML de la tienda;
        en el dominio principal devuelve información básica de la API.

        Returns:
            HTML de la tienda o Dict con información de la API
        """
        if getattr(request.state, "is_subdomain_request", False):
            store = request.state.store
            if store is None:
                return subdomain_not_found_response(
                    request, "Check if the store deployment is complete or if the subdomain is correct"
                )
            return HTMLResponse(content=get_template_service().render_store_page(store))

        return {
            "success": True,
            "message": "Welcome to MyStore API",
            "version": settings.APP_VERSION,
            "documentation": "/docs" if (settings.DEBUG or settings.ENABLE_DOCS) else "disabled",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "endpoints": {
                "system": {"status": "GET /api/v1/system/status"},
                "stores": {
                    "create": "POST /api/v1/stores/create",
                    "list": "GET /api/v1/stores",
                    "getStatus": "GET /api/v1/stores/{storeId}/status",
                    "getLogs": "GET /api/v1/stores/{storeId}/logs",
                    "delete": "DELETE /api/v1/stores/{storeId}",
                    "checkSubdomain": "GET /api/v1/stores/check-subdomain/{subdomain}",
                },
            },
            "environment": {
                "environment": settings.ENVIRONMENT,
                "mainDomain": settings.MAIN_DOMAIN,
            },
        }

    @app.get("/store", tags=["Root"], summary="Store Details", response_model=StoreDetailsResponse)
    async def store_details(request: Request):
        """
        Detalle JSON de la tienda servida en el subdominio actual.

        Returns:
            Datos de la tienda con su catálogo
        """
        store = getattr(request.state, "store", None)
        if not getattr(request.state, "is_subdomain_request", False) or store is None:
            return subdomain_not_found_response(request, "Check if the store exists and deployment is complete")

        return StoreDetailsResponse(data=StoreDetailsData.from_domain(store))


def create_health_endpoints(app: FastAPI) -> None:
    """
    Crea endpoints de health check.

    Args:
        app: Instancia de FastAPI
    """

    @app.get("/health", tags=["Health"], summary="Health Check")
    async def health_check():
        """
        Liveness: el proceso responde.

        Returns:
            Dict con estado, uptime y timestamp
        """
        return {
            "success": True,
            "status": "healthy",
            "version": settings.APP_VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": round(time.monotonic() - _started_at, 3),
            "environment": settings.ENVIRONMENT,
        }


def create_info_endpoints(app: FastAPI) -> None:
    """
    Crea endpoints informativos adicionales.

    Args:
        app: Instancia de FastAPI
    """

    @app.get("/version", tags=["Info"], summary="Version Info")
    async def version_info():
        """
        Endpoint que retorna información de versión.

        Returns:
            Dict con información de versión
        """
        return {
            **get_version_info(),
            "name": settings.APP_NAME,
            "environment": settings.ENVIRONMENT,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


def configure_api_v1_routers(app: FastAPI) -> None:
    """
    Configura todos los routers de la API v1.

    Args:
        app: Instancia de FastAPI
    """
    logger.info("🔧 Configurando routers de API v1...")

    app.include_router(
        stores_router,
        prefix="/api/v1",
        responses={
            400: {"description": "Invalid store name or subdomain"},
            404: {"description": "Store not found"},
            409: {"description": "Subdomain already taken"},
        },
    )
    logger.info("✅ Router de tiendas configurado")

    app.include_router(system_router, prefix="/api/v1")
    logger.info("✅ Router de sistema configurado")


def configure_all_routers(app: FastAPI) -> None:
    """
    Configura todos los routers de la aplicación.

    Args:
        app: Instancia de FastAPI
    """
    logger.info("🔧 Configurando todos los routers...")

    # Endpoints base
    create_root_endpoints(app)
    create_health_endpoints(app)
    create_info_endpoints(app)

    # Routers de API v1
    configure_api_v1_routers(app)

    logger.info("✅ Todos los routers configurados correctamente")

