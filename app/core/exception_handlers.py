"""
Manejadores de excepciones centralizados para la aplicación FastAPI.

Este módulo define todos los manejadores de excepciones personalizados y globales,
proporcionando respuestas consistentes y logging apropiado para diferentes tipos de errores.

Todas las respuestas de error comparten el formato:
{"success": false, "error_type", "error_code", "message", "path", "timestamp", "request_id"}
"""

import logging
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.utils.error_handler import (
    AppException,
    DeploymentException,
    DNSProviderException,
    ErrorSeverity,
    StoreNotFoundException,
    SubdomainConflictException,
    ValidationException,
)

settings = get_settings()
logger = logging.getLogger(__name__)


def build_error_content(
    request: Request,
    error_type: str,
    message: str,
    error_code: Optional[str] = None,
    **extra: Any,
) -> Dict[str, Any]:
    """
    Construye el cuerpo JSON común de las respuestas de error.

    Args:
        request: Request de FastAPI
        error_type: Categoría del error
        message: Mensaje legible
        error_code: Código de error estandarizado
        **extra: Campos adicionales específicos del error

    Returns:
        Dict con el cuerpo de la respuesta
    """
    return {
        "success": False,
        "error_type": error_type,
        "error_code": error_code,
        "message": message,
        **extra,
        "path": str(request.url.path),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "request_id": get_request_id(request),
    }


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Manejador para excepciones personalizadas de la aplicación.

    Args:
        request: Request de FastAPI
        exc: Excepción personalizada de la app

    Returns:
        JSONResponse: Respuesta JSON con error formateado
    """
    log_level = logging.ERROR if exc.severity in (ErrorSeverity.HIGH, ErrorSeverity.CRITICAL) else logging.WARNING
    logger.log(
        log_level,
        f"App Exception: {exc.message} - "
        f"Code: {exc.error_code.value} - "
        f"URL: {request.url} - "
        f"Details: {exc.details}",
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=build_error_content(
            request,
            "application_error",
            exc.message,
            exc.error_code.value,
            details=exc.details if settings.DEBUG else None,
        ),
    )


async def validation_exception_handler(request: Request, exc: ValidationException) -> JSONResponse:
    """
    Manejador para errores de validación (nombre o subdominio inválidos).

    Args:
        request: Request de FastAPI
        exc: Excepción de validación

    Returns:
        JSONResponse: Respuesta JSON con detalles de validación
    """
    logger.warning(
        f"Validation Exception: {exc.message} - "
        f"Field: {exc.field} - "
        f"Value: {exc.invalid_value} - "
        f"URL: {request.url}"
    )

    extra: Dict[str, Any] = {"field": exc.field, "expected_format": exc.expected_format}
    if exc.suggestion:
        extra["suggestion"] = exc.suggestion

    return JSONResponse(
        status_code=exc.status_code,
        content=build_error_content(request, "validation_error", exc.message, exc.error_code.value, **extra),
    )


async def subdomain_conflict_exception_handler(request: Request, exc: SubdomainConflictException) -> JSONResponse:
    """
    Manejador para subdominios ya tomados; incluye un subdominio alternativo.

    Args:
        request: Request de FastAPI
        exc: Excepción de conflicto

    Returns:
        JSONResponse: Respuesta 409 con sugerencia
    """
    logger.info(f"Subdomain conflict: {exc.subdomain} - Suggestion: {exc.suggestion} - URL: {request.url}")

    return JSONResponse(
        status_code=exc.status_code,
        content=build_error_content(
            request,
            "conflict_error",
            exc.message,
            exc.error_code.value,
            subdomain=exc.subdomain,
            suggestion=exc.suggestion,
        ),
    )


async def store_not_found_exception_handler(request: Request, exc: StoreNotFoundException) -> JSONResponse:
    """
    Manejador para identificadores de tienda desconocidos.

    Args:
        request: Request de FastAPI
        exc: Excepción de tienda no encontrada

    Returns:
        JSONResponse: Respuesta 404
    """
    logger.info(f"Store not found: {exc.store_id} - URL: {request.url}")

    return JSONResponse(
        status_code=exc.status_code,
        content=build_error_content(request, "not_found_error", exc.message, exc.error_code.value),
    )


async def dns_provider_exception_handler(request: Request, exc: DNSProviderException) -> JSONResponse:
    """
    Manejador específico para errores del proveedor DNS.

    Args:
        request: Request de FastAPI
        exc: Excepción del proveedor DNS

    Returns:
        JSONResponse: Respuesta 502 con información del proveedor
    """
    logger.error(
        f"DNS Provider Exception: {exc.message} - "
        f"API Code: {exc.api_response_code} - "
        f"Endpoint: {exc.endpoint} - "
        f"URL: {request.url}"
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=build_error_content(
            request,
            "dns_provider_error",
            exc.message,
            exc.error_code.value,
            provider_response_code=exc.api_response_code,
            provider_errors=exc.provider_errors if settings.DEBUG else None,
        ),
    )


async def deployment_exception_handler(request: Request, exc: DeploymentException) -> JSONResponse:
    """
    Manejador para errores de despliegue.

    Args:
        request: Request de FastAPI
        exc: Excepción de despliegue

    Returns:
        JSONResponse: Respuesta JSON con el paso que falló
    """
    logger.error(f"Deployment Exception: {exc.message} - Store: {exc.store_id} - Step: {exc.step} - URL: {request.url}")

    return JSONResponse(
        status_code=exc.status_code,
        content=build_error_content(
            request,
            "deployment_error",
            exc.message,
            exc.error_code.value,
            store_id=exc.store_id,
            step=exc.step,
        ),
    )


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Manejador para cuerpos o parámetros mal formados.

    Args:
        request: Request de FastAPI
        exc: Error de validación de FastAPI

    Returns:
        JSONResponse: Respuesta 400 con los errores de validación
    """
    logger.warning(f"Request Validation Error: {exc.errors()} - URL: {request.url}")

    return JSONResponse(
        status_code=400,
        content=build_error_content(
            request,
            "validation_error",
            "Invalid request body",
            "VALIDATION_ERROR",
            errors=[{"loc": list(error.get("loc", [])), "msg": error.get("msg")} for error in exc.errors()],
        ),
    )


async def starlette_http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Manejador para HTTPException (FastAPI y Starlette).

    Args:
        request: Request de FastAPI
        exc: StarletteHTTPException

    Returns:
        JSONResponse: Respuesta JSON estandarizada
    """
    logger.warning(f"HTTP Exception: {exc.status_code} - {exc.detail} - URL: {request.url}")

    message = "Route not found" if exc.status_code == 404 and exc.detail == "Not Found" else exc.detail

    return JSONResponse(
        status_code=exc.status_code,
        content=build_error_content(request, "http_error", message, status_code=exc.status_code),
        headers=getattr(exc, "headers", None),
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Manejador global para excepciones no capturadas.

    Args:
        request: Request de FastAPI
        exc: Excepción no manejada

    Returns:
        JSONResponse: Respuesta JSON de error interno
    """
    logger.error(
        f"Unhandled Exception: {str(exc)} - "
        f"Type: {type(exc).__name__} - "
        f"URL: {request.url} - "
        f"Traceback: {traceback.format_exc()}"
    )

    # Respuesta genérica (sin exponer detalles internos)
    error_message = "Internal server error occurred"
    if settings.DEBUG:
        error_message = f"{type(exc).__name__}: {str(exc)}"

    return JSONResponse(
        status_code=500,
        content=build_error_content(
            request,
            "internal_server_error",
            error_message,
            "UNKNOWN_ERROR",
            traceback=traceback.format_exc() if settings.DEBUG else None,
        ),
    )


def configure_exception_handlers(app: FastAPI) -> None:
    """
    Configura todos los manejadores de excepciones de la aplicación.

    Args:
        app: Instancia de FastAPI
    """
    logger.info("🔧 Configurando manejadores de excepciones...")

    # Manejadores específicos (orden de especificidad)
    app.add_exception_handler(ValidationException, validation_exception_handler)
    app.add_exception_handler(SubdomainConflictException, subdomain_conflict_exception_handler)
    app.add_exception_handler(StoreNotFoundException, store_not_found_exception_handler)
    app.add_exception_handler(DNSProviderException, dns_provider_exception_handler)
    app.add_exception_handler(DeploymentException, deployment_exception_handler)
    app.add_exception_handler(AppException, app_exception_handler)

    # Manejadores HTTP estándar
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, starlette_http_exception_handler)

    # Manejador global (debe ser el último)
    app.add_exception_handler(Exception, global_exception_handler)

    logger.info("✅ Manejadores de excepciones configurados correctamente")


# Funciones auxiliares


def get_request_id(request: Request) -> Optional[str]:
    """
    Obtiene el ID de la request asignado por el middleware de logging.

    Args:
        request: Request de FastAPI

    Returns:
        str | None: ID de la request
    """
    return getattr(request.state, "request_id", None) or request.headers.get("X-Request-ID")
