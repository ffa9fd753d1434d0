"""
Sistema de manejo de errores personalizado.

Este módulo define todas las excepciones personalizadas de la aplicación
y proporciona utilidades para manejo consistente de errores.
"""

import logging
import traceback
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class ErrorCode(Enum):
    """
    Códigos de error estandardizados para la aplicación.
    """

    # Errores generales
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Errores de tiendas
    STORE_NOT_FOUND = "STORE_NOT_FOUND"
    SUBDOMAIN_CONFLICT = "SUBDOMAIN_CONFLICT"
    INVALID_SUBDOMAIN = "INVALID_SUBDOMAIN"

    # Errores de despliegue
    DNS_PROVIDER_ERROR = "DNS_PROVIDER_ERROR"
    DEPLOYMENT_FAILED = "DEPLOYMENT_FAILED"
    INVALID_STATE_TRANSITION = "INVALID_STATE_TRANSITION"


class ErrorSeverity(Enum):
    """
    Niveles de severidad para errores.
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AppException(Exception):
    """
    Excepción base para todas las excepciones personalizadas de la aplicación.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
    ):
        """
        Inicializa la excepción.

        Args:
            message: Mensaje de error
            error_code: Código de error estandardizado
            details: Información adicional del error
            status_code: Código HTTP asociado
            severity: Severidad del error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        self.severity = severity
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convierte la excepción a diccionario.

        Returns:
            Dict: Representación de la excepción
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code.value,
            "details": self.details,
            "status_code": self.status_code,
            "severity": self.severity.value,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        """String representation del error."""
        return f"{self.error_code.value}: {self.message}"


class ValidationException(AppException):
    """
    Excepción para errores de validación (nombre faltante, subdominio mal formado o reservado).
    """

    def __init__(
        self,
        message: str,
        field: str,
        invalid_value: Any = None,
        expected_format: Optional[str] = None,
        suggestion: Optional[str] = None,
        **kwargs,
    ):
        """
        Inicializa la excepción de validación.

        Args:
            message: Mensaje de error
            field: Campo que falló la validación
            invalid_value: Valor que causó el error
            expected_format: Formato esperado
            suggestion: Alternativa válida sugerida (si aplica)
            **kwargs: Argumentos adicionales para AppException
        """
        kwargs.setdefault("error_code", ErrorCode.VALIDATION_ERROR)
        super().__init__(
            message=message,
            status_code=400,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.field = field
        self.invalid_value = invalid_value
        self.expected_format = expected_format
        self.suggestion = suggestion

        self.details.update(
            {
                "field": field,
                "invalid_value": str(invalid_value) if invalid_value is not None else None,
                "expected_format": expected_format,
            }
        )


class SubdomainConflictException(AppException):
    """
    Excepción para subdominios ya tomados por otra tienda.
    """

    def __init__(self, subdomain: str, suggestion: str, **kwargs):
        """
        Inicializa la excepción de conflicto.

        Args:
            subdomain: Subdominio solicitado
            suggestion: Subdominio alternativo sugerido
            **kwargs: Argumentos adicionales para AppException
        """
        super().__init__(
            message="Subdomain already taken",
            error_code=ErrorCode.SUBDOMAIN_CONFLICT,
            status_code=409,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.subdomain = subdomain
        self.suggestion = suggestion

        self.details.update({"subdomain": subdomain, "suggestion": suggestion})


class StoreNotFoundException(AppException):
    """
    Excepción para identificadores de tienda desconocidos.
    """

    def __init__(self, store_id: str, **kwargs):
        """
        Inicializa la excepción de tienda no encontrada.

        Args:
            store_id: Identificador consultado
            **kwargs: Argumentos adicionales para AppException
        """
        super().__init__(
            message="Store not found",
            error_code=ErrorCode.STORE_NOT_FOUND,
            status_code=404,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.store_id = store_id

        self.details.update({"store_id": store_id})


class DNSProviderException(AppException):
    """
    Excepción para errores del proveedor DNS (transporte o respuesta no-2xx).
    """

    def __init__(
        self,
        message: str,
        api_response_code: Optional[int] = None,
        endpoint: Optional[str] = None,
        provider_errors: Optional[Any] = None,
        **kwargs,
    ):
        """
        Inicializa la excepción del proveedor DNS.

        Args:
            message: Mensaje de error
            api_response_code: Código HTTP devuelto por el proveedor
            endpoint: Endpoint que falló
            provider_errors: Cuerpo de error estructurado del proveedor
            **kwargs: Argumentos adicionales para AppException
        """
        severity = ErrorSeverity.MEDIUM
        if api_response_code and api_response_code >= 500:
            severity = ErrorSeverity.HIGH

        super().__init__(
            message=message,
            error_code=ErrorCode.DNS_PROVIDER_ERROR,
            status_code=502,
            severity=severity,
            **kwargs,
        )
        self.api_response_code = api_response_code
        self.endpoint = endpoint
        self.provider_errors = provider_errors

        self.details.update(
            {
                "api_response_code": api_response_code,
                "endpoint": endpoint,
                "provider_errors": provider_errors,
            }
        )


class DeploymentException(AppException):
    """
    Excepción para despliegues fallidos o transiciones de estado inválidas.
    """

    def __init__(
        self,
        message: str,
        store_id: str,
        step: str,
        error_code: ErrorCode = ErrorCode.DEPLOYMENT_FAILED,
        **kwargs,
    ):
        """
        Inicializa la excepción de despliegue.

        Args:
            message: Mensaje de error
            store_id: Tienda cuyo despliegue falló
            step: Paso del despliegue donde ocurrió el error
            error_code: Código de error (por defecto DEPLOYMENT_FAILED)
            **kwargs: Argumentos adicionales para AppException
        """
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=500,
            severity=ErrorSeverity.HIGH,
            **kwargs,
        )
        self.store_id = store_id
        self.step = step

        self.details.update({"store_id": store_id, "step": step})


# === FUNCIONES DE UTILIDAD ===


def log_error(
    exception: Exception,
    context: Optional[Dict[str, Any]] = None,
    level: int = logging.ERROR,
) -> None:
    """
    Loggea un error de manera consistente.

    Args:
        exception: Excepción a loggear
        context: Contexto adicional
        level: Nivel de logging
    """
    context = context or {}

    log_data = {
        "exception_type": type(exception).__name__,
        "exception_message": str(exception),
        "traceback": "".join(traceback.format_exception(type(exception), exception, exception.__traceback__)),
        **context,
    }

    if isinstance(exception, AppException):
        message = f"{exception.error_code.value}: {exception.message}"
        log_data.update(
            {
                "error_code": exception.error_code.value,
                "severity": exception.severity.value,
            }
        )
    else:
        message = f"Unhandled exception: {type(exception).__name__}: {str(exception)}"

    logger.log(level, message, extra=log_data)
