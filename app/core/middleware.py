"""
Configuración de Middleware para la aplicación FastAPI.

Este módulo centraliza toda la configuración de middleware incluyendo:
- CORS
- TrustedHost
- Request logging
- Bloqueo de rutas inválidas
- Resolución de tiendas por subdominio
- Security headers
"""

import logging
import re
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse

from app.core.config import get_settings
from app.services.store_service import get_store_service
from app.utils.subdomain_utils import validate_subdomain

settings = get_settings()
logger = logging.getLogger(__name__)

INVALID_PATH_PATTERN = re.compile(r"^(?:https?://|[<>\[\]():])", re.IGNORECASE)

# Subdominios de plataforma que nunca resuelven a una tienda
PASSTHROUGH_SUBDOMAINS = frozenset({"www", "api", "admin"})


def configure_cors_middleware(app: FastAPI) -> None:
    """
    Configura middleware CORS para permitir requests cross-origin.

    Args:
        app: Instancia de FastAPI
    """
    allowed_origins = settings.ALLOWED_HOSTS or ["*"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=[
            "Accept",
            "Accept-Language",
            "Content-Language",
            "Content-Type",
            "X-Request-ID",
        ],
        expose_headers=["X-Process-Time", "X-Request-ID"],
    )

    logger.info(f"✅ CORS configurado - Origins permitidos: {allowed_origins}")


def configure_trusted_host_middleware(app: FastAPI) -> None:
    """
    Configura middleware TrustedHost para validar hosts permitidos.
    Solo se aplica fuera de debug; los subdominios de tienda se aceptan
    con el comodín del dominio principal.

    Args:
        app: Instancia de FastAPI
    """
    if not settings.DEBUG and settings.ALLOWED_HOSTS:
        allowed_hosts = settings.ALLOWED_HOSTS + [
            settings.MAIN_DOMAIN,
            f"*.{settings.MAIN_DOMAIN}",
            "localhost",
            "127.0.0.1",
        ]

        app.add_middleware(TrustedHostMiddleware, allowed_hosts=allowed_hosts)

        logger.info(f"✅ TrustedHost configurado - Hosts permitidos: {allowed_hosts}")


def configure_request_logging_middleware(app: FastAPI) -> None:
    """
    Configura middleware para logging de todas las requests/responses.

    Args:
        app: Instancia de FastAPI
    """

    @app.middleware("http")
    async def log_requests_middleware(request: Request, call_next):
        """
        Middleware que loggea información de cada request/response.

        Args:
            request: Request de FastAPI
            call_next: Siguiente middleware en la cadena

        Returns:
            Response con headers adicionales
        """
        request_id = generate_request_id()
        request.state.request_id = request_id

        start_time = time.time()
        client_ip = get_client_ip(request)
        user_agent = request.headers.get("user-agent", "unknown")
        host = request.headers.get("host", "unknown")

        logger.info(
            f"📨 [{request_id}] {request.method} {host}{request.url.path} - "
            f"Client: {client_ip} - "
            f"User-Agent: {user_agent[:100]}"
        )

        if request.url.query:
            logger.debug(f"🔍 [{request_id}] Query params: {request.url.query}")

        try:
            response = await call_next(request)

            process_time = time.time() - start_time

            status_emoji = get_status_emoji(response.status_code)
            logger.info(
                f"{status_emoji} [{request_id}] {request.method} {request.url.path} - "
                f"Status: {response.status_code} - "
                f"Time: {process_time:.3f}s"
            )

            response.headers["X-Process-Time"] = f"{process_time:.3f}"
            response.headers["X-Request-ID"] = request_id

            if process_time > settings.SLOW_REQUEST_THRESHOLD:
                logger.warning(
                    f"🐌 [{request_id}] Slow request detected: {process_time:.3f}s > {settings.SLOW_REQUEST_THRESHOLD}s"
                )

            return response

        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                f"❌ [{request_id}] {request.method} {request.url.path} - Error: {str(e)} - Time: {process_time:.3f}s"
            )
            raise


def configure_invalid_path_middleware(app: FastAPI) -> None:
    """
    Configura middleware que rechaza rutas con URLs embebidas o caracteres especiales.

    Args:
        app: Instancia de FastAPI
    """

    @app.middleware("http")
    async def invalid_path_middleware(request: Request, call_next):
        if is_invalid_path(request.url.path):
            logger.warning(f"🚫 Blocked invalid path: {request.url.path}")
            return JSONResponse(
                status_code=400,
                content={
                    "success": False,
                    "message": "Invalid request path. URLs or special characters are not allowed.",
                },
            )

        return await call_next(request)


def configure_subdomain_middleware(app: FastAPI) -> None:
    """
    Configura middleware que resuelve la tienda a partir del header Host.

    Deja en request.state:
    - is_subdomain_request: True si el Host es un subdominio de tienda
    - store: la tienda encontrada o None

    Args:
        app: Instancia de FastAPI
    """

    @app.middleware("http")
    async def subdomain_middleware(request: Request, call_next):
        request.state.is_subdomain_request = False
        request.state.store = None

        host = request.headers.get("host")
        if not host:
            logger.warning("No host header provided in request")
            return JSONResponse(status_code=400, content={"success": False, "message": "Host header is required"})

        subdomain = extract_store_subdomain(host)
        if subdomain is None:
            return await call_next(request)

        if not validate_subdomain(subdomain).is_valid:
            logger.warning(f"Invalid subdomain format: {subdomain}")
            return JSONResponse(status_code=400, content={"success": False, "message": "Invalid subdomain format"})

        request.state.is_subdomain_request = True
        request.state.store = get_store_service().find_by_subdomain(subdomain)

        return await call_next(request)


def configure_security_headers_middleware(app: FastAPI) -> None:
    """
    Configura middleware para agregar headers de seguridad.

    Args:
        app: Instancia de FastAPI
    """

    @app.middleware("http")
    async def security_headers_middleware(request: Request, call_next):
        """
        Middleware que agrega headers de seguridad a todas las responses.

        Args:
            request: Request de FastAPI
            call_next: Siguiente middleware en la cadena

        Returns:
            Response con headers de seguridad
        """
        response = await call_next(request)

        security_headers = {
            "X-Content-Type-Options": "nosniff",
            "X-Frame-Options": "DENY",
            "Referrer-Policy": "strict-origin-when-cross-origin",
        }

        # Solo agregar HSTS en producción con HTTPS
        if not settings.DEBUG and request.url.scheme == "https":
            security_headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        for header, value in security_headers.items():
            response.headers[header] = value

        return response


def configure_all_middleware(app: FastAPI) -> None:
    """
    Configura todos los middlewares de la aplicación.
    El orden importa: se ejecutan en orden inverso al que se agregan.

    Args:
        app: Instancia de FastAPI
    """
    logger.info("🔧 Configurando middlewares...")

    # 1. Security headers (más cerca de los endpoints)
    configure_security_headers_middleware(app)

    # 2. Resolución de subdominio
    configure_subdomain_middleware(app)

    # 3. Bloqueo de rutas inválidas (antes de resolver subdominios)
    configure_invalid_path_middleware(app)

    # 4. Request logging
    configure_request_logging_middleware(app)

    # 5. TrustedHost (solo producción)
    configure_trusted_host_middleware(app)

    # 6. CORS (último en agregarse, primero en ejecutarse para OPTIONS)
    configure_cors_middleware(app)

    logger.info("✅ Todos los middlewares configurados correctamente")


# Funciones auxiliares


def generate_request_id() -> str:
    """
    Genera un ID único para cada request.

    Returns:
        str: ID único de 8 caracteres
    """
    return str(uuid.uuid4())[:8]


def is_invalid_path(path: str) -> bool:
    """
    Indica si la ruta embebe un esquema de URL o empieza con caracteres especiales.

    Args:
        path: Ruta de la request

    Returns:
        bool: True si la ruta debe rechazarse
    """
    return "://" in path or bool(INVALID_PATH_PATTERN.match(path.lstrip("/")))


def extract_store_subdomain(host: str):
    """
    Obtiene el subdominio de tienda del header Host.

    Un Host con al menos tres etiquetas (sin localhost) es un subdominio;
    www, api y admin no se tratan como tiendas.

    Args:
        host: Valor del header Host (puede incluir puerto)

    Returns:
        str | None: Subdominio o None si no aplica
    """
    hostname = host.split(":", 1)[0].lower()
    parts = hostname.split(".")

    if len(parts) < 3 or "localhost" in hostname:
        return None

    subdomain = parts[0]
    if subdomain in PASSTHROUGH_SUBDOMAINS:
        return None

    return subdomain


def get_client_ip(request: Request) -> str:
    """
    Obtiene la IP real del cliente considerando proxies.

    Args:
        request: Request de FastAPI

    Returns:
        str: IP del cliente
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # Tomar la primera IP en caso de múltiples proxies
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    if request.client:
        return request.client.host

    return "unknown"


def get_status_emoji(status_code: int) -> str:
    """
    Obtiene emoji apropiado según el código de estado HTTP.

    Args:
        status_code: Código de estado HTTP

    Returns:
        str: Emoji representativo
    """
    if 200 <= status_code < 300:
        return "✅"
    elif 300 <= status_code < 400:
        return "↩️"
    elif 400 <= status_code < 500:
        return "⚠️"
    elif 500 <= status_code < 600:
        return "❌"
    else:
        return "📤"
