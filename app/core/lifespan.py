"""
Gestión del ciclo de vida de la aplicación FastAPI.

Este módulo maneja los eventos de startup y shutdown de la aplicación,
incluyendo la configuración del logging, la sesión HTTP del cliente DNS
y la espera de despliegues en curso al cerrar.
"""

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.core.config import DNS_PROVIDER_CLOUDFLARE, get_settings
from app.core.logging_config import setup_logging
from app.db.cloudflare_client import close_dns_client, initialize_dns_client
from app.services.deployment_manager import wait_for_active_deployments

settings = get_settings()
logger = logging.getLogger(__name__)

SHUTDOWN_DEPLOYMENT_TIMEOUT = 30.0


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Gestión del ciclo de vida de la aplicación.
    Maneja eventos de startup y shutdown de manera ordenada.

    Args:
        app: Instancia de FastAPI
    """
    # === STARTUP ===
    logger.info(f"🚀 Iniciando {settings.APP_NAME}...")

    try:
        # 1. Configurar logging
        await startup_configure_logging()

        # 2. Verificar configuración
        await startup_verify_configuration()

        # 3. Inicializar servicios asíncronos
        await startup_initialize_services()

        logger.info("🎯 Ready to create stores!")

    except Exception as e:
        logger.error(f"❌ Error durante el startup: {e}")
        await shutdown_cleanup_services()
        sys.exit(1)

    # === YIELD (aplicación corriendo) ===
    yield

    # === SHUTDOWN ===
    logger.info(f"🛑 Cerrando {settings.APP_NAME}...")

    try:
        # 1. Esperar despliegues en curso
        await shutdown_wait_for_deployments()

        # 2. Cerrar sesión HTTP del cliente DNS
        await shutdown_cleanup_services()

        logger.info("👋 Aplicación cerrada correctamente")

    except Exception as e:
        logger.error(f"❌ Error durante el shutdown: {e}")


# === FUNCIONES DE STARTUP ===


async def startup_configure_logging():
    """Configura el sistema de logging."""
    setup_logging()
    logger.info("✅ Sistema de logging configurado")


async def startup_verify_configuration():
    """Registra la configuración activa y advierte del modo simulación."""
    logger.info("🔧 Configuración activa:")
    logger.info(f"   - Entorno: {settings.ENVIRONMENT}")
    logger.info(f"   - Puerto: {settings.PORT}")
    logger.info(f"   - Dominio: {settings.MAIN_DOMAIN}")
    logger.info(f"   - Server IP: {settings.SERVER_IP}")
    logger.info(f"   - DNS Provider: {settings.DNS_PROVIDER}")
    logger.info(f"   - CLOUDFLARE_ZONE_ID: {settings.CLOUDFLARE_ZONE_ID or 'not set'}")
    logger.info(f"   - CLOUDFLARE_API_TOKEN: {'set' if settings.CLOUDFLARE_API_TOKEN else 'not set'}")

    if settings.DNS_PROVIDER == DNS_PROVIDER_CLOUDFLARE and not settings.cloudflare_configured:
        logger.warning("⚠️ DNS_PROVIDER=cloudflare sin credenciales: los registros DNS serán simulados")

    logger.info("✅ Configuración verificada")


async def startup_initialize_services():
    """Inicializa la sesión HTTP del cliente DNS."""
    await initialize_dns_client()
    logger.info("✅ Cliente DNS inicializado")


# === FUNCIONES DE SHUTDOWN ===


async def shutdown_wait_for_deployments():
    """Espera (con límite) a que terminen los despliegues en segundo plano."""
    try:
        finished = await wait_for_active_deployments(timeout=SHUTDOWN_DEPLOYMENT_TIMEOUT)
        if finished:
            logger.info("✅ Despliegues en curso finalizados")
    except Exception as e:
        logger.error(f"Error esperando despliegues: {e}")


async def shutdown_cleanup_services():
    """Cierra el cliente DNS."""
    try:
        await close_dns_client()
        logger.info("✅ Cliente DNS cerrado")
    except Exception as e:
        logger.error(f"Error cerrando cliente DNS: {e}")

