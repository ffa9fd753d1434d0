"""
Endpoint de estado del sistema.
"""

import logging

from fastapi import APIRouter, Depends

from app.api.v1.schemas.store_schemas import SystemStatusResponse
from app.core.config import get_environment_info
from app.services import deployment_manager
from app.services.store_service import StoreService, get_store_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/system", tags=["System"])


@router.get("/status", response_model=SystemStatusResponse)
async def get_system_status(store_service: StoreService = Depends(get_store_service)):
    """
    Configuración activa (sin secretos), estado de Cloudflare y conteo de tiendas.
    """
    environment_info = get_environment_info()
    cloudflare_info = environment_info.pop("cloudflare")

    return SystemStatusResponse(
        data={
            "system": environment_info,
            "cloudflare": cloudflare_info,
            "stores": store_service.get_status_counts(),
            "deployments": deployment_manager.get_deployment_statistics(),
        }
    )
