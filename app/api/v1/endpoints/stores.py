"""
API endpoints para la gestión de tiendas.

Creación (con despliegue en segundo plano), estado, logs, listado,
verificación de subdominios y eliminación.
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from app.api.v1.schemas.store_schemas import (
    CreateStoreRequest,
    StoreCreatedData,
    StoreCreatedResponse,
    StoreDeletedData,
    StoreDeletedResponse,
    StoreListItem,
    StoreListResponse,
    StoreLogsData,
    StoreLogsResponse,
    StoreStatusData,
    StoreStatusResponse,
    StoreSummary,
    SubdomainAvailabilityResponse,
)
from app.services.store_service import StoreService, get_store_service
from app.utils.error_handler import StoreNotFoundException, ValidationException

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stores", tags=["Stores"])


@router.post("/create", response_model=StoreCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_store(
    request: CreateStoreRequest,
    store_service: StoreService = Depends(get_store_service),
):
    """
    Registra una tienda y lanza su despliegue sin esperar el resultado.

    El resultado del despliegue solo es observable consultando el estado
    de la tienda.

    Returns:
        Datos de la tienda en estado `creating`
    """
    store = store_service.create_store(request.storeName, request.customSubdomain)
    logger.info(f"🏪 Store creation initiated: {store.name} → {store.full_domain}")
    return StoreCreatedResponse(data=StoreCreatedData.from_domain(store))


@router.get("", response_model=StoreListResponse)
async def list_stores(store_service: StoreService = Depends(get_store_service)):
    """
    Lista todas las tiendas, de la más reciente a la más antigua.
    """
    items = [StoreListItem.from_domain(store) for store in store_service.list_stores()]
    summary = StoreSummary(
        total=len(items),
        active=len([s for s in items if s.status == "active"]),
        configuring=len([s for s in items if s.status == "configuring"]),
        failed=len([s for s in items if s.status == "failed"]),
    )
    return StoreListResponse(data=items, summary=summary)


@router.get("/check-subdomain/{subdomain}", response_model=SubdomainAvailabilityResponse)
async def check_subdomain(subdomain: str, store_service: StoreService = Depends(get_store_service)):
    """
    Verifica si un subdominio es válido y está disponible.

    Un subdominio inválido responde 400 con una alternativa sugerida.
    """
    try:
        availability = store_service.check_subdomain_availability(subdomain)
    except ValidationException as e:
        return JSONResponse(
            status_code=e.status_code,
            content={
                "available": False,
                "valid": False,
                "message": e.message,
                "suggestion": e.suggestion,
            },
        )

    return SubdomainAvailabilityResponse(
        available=availability.available,
        valid=availability.valid,
        subdomain=availability.subdomain,
        suggestion=availability.suggestion,
    )


@router.get("/{store_id}/status", response_model=StoreStatusResponse)
async def get_store_status(store_id: str, store_service: StoreService = Depends(get_store_service)):
    """
    Estado detallado de una tienda, incluido el bloque de despliegue.
    """
    store = store_service.require_store(store_id)
    return StoreStatusResponse(data=StoreStatusData.from_domain(store))


@router.get("/{store_id}/logs", response_model=StoreLogsResponse)
async def get_store_logs(store_id: str, store_service: StoreService = Depends(get_store_service)):
    """Logs de despliegue de una tienda."""
    store = store_service.require_store(store_id)
    return StoreLogsResponse(data=StoreLogsData.from_domain(store))


@router.delete("/{store_id}", response_model=StoreDeletedResponse)
async def delete_store(store_id: str, store_service: StoreService = Depends(get_store_service)):
    """
    Elimina una tienda del registro.

    Los registros DNS no se eliminan; su limpieza es manual.
    """
    store = store_service.require_store(store_id)
    if not store_service.delete_store(store_id):
        raise StoreNotFoundException(store_id)

    logger.info(f"🗑️ Store deleted: {store_id} ({store.subdomain})")
    return StoreDeletedResponse(data=StoreDeletedData(storeId=store_id, subdomain=store.subdomain))
