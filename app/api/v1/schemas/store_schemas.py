"""
Modelos Pydantic para la API de tiendas.

Las claves JSON usan camelCase, igual que los clientes existentes del API.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from app.domain.models import StoreDomain


class CreateStoreRequest(BaseModel):
    """Solicitud de creación de tienda."""

    storeName: Optional[str] = Field(default=None, description="Nombre visible de la tienda")
    customSubdomain: Optional[str] = Field(
        default=None, description="Subdominio deseado; se genera a partir del nombre si se omite"
    )


class StoreCreatedData(BaseModel):
    """Datos de la tienda recién registrada."""

    storeId: str
    storeName: str
    subdomain: str
    fullDomain: str
    status: str
    note: str

    @classmethod
    def from_domain(cls, store: StoreDomain) -> "StoreCreatedData":
        return cls(
            storeId=store.id,
            storeName=store.name,
            subdomain=store.subdomain,
            fullDomain=store.full_domain,
            status=store.status.value,
            note=f"Your store will be accessible at http://{store.full_domain} once deployment completes",
        )


class StoreCreatedResponse(BaseModel):
    success: bool = True
    message: str = "Store creation initiated"
    data: StoreCreatedData


class DeploymentInfo(BaseModel):
    """Bloque de despliegue del estado de una tienda."""

    started: Optional[datetime] = None
    completed: Optional[datetime] = None
    failed: Optional[datetime] = None
    timeSeconds: Optional[int] = None
    logs: List[str] = Field(default_factory=list)


class StoreStatusData(BaseModel):
    """Estado completo de una tienda."""

    storeId: str
    name: str
    subdomain: str
    status: str
    fullDomain: str
    publicUrl: Optional[str] = None
    dnsRecordId: Optional[str] = None
    deployment: DeploymentInfo
    errorMessage: Optional[str] = None
    createdAt: datetime

    @classmethod
    def from_domain(cls, store: StoreDomain) -> "StoreStatusData":
        return cls(
            storeId=store.id,
            name=store.name,
            subdomain=store.subdomain,
            status=store.status.value,
            fullDomain=store.full_domain,
            publicUrl=store.public_url,
            dnsRecordId=store.dns_record_id,
            deployment=DeploymentInfo(
                started=store.deployment_started,
                completed=store.deployment_completed,
                failed=store.deployment_failed,
                timeSeconds=store.deployment_time_seconds(),
                logs=list(store.deployment_logs),
            ),
            errorMessage=store.error_message,
            createdAt=store.created_at,
        )


class StoreStatusResponse(BaseModel):
    success: bool = True
    data: StoreStatusData


class DeploymentTimestamps(BaseModel):
    created: datetime
    deploymentStarted: Optional[datetime] = None
    deploymentCompleted: Optional[datetime] = None
    deploymentFailed: Optional[datetime] = None


class StoreLogsData(BaseModel):
    """Logs de despliegue y marcas de tiempo."""

    storeId: str
    subdomain: str
    status: str
    logs: List[str]
    timestamps: DeploymentTimestamps

    @classmethod
    def from_domain(cls, store: StoreDomain) -> "StoreLogsData":
        return cls(
            storeId=store.id,
            subdomain=store.subdomain,
            status=store.status.value,
            logs=list(store.deployment_logs),
            timestamps=DeploymentTimestamps(
                created=store.created_at,
                deploymentStarted=store.deployment_started,
                deploymentCompleted=store.deployment_completed,
                deploymentFailed=store.deployment_failed,
            ),
        )


class StoreLogsResponse(BaseModel):
    success: bool = True
    data: StoreLogsData


class StoreListItem(BaseModel):
    """Resumen de una tienda en el listado."""

    storeId: str
    name: str
    subdomain: str
    status: str
    fullDomain: str
    publicUrl: Optional[str] = None
    createdAt: datetime
    deploymentTimeSeconds: Optional[int] = None

    @classmethod
    def from_domain(cls, store: StoreDomain) -> "StoreListItem":
        return cls(
            storeId=store.id,
            name=store.name,
            subdomain=store.subdomain,
            status=store.status.value,
            fullDomain=store.full_domain,
            publicUrl=store.public_url,
            createdAt=store.created_at,
            deploymentTimeSeconds=store.deployment_time_seconds(),
        )


class StoreSummary(BaseModel):
    total: int = 0
    active: int = 0
    configuring: int = 0
    failed: int = 0


class StoreListResponse(BaseModel):
    success: bool = True
    data: List[StoreListItem]
    summary: StoreSummary


class SubdomainAvailabilityResponse(BaseModel):
    """Resultado de la verificación de disponibilidad."""

    available: bool
    valid: bool
    subdomain: str
    suggestion: Optional[str] = None


class StoreDeletedData(BaseModel):
    storeId: str
    subdomain: str
    note: str = "Manual cleanup of DNS records may be required if using Cloudflare"


class StoreDeletedResponse(BaseModel):
    success: bool = True
    message: str = "Store deleted successfully"
    data: StoreDeletedData


class ProductData(BaseModel):
    name: str
    description: str
    price: float


class StoreDetailsData(BaseModel):
    """Detalle público de una tienda servido en su subdominio."""

    storeId: str
    name: str
    subdomain: str
    status: str
    fullDomain: str
    publicUrl: Optional[str] = None
    createdAt: datetime
    products: List[ProductData]

    @classmethod
    def from_domain(cls, store: StoreDomain) -> "StoreDetailsData":
        return cls(
            storeId=store.id,
            name=store.name,
            subdomain=store.subdomain,
            status=store.status.value,
            fullDomain=store.full_domain,
            publicUrl=store.public_url,
            createdAt=store.created_at,
            products=[ProductData(**product.to_dict()) for product in store.products],
        )


class StoreDetailsResponse(BaseModel):
    success: bool = True
    message: str = "Store details"
    data: StoreDetailsData


class SystemStatusResponse(BaseModel):
    """Estado del sistema: configuración, Cloudflare y conteo de tiendas."""

    success: bool = True
    data: Dict[str, Any]
