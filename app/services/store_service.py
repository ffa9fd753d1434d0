"""
Store service - operations exposed to the HTTP layer.

Registration, deployment scheduling, status lookup, listing, deletion and
subdomain availability checks. The service validates input and delegates
state to the StoreRegistry; deployments run detached through the
deployment manager.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from app.core.config import Settings, get_settings
from app.db.cloudflare_client import get_dns_client
from app.db.store_registry import StoreRegistry, get_store_registry
from app.domain.models import StoreDomain, StoreStatus
from app.services import deployment_manager
from app.services.deployment_orchestrator import DeploymentOrchestrator
from app.utils.error_handler import ErrorCode, StoreNotFoundException, ValidationException
from app.utils.subdomain_utils import (
    INVALID_FORMAT_MESSAGE,
    build_full_domain,
    generate_unique_subdomain,
    validate_subdomain,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubdomainAvailability:
    """Answer of an availability check for a valid subdomain."""

    subdomain: str
    available: bool
    valid: bool = True
    suggestion: Optional[str] = None


class StoreService:
    """Facade over the registry, the orchestrator and the deployment manager."""

    def __init__(
        self,
        registry: Optional[StoreRegistry] = None,
        orchestrator: Optional[DeploymentOrchestrator] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.registry = registry or get_store_registry()
        self.orchestrator = orchestrator or DeploymentOrchestrator(
            registry=self.registry,
            dns_client=get_dns_client(),
            settings=self.settings,
        )

    def register_store(self, store_name: str, custom_subdomain: Optional[str] = None) -> StoreDomain:
        """
        Register a new store in state `creating`.

        Args:
            store_name: Display name
            custom_subdomain: Subdomain requested by the caller; generated from
                the name when omitted

        Returns:
            StoreDomain: The registered store

        Raises:
            ValidationException: Missing name or malformed/reserved subdomain
            SubdomainConflictException: Subdomain already taken (with suggestion)
        """
        if not store_name or not store_name.strip():
            raise ValidationException("Store name is required", field="storeName", invalid_value=store_name)

        if custom_subdomain:
            validation = validate_subdomain(custom_subdomain)
            if not validation.is_valid:
                logger.info(f"Rejected subdomain '{custom_subdomain}': {validation.reason}")
                raise ValidationException(
                    INVALID_FORMAT_MESSAGE,
                    field="customSubdomain",
                    invalid_value=custom_subdomain,
                    expected_format="^[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?$",
                    error_code=ErrorCode.INVALID_SUBDOMAIN,
                )
            subdomain = custom_subdomain
        else:
            subdomain = generate_unique_subdomain(store_name)

        store = StoreDomain(
            name=store_name,
            subdomain=subdomain,
            full_domain=build_full_domain(subdomain, self.settings.MAIN_DOMAIN),
        )
        return self.registry.register(store, suggest=lambda: generate_unique_subdomain(store_name))

    def begin_deployment(self, store_id: str, subdomain: str) -> asyncio.Task:
        """Schedule the deployment run; the caller does not wait for it."""
        return deployment_manager.schedule_deployment(self.orchestrator, store_id, subdomain)

    def create_store(self, store_name: str, custom_subdomain: Optional[str] = None) -> StoreDomain:
        """Register a store and start its deployment in the background."""
        store = self.register_store(store_name, custom_subdomain)
        self.begin_deployment(store.id, store.subdomain)
        return store

    def get_status(self, store_id: str) -> Optional[StoreDomain]:
        return self.registry.get(store_id)

    def require_store(self, store_id: str) -> StoreDomain:
        """
        Same as get_status but raises for unknown ids.

        Raises:
            StoreNotFoundException: If no store has that id
        """
        store = self.registry.get(store_id)
        if store is None:
            raise StoreNotFoundException(store_id)
        return store

    def find_by_subdomain(self, subdomain: str) -> Optional[StoreDomain]:
        return self.registry.find_by_subdomain(subdomain)

    def list_stores(self) -> List[StoreDomain]:
        """All stores, newest first."""
        return sorted(self.registry.list(), key=lambda store: store.created_at, reverse=True)

    def delete_store(self, store_id: str) -> bool:
        """
        Remove a store. DNS records are left in place for manual cleanup.

        Returns:
            True if the store existed
        """
        deleted = self.registry.delete(store_id)
        if deleted and self.settings.dns_provisioning_enabled:
            logger.warning(f"Store {store_id} deleted; its DNS record may need manual cleanup")
        return deleted

    def check_subdomain_availability(self, subdomain: str) -> SubdomainAvailability:
        """
        Check whether a subdomain can be used for a new store.

        Raises:
            ValidationException: If the subdomain is malformed or reserved; the
                exception carries a generated alternative as `suggestion`
        """
        validation = validate_subdomain(subdomain)
        if not validation.is_valid:
            raise ValidationException(
                INVALID_FORMAT_MESSAGE,
                field="subdomain",
                invalid_value=subdomain,
                suggestion=generate_unique_subdomain(subdomain),
                error_code=ErrorCode.INVALID_SUBDOMAIN,
            )

        taken = self.registry.is_subdomain_taken(subdomain)
        return SubdomainAvailability(
            subdomain=subdomain,
            available=not taken,
            suggestion=generate_unique_subdomain(subdomain) if taken else None,
        )

    def get_status_counts(self) -> Dict[str, int]:
        """Store totals by lifecycle state."""
        stores = self.registry.list()
        return {
            "total": len(stores),
            "active": len([s for s in stores if s.status is StoreStatus.ACTIVE]),
            "configuring": len([s for s in stores if s.status is StoreStatus.CONFIGURING]),
            "failed": len([s for s in stores if s.status is StoreStatus.FAILED]),
        }


_store_service: Optional[StoreService] = None


def get_store_service() -> StoreService:
    """
    Obtiene la instancia global del servicio de tiendas.

    Returns:
        StoreService: Servicio configurado
    """
    global _store_service
    if _store_service is None:
        _store_service = StoreService()
    return _store_service


def reset_store_service() -> None:
    """Descarta la instancia global (tests)."""
    global _store_service
    _store_service = None
