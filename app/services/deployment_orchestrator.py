"""
DeploymentOrchestrator - drives a store from `creating` to a terminal state.

Flow of a run:
1. Look up the store (missing store -> failure, nothing mutated)
2. creating -> configuring, fresh deployment log
3. DNS step: Cloudflare provisioning, or a manual-setup instruction
4. configuring -> active with the public URL

Any error after step 2 moves the store to `failed` with the error captured
on the entity, then propagates to the caller of run(). Runs for the same
store id are serialized through the registry's per-store lock.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from app.core.config import Settings, get_settings
from app.core.logging_config import log_deployment_event
from app.db.cloudflare_client import CloudflareDNSClient
from app.db.store_registry import StoreRegistry
from app.domain.models import StoreDomain, StoreStatus
from app.utils.error_handler import AppException, DeploymentException, ErrorCode
from app.utils.subdomain_utils import build_full_domain

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeploymentResult:
    """Successful outcome of a deployment run."""

    success: bool
    url: str
    deployment_time: int


class DeploymentOrchestrator:
    """
    Coordinates the store registry and the DNS client for one deployment.

    Dependencies are injected so tests can swap the DNS client for a mock.
    """

    def __init__(
        self,
        registry: StoreRegistry,
        dns_client: CloudflareDNSClient,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize orchestrator with its collaborators.

        Args:
            registry: Store registry owning the entities
            dns_client: Client used for the DNS step
            settings: Application settings (defaults to the global instance)
        """
        self.registry = registry
        self.dns_client = dns_client
        self.settings = settings or get_settings()

    async def run(self, store_id: str, subdomain: str) -> DeploymentResult:
        """
        Deploy a registered store.

        Args:
            store_id: Store identifier
            subdomain: Subdomain to provision

        Returns:
            DeploymentResult: public URL and elapsed time in whole seconds

        Raises:
            DeploymentException: If the store is missing, not in `creating`,
                or the DNS step fails
        """
        full_domain = build_full_domain(subdomain, self.settings.MAIN_DOMAIN)
        logger.info(f"🚀 Starting deployment for {full_domain}")

        async with self.registry.deployment_lock(store_id):
            store = self.registry.get(store_id)
            try:
                self._check_deployable(store_id, store)
                return await self._deploy(store, subdomain, full_domain)

            except Exception as e:
                error_message = e.message if isinstance(e, AppException) else str(e)
                logger.error(f"❌ Deployment failed for {full_domain}: {error_message}")

                if store is not None and store.status is StoreStatus.CONFIGURING:
                    store.mark_failed(error_message)
                    log_deployment_event(
                        store_id,
                        "failed",
                        level=logging.ERROR,
                        subdomain=subdomain,
                        error=error_message,
                    )
                raise

    def _check_deployable(self, store_id: str, store: Optional[StoreDomain]) -> None:
        if store is None:
            raise DeploymentException(f"Store {store_id} not found", store_id=store_id, step="lookup")

        if store.status is not StoreStatus.CREATING:
            # Terminal states stay terminal; a run in progress holds the lock
            raise DeploymentException(
                f"Store {store_id} is already '{store.status.value}' and cannot be redeployed",
                store_id=store_id,
                step="lookup",
                error_code=ErrorCode.INVALID_STATE_TRANSITION,
            )

    async def _deploy(self, store: StoreDomain, subdomain: str, full_domain: str) -> DeploymentResult:
        store.begin_configuring()
        log_deployment_event(store.id, "started", subdomain=subdomain, status=store.status.value)

        logger.info("🌐 Creating DNS record...")
        store.append_log("Creating DNS record...")

        if self.settings.dns_provisioning_enabled:
            await self._provision_dns(store, subdomain)
        else:
            server_ip = self.settings.SERVER_IP
            logger.info("📝 Manual DNS Setup Required:")
            logger.info(f"   Add A record: {full_domain} → {server_ip}")
            store.append_log(f"Manual DNS setup required: {full_domain} → {server_ip}")

        public_url = f"http://{store.full_domain}"
        store.mark_active(public_url)
        deployment_time = store.deployment_time_seconds()
        log_deployment_event(store.id, "completed", subdomain=subdomain, status=store.status.value)

        logger.info(f"✅ Deployment completed in {deployment_time}s! Store is live at: {public_url}")
        return DeploymentResult(success=True, url=public_url, deployment_time=deployment_time)

    async def _provision_dns(self, store: StoreDomain, subdomain: str) -> None:
        dns_result = await self.dns_client.ensure_record(subdomain)

        if not dns_result.success:
            raise DeploymentException(
                f"DNS creation failed: {dns_result.error}",
                store_id=store.id,
                step="dns",
                details={"provider_errors": dns_result.details},
            )

        store.record_dns_record(dns_result.record_id)
        if dns_result.existing:
            store.append_log(f"DNS record already exists: {dns_result.record_id}")
        else:
            store.append_log(f"DNS record created: {dns_result.record_id}")
        if dns_result.message:
            store.append_log(dns_result.message)

        log_deployment_event(store.id, "dns", subdomain=subdomain, record_id=dns_result.record_id)
