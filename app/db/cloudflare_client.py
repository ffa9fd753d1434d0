"""
Cloudflare DNS client for store subdomain provisioning.

This module ensures an A record exists for `<subdomain>.<MAIN_DOMAIN>`
pointing at the configured server address. The operation is idempotent:
an existing record with the same name is reused instead of duplicated.

Without Cloudflare credentials the client runs in simulation mode and
returns a successful result without any network I/O.

`ensure_record` never raises: every outcome, including transport and
provider errors, is returned as a DNSRecordResult.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import aiohttp
from aiohttp import ClientTimeout

from app.core.config import Settings, get_settings
from app.core.logging_config import log_api_call
from app.utils.error_handler import DNSProviderException
from app.utils.subdomain_utils import build_full_domain

logger = logging.getLogger(__name__)

SIMULATED_RECORD_ID = "simulated"
PROVIDER_CLOUDFLARE = "cloudflare"
PROVIDER_SIMULATION = "simulation"


@dataclass
class DNSRecordResult:
    """Outcome of an ensure_record call."""

    success: bool
    record_id: Optional[str] = None
    provider: Optional[str] = None
    existing: bool = False
    message: Optional[str] = None
    error: Optional[str] = None
    details: Optional[Any] = None

    @property
    def is_simulated(self) -> bool:
        return self.provider == PROVIDER_SIMULATION


class CloudflareDNSClient:
    """
    Client for the Cloudflare v4 DNS records API.

    Uses a shared aiohttp session, created by initialize() or lazily on the
    first provider call. A session can also be injected (tests).
    """

    def __init__(self, settings: Optional[Settings] = None, session: Optional[aiohttp.ClientSession] = None):
        """Initialize the DNS client from application settings."""
        self.settings = settings or get_settings()
        self.base_url = self.settings.CLOUDFLARE_API_BASE_URL.rstrip("/")
        self.zone_id = self.settings.CLOUDFLARE_ZONE_ID
        self.session = session
        self._owns_session = session is None

    @property
    def is_configured(self) -> bool:
        return self.settings.cloudflare_configured

    @property
    def records_url(self) -> str:
        return f"{self.base_url}/zones/{self.zone_id}/dns_records"

    async def initialize(self):
        """Create the HTTP session if credentials are configured."""
        if not self.is_configured:
            logger.warning("⚠️ Cloudflare credentials not configured, DNS records will be simulated")
            return

        if self.session is None:
            timeout = ClientTimeout(total=self.settings.DNS_REQUEST_TIMEOUT_SECONDS, connect=10)
            self.session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True
            logger.info(f"Initialized Cloudflare DNS client for zone {self.zone_id}")

    async def close(self):
        """Close the HTTP session and clean up resources."""
        if self.session and self._owns_session:
            await self.session.close()
            logger.info("Cloudflare DNS client closed")
        if self._owns_session:
            self.session = None

    async def ensure_record(self, subdomain: str) -> DNSRecordResult:
        """
        Ensure an A record exists for a store subdomain.

        Args:
            subdomain: Store subdomain (without the main domain)

        Returns:
            DNSRecordResult: success with the record id (existing=True when the
            record was already there), or failure with the error message and
            provider error details when available
        """
        full_domain = build_full_domain(subdomain, self.settings.MAIN_DOMAIN)
        server_ip = self.settings.SERVER_IP

        if not self.is_configured:
            logger.warning("⚠️ Cloudflare credentials not configured, simulating DNS record creation...")
            return DNSRecordResult(
                success=True,
                record_id=SIMULATED_RECORD_ID,
                provider=PROVIDER_SIMULATION,
                message=f"Simulated DNS record for {full_domain} → {server_ip}",
            )

        try:
            existing_records = await self.find_records(full_domain)

            if existing_records:
                existing_record = existing_records[0]
                logger.info(f"📋 DNS record already exists: {full_domain} → {existing_record.get('content')}")
                return DNSRecordResult(
                    success=True,
                    record_id=existing_record.get("id"),
                    provider=PROVIDER_CLOUDFLARE,
                    existing=True,
                )

            record = await self.create_a_record(full_domain, server_ip)
            logger.info(f"✅ Cloudflare DNS record created: {full_domain} → {server_ip}")
            return DNSRecordResult(success=True, record_id=record.get("id"), provider=PROVIDER_CLOUDFLARE)

        except DNSProviderException as e:
            logger.error(f"❌ Cloudflare DNS creation failed: {e.provider_errors or e.message}")
            return DNSRecordResult(success=False, error=e.message, details=e.provider_errors)

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            error_message = str(e) or type(e).__name__
            logger.error(f"❌ Cloudflare DNS creation failed: {error_message}")
            return DNSRecordResult(success=False, error=error_message)

        except Exception as e:
            logger.error(f"❌ Unexpected error during DNS provisioning for {full_domain}: {e}", exc_info=True)
            return DNSRecordResult(success=False, error=str(e))

    async def find_records(self, full_domain: str) -> List[Dict[str, Any]]:
        """
        List DNS records matching an exact name.

        Raises:
            DNSProviderException: On a non-2xx or unsuccessful provider response
        """
        data = await self._request("GET", self.records_url, params={"name": full_domain})
        return data.get("result") or []

    async def create_a_record(self, full_domain: str, content: str) -> Dict[str, Any]:
        """
        Create an unproxied A record.

        Raises:
            DNSProviderException: On a non-2xx or unsuccessful provider response
        """
        payload = {
            "type": "A",
            "name": full_domain,
            "content": content,
            "ttl": self.settings.DNS_RECORD_TTL,
            "proxied": False,
        }
        data = await self._request("POST", self.records_url, json=payload)
        return data.get("result") or {}

    async def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        """
        Execute a single provider request and decode the v4 envelope.

        No retries: a failed call is reported to the caller as is.
        """
        if self.session is None:
            await self.initialize()

        start_time = time.perf_counter()
        async with self.session.request(
            method, url, headers=self.settings.get_cloudflare_headers(), **kwargs
        ) as response:
            duration = time.perf_counter() - start_time
            log_api_call(method, url, response.status, duration, provider=PROVIDER_CLOUDFLARE)

            try:
                response_data = await response.json()
            except (aiohttp.ContentTypeError, ValueError):
                response_data = {"raw": await response.text()}

            if not 200 <= response.status < 300:
                raise DNSProviderException(
                    f"Request failed with status code {response.status}",
                    api_response_code=response.status,
                    endpoint=url,
                    provider_errors=response_data,
                )

            if isinstance(response_data, dict) and response_data.get("success") is False:
                raise DNSProviderException(
                    f"Cloudflare API error: {self._format_errors(response_data.get('errors'))}",
                    api_response_code=response.status,
                    endpoint=url,
                    provider_errors=response_data,
                )

            return response_data

    @staticmethod
    def _format_errors(errors: Optional[List[Dict[str, Any]]]) -> str:
        if not errors:
            return "Unknown error"
        return ", ".join(f"{err.get('code', '?')}: {err.get('message', str(err))}" for err in errors)

    def __repr__(self):
        """Detailed string representation of the client."""
        return (
            f"CloudflareDNSClient("
            f"zone_id='{self.zone_id}', "
            f"configured={self.is_configured}, "
            f"initialized={self.session is not None})"
        )


# Global DNS client instance
_dns_client: Optional[CloudflareDNSClient] = None


def get_dns_client() -> CloudflareDNSClient:
    """
    Obtiene la instancia global del cliente DNS.

    Returns:
        CloudflareDNSClient: Cliente DNS configurado
    """
    global _dns_client
    if _dns_client is None:
        _dns_client = CloudflareDNSClient()
    return _dns_client


async def initialize_dns_client():
    """Inicializa la sesión HTTP del cliente DNS global."""
    await get_dns_client().initialize()


async def close_dns_client():
    """Cierra la sesión HTTP del cliente DNS global."""
    global _dns_client
    if _dns_client is not None:
        await _dns_client.close()
        _dns_client = None
