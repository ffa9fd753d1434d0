"""
Módulo de acceso a datos del sistema de tiendas.

Separación de responsabilidades:

- StoreRegistry: Registro en memoria de tiendas (fuente de verdad del ciclo de vida)
- CloudflareDNSClient: Aprovisionamiento de registros DNS (o simulación sin credenciales)
"""

from app.db.cloudflare_client import (
    CloudflareDNSClient,
    DNSRecordResult,
    close_dns_client,
    get_dns_client,
    initialize_dns_client,
)
from app.db.store_registry import StoreRegistry, get_store_registry

__all__ = [
    "StoreRegistry",
    "get_store_registry",
    "CloudflareDNSClient",
    "DNSRecordResult",
    "get_dns_client",
    "initialize_dns_client",
    "close_dns_client",
]
