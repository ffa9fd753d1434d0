"""
In-memory store registry.

Authoritative collection of StoreDomain entities keyed by id. The map is
guarded by a re-entrant lock so it can be shared by request handlers and
deployment tasks, including from worker threads. Entities are handed out by
reference: lifecycle fields are mutated in place by the orchestrator.

Registration checks subdomain uniqueness and inserts inside a single
critical section, so two concurrent registrations of the same subdomain
cannot both succeed.
"""

import asyncio
import logging
import threading
from typing import Callable, Dict, List, Optional

from app.domain.models import StoreDomain
from app.utils.error_handler import SubdomainConflictException

logger = logging.getLogger(__name__)


class StoreRegistry:
    """Thread-safe map of store id -> StoreDomain with a unique subdomain index."""

    def __init__(self):
        self._lock = threading.RLock()
        self._stores: Dict[str, StoreDomain] = {}
        self._by_subdomain: Dict[str, str] = {}
        self._deployment_locks: Dict[str, asyncio.Lock] = {}

    def register(self, store: StoreDomain, suggest: Callable[[], str]) -> StoreDomain:
        """
        Insert a new store, enforcing subdomain uniqueness atomically.

        Args:
            store: Store built by the caller (status creating)
            suggest: Produces an alternative subdomain for the conflict response

        Returns:
            The registered store (same object)

        Raises:
            SubdomainConflictException: If the subdomain is already taken
        """
        with self._lock:
            if store.subdomain in self._by_subdomain:
                logger.info(f"Subdomain '{store.subdomain}' already taken")
                raise SubdomainConflictException(subdomain=store.subdomain, suggestion=suggest())

            if store.id in self._stores:
                raise ValueError(f"Store id {store.id} already registered")

            self._stores[store.id] = store
            self._by_subdomain[store.subdomain] = store.id

        logger.info(f"Registered store {store.id} ({store.subdomain})")
        return store

    def get(self, store_id: str) -> Optional[StoreDomain]:
        with self._lock:
            return self._stores.get(store_id)

    def find_by_subdomain(self, subdomain: str) -> Optional[StoreDomain]:
        with self._lock:
            store_id = self._by_subdomain.get(subdomain)
            return self._stores.get(store_id) if store_id else None

    def is_subdomain_taken(self, subdomain: str) -> bool:
        with self._lock:
            return subdomain in self._by_subdomain

    def list(self) -> List[StoreDomain]:
        """Snapshot of all stores; order is not meaningful."""
        with self._lock:
            return list(self._stores.values())

    def delete(self, store_id: str) -> bool:
        """
        Remove a store from the registry.

        DNS records are not touched; cleaning them up is an operator task.

        Returns:
            True if the store existed
        """
        with self._lock:
            store = self._stores.pop(store_id, None)
            if store is None:
                return False
            self._by_subdomain.pop(store.subdomain, None)
            self._deployment_locks.pop(store_id, None)

        logger.info(f"Deleted store {store_id} ({store.subdomain})")
        return True

    def deployment_lock(self, store_id: str) -> asyncio.Lock:
        """Per-store lock that serializes deployment runs for one store id."""
        with self._lock:
            lock = self._deployment_locks.get(store_id)
            if lock is None:
                lock = asyncio.Lock()
                self._deployment_locks[store_id] = lock
            return lock

    def count(self) -> int:
        with self._lock:
            return len(self._stores)

    def clear(self) -> None:
        with self._lock:
            self._stores.clear()
            self._by_subdomain.clear()
            self._deployment_locks.clear()


_registry: Optional[StoreRegistry] = None
_registry_lock = threading.Lock()


def get_store_registry() -> StoreRegistry:
    """
    Returns the process-wide registry instance.

    Returns:
        StoreRegistry: Shared registry
    """
    global _registry
    with _registry_lock:
        if _registry is None:
            _registry = StoreRegistry()
        return _registry
