"""
Store domain model (Aggregate Root).

Represents a tenant store addressed by a subdomain, together with the
state machine that governs its deployment lifecycle:

    creating -> configuring -> active | failed

`active` and `failed` are terminal; no method moves a store out of them.
"""

import math
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum


class StoreStatus(str, Enum):
    """Deployment lifecycle states of a store."""

    CREATING = "creating"
    CONFIGURING = "configuring"
    ACTIVE = "active"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (StoreStatus.ACTIVE, StoreStatus.FAILED)


class InvalidStatusTransition(ValueError):
    """Raised when a lifecycle method is called from the wrong state."""

    def __init__(self, store_id: str, current: StoreStatus, target: StoreStatus):
        super().__init__(f"Store {store_id} cannot move from '{current.value}' to '{target.value}'")
        self.store_id = store_id
        self.current = current
        self.target = target


@dataclass(frozen=True)
class Product:
    """Catalog entry shown on a store's public page."""

    name: str
    description: str
    price: Decimal

    def to_dict(self) -> dict:
        return {"name": self.name, "description": self.description, "price": float(self.price)}


def default_catalog() -> list[Product]:
    """Illustrative catalog attached to every new store."""
    return [
        Product("Sample Product 1", "Amazing product for your needs", Decimal("29.99")),
        Product("Sample Product 2", "Another great product", Decimal("39.99")),
        Product("Sample Product 3", "Premium quality item", Decimal("49.99")),
    ]


def elapsed_seconds(start: datetime, end: datetime) -> int:
    """Whole seconds between two instants, rounding halves up."""
    return math.floor((end - start).total_seconds() + 0.5)


@dataclass
class StoreDomain:
    """
    Domain model representing a store.

    Identity fields (id, name, subdomain, full_domain) are fixed at creation.
    Lifecycle fields are mutated in place, only through the methods below,
    by the deployment orchestrator.

    Attributes:
        name: Display name supplied by the caller
        subdomain: Lowercase slug, unique across stores
        full_domain: subdomain + "." + main domain
        id: Opaque identifier (UUID4 string)
        status: Current lifecycle state
        created_at: Creation timestamp (UTC)
        public_url: Set on transition to active
        dns_record_id: Provider record id or "simulated"; set on DNS success
        error_message: Set on transition to failed
        deployment_logs: Append-only progress messages
        deployment_started / deployment_completed / deployment_failed: Timestamps, each set once
        products: Catalog shown on the public page
    """

    name: str
    subdomain: str
    full_domain: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: StoreStatus = StoreStatus.CREATING
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    public_url: str | None = None
    dns_record_id: str | None = None
    error_message: str | None = None
    deployment_logs: list[str] = field(default_factory=list)
    deployment_started: datetime | None = None
    deployment_completed: datetime | None = None
    deployment_failed: datetime | None = None
    products: list[Product] = field(default_factory=default_catalog)

    def __post_init__(self) -> None:
        """Validate store data after initialization."""
        if not self.name:
            raise ValueError("Store name is required")
        if not self.subdomain or self.subdomain != self.subdomain.lower():
            raise ValueError(f"Invalid subdomain: {self.subdomain!r}")

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def begin_configuring(self, started_at: datetime | None = None) -> None:
        """Move creating -> configuring and start a fresh deployment log."""
        if self.status is not StoreStatus.CREATING:
            raise InvalidStatusTransition(self.id, self.status, StoreStatus.CONFIGURING)

        self.status = StoreStatus.CONFIGURING
        self.deployment_started = started_at or datetime.now(UTC)
        self.deployment_logs = []

    def append_log(self, message: str) -> None:
        self.deployment_logs.append(message)

    def record_dns_record(self, record_id: str) -> None:
        """Store the DNS record id returned by the provisioning step."""
        if self.status is not StoreStatus.CONFIGURING:
            raise InvalidStatusTransition(self.id, self.status, StoreStatus.CONFIGURING)
        self.dns_record_id = record_id

    def mark_active(self, public_url: str, completed_at: datetime | None = None) -> None:
        """Move configuring -> active."""
        if self.status is not StoreStatus.CONFIGURING:
            raise InvalidStatusTransition(self.id, self.status, StoreStatus.ACTIVE)

        self.status = StoreStatus.ACTIVE
        self.public_url = public_url
        self.deployment_completed = self._not_before_start(completed_at or datetime.now(UTC))

    def mark_failed(self, error_message: str, failed_at: datetime | None = None) -> None:
        """Move configuring -> failed, capturing the error."""
        if self.status is not StoreStatus.CONFIGURING:
            raise InvalidStatusTransition(self.id, self.status, StoreStatus.FAILED)

        self.status = StoreStatus.FAILED
        self.error_message = error_message
        self.deployment_failed = self._not_before_start(failed_at or datetime.now(UTC))
        self.append_log(f"Deployment failed: {error_message}")

    def deployment_time_seconds(self, now: datetime | None = None) -> int | None:
        """
        Elapsed deployment time in whole seconds.

        Measured up to completion, else failure, else `now`; None when the
        deployment has not started.
        """
        if self.deployment_started is None:
            return None
        end = self.deployment_completed or self.deployment_failed or now or datetime.now(UTC)
        return elapsed_seconds(self.deployment_started, end)

    def _not_before_start(self, moment: datetime) -> datetime:
        # Clock skew must not produce an end time before the start
        if self.deployment_started and moment < self.deployment_started:
            return self.deployment_started
        return moment
