"""
Domain registry records and the provider's live view of linked domains
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class DomainStatus(str, Enum):
    ACTIVE = "ACTIVE"
    EXPIRING_SOON = "EXPIRING_SOON"
    EXPIRED = "EXPIRED"


class ValueSource(str, Enum):
    """Where a registry value came from; USER values are never overwritten by WHOIS"""
    USER = "USER"
    WHOIS = "WHOIS"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive datetimes are taken to be UTC"""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class DomainRecord(BaseModel):
    """
    Dashboard-facing registration / billing record for a domain.

    ``status`` is a cache of ``compute_status(expires_at)`` taken at write
    time and recomputed whenever ``expires_at`` changes.
    """

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    domain: str
    client_id: str
    project_id: Optional[str] = None
    registrar: Optional[str] = None
    registrar_source: Optional[ValueSource] = None
    purchased_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    expires_at_source: Optional[ValueSource] = None
    auto_renew: bool = False
    purchase_cost: Optional[Decimal] = None
    renew_cost: Optional[Decimal] = None
    billed_amount: Optional[Decimal] = None
    notes: Optional[str] = None
    status: DomainStatus = DomainStatus.ACTIVE
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @field_validator("purchased_at", "expires_at")
    @classmethod
    def dates_are_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)


@dataclass(frozen=True)
class ProviderDomain:
    """A domain as the hosting provider sees it; read live, never stored"""
    name: str
    verified: bool
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class WhoisResult:
    """The only two facts consumed from a WHOIS / RDAP lookup"""
    expires_at: Optional[datetime] = None
    registrar: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.expires_at is None and self.registrar is None


class DomainRecordCreate(BaseModel):
    """Input for a new registry record; ``fetch_whois`` fills missing expiry/registrar"""

    domain: str
    client_id: str
    project_id: Optional[str] = None
    registrar: Optional[str] = None
    purchased_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    auto_renew: bool = False
    purchase_cost: Optional[Decimal] = None
    renew_cost: Optional[Decimal] = None
    billed_amount: Optional[Decimal] = None
    notes: Optional[str] = None
    fetch_whois: bool = False

    @field_validator("purchased_at", "expires_at")
    @classmethod
    def dates_are_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)


class DomainRecordUpdate(BaseModel):
    """Partial update; only fields that were explicitly set are applied"""

    domain: Optional[str] = None
    client_id: Optional[str] = None
    project_id: Optional[str] = None
    registrar: Optional[str] = None
    purchased_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    auto_renew: Optional[bool] = None
    purchase_cost: Optional[Decimal] = None
    renew_cost: Optional[Decimal] = None
    billed_amount: Optional[Decimal] = None
    notes: Optional[str] = None
    fetch_whois: bool = False

    @field_validator("purchased_at", "expires_at")
    @classmethod
    def dates_are_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)
