"""
Domain Record Service
Dashboard-facing domain registry: registrar, expiry and billing, with a
status derived from the expiry date.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

from src.models.domain import (
    DomainRecord,
    DomainRecordCreate,
    DomainRecordUpdate,
    DomainStatus,
    ValueSource,
    WhoisResult,
    as_utc,
)
from src.persistence.repository import Repository
from src.services.whois_service import WhoisClient
from src.utils.config import get_settings, Settings
from src.utils.logger import get_logger
from src.utils.pagination import Page, MAX_LIMIT
from src.utils.validators import validate_domain, ValidationError

logger = get_logger(__name__)

EXPIRING_SOON_DAYS = 30

SORTABLE_FIELDS = {"domain", "expires_at", "created_at", "updated_at", "status", "registrar"}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def compute_status(
    expires_at: Optional[datetime],
    now: Optional[datetime] = None,
    window_days: int = EXPIRING_SOON_DAYS
) -> DomainStatus:
    """
    Derive a domain's status from its expiry.

    No expiry is ACTIVE; at or past expiry is EXPIRED; within
    ``window_days`` of expiry is EXPIRING_SOON; otherwise ACTIVE. For a
    fixed expiry the result only moves forward as ``now`` advances.
    """
    if expires_at is None:
        return DomainStatus.ACTIVE

    now = as_utc(now or _utcnow())
    expires_at = as_utc(expires_at)

    if expires_at <= now:
        return DomainStatus.EXPIRED
    if expires_at <= now + timedelta(days=window_days):
        return DomainStatus.EXPIRING_SOON
    return DomainStatus.ACTIVE


class DomainRecordError(Exception):
    """Base exception for domain registry errors"""

    def __init__(self, message: str, status_code: int = 400):
        self.status_code = status_code
        super().__init__(message)


class DomainRecordService:
    """
    CRUD over DomainRecord plus WHOIS refresh.

    WHOIS only fills gaps: an expiry or registrar typed in by a user is
    never replaced by a lookup.
    """

    def __init__(
        self,
        records: Repository[DomainRecord],
        whois: Optional[WhoisClient] = None,
        config: Optional[Settings] = None,
        clock: Callable[[], datetime] = _utcnow
    ):
        self.config = config or get_settings()
        self.records = records
        self.whois = whois or WhoisClient(self.config)
        self.clock = clock

    def compute_status(self, expires_at: Optional[datetime]) -> DomainStatus:
        return compute_status(expires_at, now=self.clock(), window_days=self.config.expiring_soon_days)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, record_id: str) -> DomainRecord:
        record = self.records.find_by_id(record_id)
        if record is None:
            raise DomainRecordError("Domain record not found", status_code=404)
        return record

    def list(
        self,
        page: int = 1,
        limit: int = 20,
        search: Optional[str] = None,
        status: Optional[DomainStatus] = None,
        client_id: Optional[str] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc"
    ) -> Page:
        """
        Filter, search and paginate registry records.

        ``search`` is a case-insensitive substring match on domain and registrar.
        """
        if sort_by not in SORTABLE_FIELDS:
            raise DomainRecordError(f"Cannot sort by {sort_by}")

        filters: Dict[str, Any] = {}
        if status is not None:
            filters["status"] = DomainStatus(status)
        if client_id:
            filters["client_id"] = client_id

        matches = self.records.find_many(
            order_by=sort_by,
            descending=sort_order.lower() == "desc",
            **filters
        )

        if search:
            needle = search.lower()
            matches = [
                record for record in matches
                if needle in record.domain.lower()
                or (record.registrar and needle in record.registrar.lower())
            ]

        page = max(1, page)
        limit = min(max(1, limit), MAX_LIMIT)
        start = (page - 1) * limit
        return Page(data=matches[start:start + limit], total=len(matches), page=page, limit=limit)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, data: DomainRecordCreate) -> DomainRecord:
        """
        Create a registry record; status is computed from the resulting expiry.

        Raises:
            DomainRecordError: If the domain name is invalid
        """
        domain = self._validate_domain(data.domain)

        expires_at = data.expires_at
        expires_source = ValueSource.USER if expires_at else None
        registrar = data.registrar
        registrar_source = ValueSource.USER if registrar else None

        if data.fetch_whois:
            whois = self.whois.lookup(domain)
            if whois.expires_at and not expires_at:
                expires_at, expires_source = whois.expires_at, ValueSource.WHOIS
            if whois.registrar and not registrar:
                registrar, registrar_source = whois.registrar, ValueSource.WHOIS

        record = self.records.create(DomainRecord(
            domain=domain,
            client_id=data.client_id,
            project_id=data.project_id,
            registrar=registrar,
            registrar_source=registrar_source,
            purchased_at=data.purchased_at,
            expires_at=expires_at,
            expires_at_source=expires_source,
            auto_renew=data.auto_renew,
            purchase_cost=data.purchase_cost,
            renew_cost=data.renew_cost,
            billed_amount=data.billed_amount,
            notes=data.notes,
            status=self.compute_status(expires_at),
        ))

        logger.info(f"Created domain record for {record.domain} ({record.status.value})")
        return record

    def update(self, record_id: str, data: DomainRecordUpdate) -> DomainRecord:
        """
        Apply the fields present in ``data``. Touching ``expires_at``
        recomputes the status.
        """
        record = self.get(record_id)
        provided = data.model_fields_set - {"fetch_whois"}
        changes: Dict[str, Any] = {}

        for field in provided:
            changes[field] = getattr(data, field)

        # required fields cannot be cleared
        for required in ("domain", "client_id", "auto_renew"):
            if required in changes and changes[required] is None:
                del changes[required]

        if "domain" in changes:
            changes["domain"] = self._validate_domain(changes["domain"])
        if "registrar" in changes:
            changes["registrar_source"] = ValueSource.USER if changes["registrar"] else None
        if "expires_at" in changes:
            changes["expires_at_source"] = ValueSource.USER if changes["expires_at"] else None

        if data.fetch_whois:
            merged = record.model_copy(update=changes)
            changes.update(self._whois_gap_fill(merged, self.whois.lookup(merged.domain)))

        if "expires_at" in changes:
            changes["status"] = self.compute_status(changes["expires_at"])

        changes["updated_at"] = self.clock()
        updated = self.records.update(record_id, **changes)

        logger.info(f"Updated domain record for {updated.domain}")
        return updated

    def remove(self, record_id: str) -> DomainRecord:
        record = self.get(record_id)
        self.records.delete(record_id)
        logger.info(f"Deleted domain record for {record.domain}")
        return record

    def refresh_whois(self, record_id: str) -> DomainRecord:
        """
        Re-fetch expiry and registrar; fills only values not entered by a user.
        Status is always recomputed.
        """
        record = self.get(record_id)
        changes = self._whois_gap_fill(record, self.whois.lookup(record.domain))

        expires_at = changes.get("expires_at", record.expires_at)
        changes["status"] = self.compute_status(expires_at)
        changes["updated_at"] = self.clock()

        updated = self.records.update(record_id, **changes)
        logger.info(f"Refreshed WHOIS for {updated.domain} ({updated.status.value})")
        return updated

    def refresh_statuses(self) -> int:
        """
        Recompute every record's cached status against the current time.

        Returns:
            Number of records whose status changed
        """
        changed = 0
        for record in self.records.find_many():
            status = self.compute_status(record.expires_at)
            if status is not record.status:
                self.records.update(record.id, status=status, updated_at=self.clock())
                changed += 1

        logger.info(f"Status refresh complete: {changed} records changed")
        return changed

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_domain(domain: str) -> str:
        try:
            return validate_domain(domain)
        except ValidationError as e:
            raise DomainRecordError(f"Invalid domain format: {str(e)}") from e

    @staticmethod
    def _whois_gap_fill(record: DomainRecord, whois: WhoisResult) -> Dict[str, Any]:
        changes: Dict[str, Any] = {}

        if whois.expires_at and (record.expires_at is None or record.expires_at_source is ValueSource.WHOIS):
            changes["expires_at"] = whois.expires_at
            changes["expires_at_source"] = ValueSource.WHOIS
        if whois.registrar and (not record.registrar or record.registrar_source is ValueSource.WHOIS):
            changes["registrar"] = whois.registrar
            changes["registrar_source"] = ValueSource.WHOIS

        return changes
