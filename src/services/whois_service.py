"""
WHOIS Service
Expiry and registrar lookups over RDAP
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

import requests

from src.models.domain import WhoisResult
from src.utils.config import get_settings, Settings
from src.utils.logger import get_logger
from src.utils.validators import validate_domain

logger = get_logger(__name__)


class WhoisClient:
    """
    RDAP client. Lookups are best effort: any failure yields an empty
    WhoisResult so registry writes never depend on the lookup succeeding.
    """

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or get_settings()
        self.base_url = self.config.rdap_base_url.rstrip("/")
        self.timeout = self.config.whois_timeout_seconds

    def lookup(self, domain: str) -> WhoisResult:
        """
        Fetch expiry date and registrar name for a domain.

        Args:
            domain: Registered domain name

        Returns:
            WhoisResult (fields are None when unknown)
        """
        domain = validate_domain(domain)
        logger.info(f"RDAP lookup for: {domain}")

        try:
            response = requests.get(
                f"{self.base_url}/domain/{domain}",
                headers={"Accept": "application/json"},
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.warning(f"RDAP lookup for {domain} failed: {str(e)}")
            return WhoisResult()

        if response.status_code != 200:
            logger.warning(f"RDAP lookup for {domain} returned HTTP {response.status_code}")
            return WhoisResult()

        try:
            data = response.json()
        except ValueError:
            logger.warning(f"RDAP lookup for {domain} returned invalid JSON")
            return WhoisResult()

        result = WhoisResult(
            expires_at=self._parse_expiry(data),
            registrar=self._parse_registrar(data),
        )
        logger.info(f"RDAP {domain}: expires={result.expires_at} registrar={result.registrar}")
        return result

    @staticmethod
    def _parse_expiry(data: Dict[str, Any]) -> Optional[datetime]:
        for event in data.get("events") or []:
            if event.get("eventAction") != "expiration" or not event.get("eventDate"):
                continue
            try:
                expires_at = datetime.fromisoformat(event["eventDate"].replace("Z", "+00:00"))
            except ValueError:
                return None
            if expires_at.tzinfo is None:
                expires_at = expires_at.replace(tzinfo=timezone.utc)
            return expires_at
        return None

    @staticmethod
    def _parse_registrar(data: Dict[str, Any]) -> Optional[str]:
        for entity in data.get("entities") or []:
            if "registrar" not in (entity.get("roles") or []):
                continue
            vcard = entity.get("vcardArray")
            # ["vcard", [["version", {}, "text", "4.0"], ["fn", {}, "text", "Name"], ...]]
            if not isinstance(vcard, list) or len(vcard) < 2 or not isinstance(vcard[1], list):
                continue
            for entry in vcard[1]:
                if isinstance(entry, list) and len(entry) > 3 and entry[0] == "fn" and isinstance(entry[3], str):
                    return entry[3]
        return None
