"""
Netlify Hosting API Client
Create-then-upload: the deploy declares the full digest map first and
Netlify answers with the digests it still needs.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from src.api.base_provider import BaseHostingProvider, StageCallback, _ignore_stage
from src.api.exceptions import (
    AliasError,
    DeploymentCreateError,
    DeploymentStatusError,
    DomainError,
    UploadError,
)
from src.models.artifacts import FileBundle, FileDigest
from src.models.deployment import (
    CreatedDeployment,
    DeploymentState,
    PipelineStage,
    UploadOutcome,
    UploadResult,
)
from src.models.domain import ProviderDomain
from src.utils.config import get_settings, Settings
from src.utils.logger import get_logger

logger = get_logger(__name__)


class NetlifyClient(BaseHostingProvider):
    """
    Netlify REST API client for digest-based deploys and site domains.
    """

    platform = "NETLIFY"

    def __init__(self, config: Optional[Settings] = None):
        """
        Initialize Netlify API client.

        Args:
            config: Optional Settings object. If None, loads from get_settings()
        """
        self.config = config or get_settings()
        super().__init__(
            token=self.config.netlify_token,
            base_url=self.config.netlify_api_url,
            timeout=self.config.http_timeout_seconds,
            upload_concurrency=self.config.upload_concurrency,
            error_body_limit=self.config.error_body_limit,
        )
        self._site_ids: Dict[str, str] = {}
        self._deploy_sites: Dict[str, str] = {}

        logger.info(f"Netlify Client initialized - Base URL: {self.base_url}")

    # ------------------------------------------------------------------
    # Sites
    # ------------------------------------------------------------------

    def _find_site(self, site_name: str) -> Optional[Dict[str, Any]]:
        response = self._send("GET", f"{self.base_url}/sites", params={"name": site_name})
        self._raise_for_status(response, DeploymentCreateError, f"Site lookup for {site_name}")

        # the name filter is a substring match
        sites = self._json(response, DeploymentCreateError, f"Site lookup for {site_name}", expected=list)
        for site in sites:
            if site.get("name") == site_name:
                self._site_ids[site_name] = site["id"]
                return site
        return None

    def _get_or_create_site_id(self, site_name: str) -> str:
        if site_name in self._site_ids:
            return self._site_ids[site_name]

        site = self._find_site(site_name)
        if site:
            return site["id"]

        logger.info(f"Creating Netlify site: {site_name}")
        response = self._send("POST", f"{self.base_url}/sites", json_data={"name": site_name})
        self._raise_for_status(response, DeploymentCreateError, f"Create site {site_name}")

        site_id = self._json(response, DeploymentCreateError, f"Create site {site_name}").get("id")
        if not site_id:
            raise DeploymentCreateError(f"Create site {site_name} failed: response has no id")
        self._site_ids[site_name] = site_id
        return site_id

    def _require_site(self, site_name: str) -> Dict[str, Any]:
        try:
            site = self._find_site(site_name)
        except DeploymentCreateError as e:
            raise DomainError(e.message, status_code=e.status_code, response_data=e.response_data) from e
        if site is None:
            raise DomainError(f"Netlify site not found: {site_name}", status_code=404)
        return site

    # ------------------------------------------------------------------
    # Deployment pipeline
    # ------------------------------------------------------------------

    def create_deployment(self, project_name: str, files: List[FileDigest]) -> CreatedDeployment:
        """
        Declare the ``{"/path": sha1}`` map for a new deploy.

        Returns:
            CreatedDeployment whose ``required`` lists the digests Netlify
            does not hold yet, restricted to digests that were submitted
        """
        site_id = self._get_or_create_site_id(project_name)
        manifest = {f.manifest_path: f.sha1 for f in files}

        logger.info(f"Creating Netlify deploy for {project_name} ({len(manifest)} files declared)")

        response = self._send(
            "POST",
            f"{self.base_url}/sites/{site_id}/deploys",
            json_data={"files": manifest}
        )
        self._raise_for_status(response, DeploymentCreateError, "Netlify deploy")

        data = self._json(response, DeploymentCreateError, "Netlify deploy")
        deployment_id = data.get("id")
        if not deployment_id:
            raise DeploymentCreateError(
                "Netlify deploy response is missing id",
                status_code=response.status_code,
                response_data=data
            )

        submitted = set(manifest.values())
        required = []
        for sha in data.get("required") or []:
            if sha not in submitted:
                logger.warning(f"Ignoring undeclared digest requested by Netlify: {sha}")
                continue
            if sha not in required:
                required.append(sha)

        self._deploy_sites[deployment_id] = site_id
        url = (
            data.get("deploy_ssl_url")
            or data.get("ssl_url")
            or data.get("url")
            or f"https://{project_name}.netlify.app"
        )

        logger.info(f"✅ Deploy created: {deployment_id} ({len(required)} files required)")
        return CreatedDeployment(deployment_id=deployment_id, url=url, required=required)

    def upload(
        self,
        file: FileDigest,
        content: bytes,
        deployment_id: Optional[str] = None
    ) -> UploadResult:
        """Upload one required file to an existing deploy, keyed by path"""
        if not deployment_id:
            raise ValueError("Netlify uploads need the deploy id they belong to")

        response = self._send(
            "PUT",
            f"{self.base_url}/deploys/{deployment_id}/files/{quote(file.relative_path, safe='/')}",
            data=content,
            headers={"Content-Type": "application/octet-stream"}
        )

        if response.status_code == 409:
            return UploadResult(file.relative_path, file.sha1, UploadOutcome.ALREADY_EXISTS)

        self._raise_for_status(response, UploadError, f"Upload of {file.relative_path}")
        logger.debug(f"Stored {file.relative_path} ({file.sha1[:10]})")
        return UploadResult(file.relative_path, file.sha1, UploadOutcome.STORED)

    def publish(
        self,
        project_name: str,
        bundle: FileBundle,
        on_stage: StageCallback = _ignore_stage
    ) -> CreatedDeployment:
        on_stage(PipelineStage.CREATING)
        created = self.create_deployment(project_name, list(bundle))

        on_stage(PipelineStage.UPLOADING)
        required_files = [bundle.by_sha(sha) for sha in created.required]
        self._upload_all(required_files, bundle, deployment_id=created.deployment_id)

        skipped = len(bundle.unique()) - len(required_files)
        if skipped:
            logger.info(f"Skipped {skipped} files Netlify already holds")
        return created

    def poll_status(self, deployment_id: str) -> DeploymentState:
        response = self._send("GET", f"{self.base_url}/deploys/{deployment_id}")
        self._raise_for_status(response, DeploymentStatusError, "Netlify status check")

        data = self._json(response, DeploymentStatusError, "Netlify status check")
        state = (data.get("state") or "").lower()
        logger.debug(f"Deploy {deployment_id} state={state or 'unknown'}")

        if state == "ready":
            return DeploymentState.READY
        if state == "error":
            return DeploymentState.ERROR
        return DeploymentState.BUILDING

    def assign_alias(self, deployment_id: str, alias: str) -> str:
        """Publish the deploy on its site so the site hostname serves it"""
        site_id = self._deploy_sites.get(deployment_id)
        if site_id is None:
            response = self._send("GET", f"{self.base_url}/deploys/{deployment_id}")
            self._raise_for_status(response, AliasError, f"Alias {alias}")
            site_id = self._json(response, AliasError, f"Alias {alias}").get("site_id")
            if not site_id:
                raise AliasError(f"Alias {alias} failed: deploy {deployment_id} has no site")

        logger.info(f"Publishing deploy {deployment_id} as {alias}")
        response = self._send(
            "POST",
            f"{self.base_url}/sites/{site_id}/deploys/{deployment_id}/restore"
        )
        self._raise_for_status(response, AliasError, f"Alias {alias}")

        published = self._json(response, AliasError, f"Alias {alias}")
        return published.get("ssl_url") or f"https://{alias}"

    def alias_for(self, project_name: str) -> str:
        return f"{project_name}.netlify.app"

    # ------------------------------------------------------------------
    # Site domains
    # ------------------------------------------------------------------

    def _certified_domains(self, site_id: str) -> List[str]:
        response = self._send("GET", f"{self.base_url}/sites/{site_id}/ssl")
        if response.status_code == 404:
            return []
        self._raise_for_status(response, DomainError, "SSL lookup")
        return list(self._json(response, DomainError, "SSL lookup").get("domains") or [])

    def list_domains(self, project_name: str) -> List[ProviderDomain]:
        logger.info(f"Fetching Netlify domains for {project_name}")

        site = self._require_site(project_name)
        names = self._site_domain_names(site)
        if not names:
            return []

        certified = set(self._certified_domains(site["id"]))
        created_at = self._parse_timestamp(site.get("updated_at"))
        domains = [ProviderDomain(name=name, verified=name in certified, created_at=created_at) for name in names]
        logger.info(f"Found {len(domains)} domains")
        return domains

    def add_domain(self, project_name: str, domain: str) -> ProviderDomain:
        logger.info(f"Adding domain {domain} to Netlify site {project_name}")

        site = self._require_site(project_name)
        if domain in self._site_domain_names(site):
            logger.info(f"{domain} is already linked to {project_name}")
            return ProviderDomain(name=domain, verified=False)

        if not site.get("custom_domain"):
            changes = {"custom_domain": domain}
        else:
            changes = {"domain_aliases": list(site.get("domain_aliases") or []) + [domain]}

        response = self._send("PATCH", f"{self.base_url}/sites/{site['id']}", json_data=changes)
        self._raise_for_status(response, DomainError, f"Add domain {domain}")

        updated = self._json(response, DomainError, f"Add domain {domain}")
        return ProviderDomain(
            name=domain,
            verified=False,
            created_at=self._parse_timestamp(updated.get("updated_at")),
        )

    def remove_domain(self, project_name: str, domain: str) -> None:
        logger.info(f"Removing domain {domain} from Netlify site {project_name}")

        site = self._require_site(project_name)
        aliases = list(site.get("domain_aliases") or [])

        if site.get("custom_domain") == domain:
            changes = {"custom_domain": None}
        elif domain in aliases:
            changes = {"domain_aliases": [alias for alias in aliases if alias != domain]}
        else:
            raise DomainError(f"{domain} is not linked to {project_name}", status_code=404)

        response = self._send("PATCH", f"{self.base_url}/sites/{site['id']}", json_data=changes)
        self._raise_for_status(response, DomainError, f"Remove domain {domain}")

    @staticmethod
    def _site_domain_names(site: Dict[str, Any]) -> List[str]:
        names = []
        if site.get("custom_domain"):
            names.append(site["custom_domain"])
        names.extend(site.get("domain_aliases") or [])
        return names

    @staticmethod
    def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
        if not value:
            return None
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
