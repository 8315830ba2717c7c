"""
Vercel Hosting API Client
Upload-then-create: every file goes to the blob store first, then the
deployment references the files by digest.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

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


class VercelClient(BaseHostingProvider):
    """
    Vercel REST API client for static deployments and project domains.
    """

    platform = "VERCEL"

    # readyState values that end polling with a failure
    FAILED_STATES = {"ERROR", "CANCELED"}

    def __init__(self, config: Optional[Settings] = None):
        """
        Initialize Vercel API client.

        Args:
            config: Optional Settings object. If None, loads from get_settings()
        """
        self.config = config or get_settings()
        super().__init__(
            token=self.config.vercel_token,
            base_url=self.config.vercel_api_url,
            timeout=self.config.http_timeout_seconds,
            upload_concurrency=self.config.upload_concurrency,
            error_body_limit=self.config.error_body_limit,
        )
        self.team_id = self.config.vercel_team_id or None

        logger.info(f"Vercel Client initialized - Base URL: {self.base_url}")
        if self.team_id:
            logger.info(f"Team: {self.team_id}")

    def _params(self, extra: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        params = dict(extra or {})
        if self.team_id:
            params["teamId"] = self.team_id
        return params or None

    # ------------------------------------------------------------------
    # Deployment pipeline
    # ------------------------------------------------------------------

    def upload(
        self,
        file: FileDigest,
        content: bytes,
        deployment_id: Optional[str] = None
    ) -> UploadResult:
        """
        Upload raw bytes to the blob store keyed by SHA-1.

        200 means stored, 409 means the blob already exists; both succeed.
        """
        response = self._send(
            "POST",
            f"{self.base_url}/v2/files",
            params=self._params(),
            data=content,
            headers={
                "Content-Type": "application/octet-stream",
                "Content-Length": str(file.byte_length),
                "x-vercel-digest": file.sha1,
            }
        )

        if response.status_code == 200:
            logger.debug(f"Stored {file.relative_path} ({file.sha1[:10]})")
            return UploadResult(file.relative_path, file.sha1, UploadOutcome.STORED)

        if response.status_code == 409:
            logger.debug(f"Already present {file.relative_path} ({file.sha1[:10]})")
            return UploadResult(file.relative_path, file.sha1, UploadOutcome.ALREADY_EXISTS)

        self._raise_for_status(response, UploadError, f"Upload of {file.relative_path}")
        # 2xx other than 200 is not part of the blob contract
        raise UploadError(
            f"Upload of {file.relative_path} failed: unexpected HTTP {response.status_code}",
            status_code=response.status_code
        )

    def create_deployment(self, project_name: str, files: List[FileDigest]) -> CreatedDeployment:
        """
        Create a deployment from previously uploaded files.

        Args:
            project_name: Vercel project name
            files: Digests of every file in the build

        Returns:
            CreatedDeployment with the raw ``https://<deployment host>`` URL
        """
        logger.info(f"Creating Vercel deployment for {project_name} ({len(files)} files)")

        payload = {
            "name": project_name,
            "files": [
                {"file": f.relative_path, "sha": f.sha1, "size": f.byte_length}
                for f in files
            ],
            "projectSettings": {"framework": None},
            "target": "production",
        }

        response = self._send(
            "POST",
            f"{self.base_url}/v13/deployments",
            params=self._params({"skipAutoDetectionConfirmation": 1}),
            json_data=payload
        )
        self._raise_for_status(response, DeploymentCreateError, "Vercel deployment")

        data = self._json(response, DeploymentCreateError, "Vercel deployment")
        deployment_id = data.get("id")
        host = data.get("url")
        if not deployment_id or not host:
            raise DeploymentCreateError(
                "Vercel deployment response is missing id or url",
                status_code=response.status_code,
                response_data=data
            )

        logger.info(f"✅ Deployment created: {deployment_id}")
        return CreatedDeployment(deployment_id=deployment_id, url=f"https://{host}")

    def publish(
        self,
        project_name: str,
        bundle: FileBundle,
        on_stage: StageCallback = _ignore_stage
    ) -> CreatedDeployment:
        on_stage(PipelineStage.UPLOADING)
        self._upload_all(bundle.unique(), bundle)

        on_stage(PipelineStage.CREATING)
        return self.create_deployment(project_name, list(bundle))

    def poll_status(self, deployment_id: str) -> DeploymentState:
        response = self._send(
            "GET",
            f"{self.base_url}/v13/deployments/{deployment_id}",
            params=self._params()
        )
        self._raise_for_status(response, DeploymentStatusError, "Vercel status check")

        data = self._json(response, DeploymentStatusError, "Vercel status check")
        ready_state = (data.get("readyState") or "").upper()
        logger.debug(f"Deployment {deployment_id} readyState={ready_state or 'UNKNOWN'}")

        if ready_state == "READY":
            return DeploymentState.READY
        if ready_state in self.FAILED_STATES:
            return DeploymentState.ERROR
        return DeploymentState.BUILDING

    def assign_alias(self, deployment_id: str, alias: str) -> str:
        logger.info(f"Assigning alias {alias} -> {deployment_id}")

        response = self._send(
            "POST",
            f"{self.base_url}/v2/deployments/{deployment_id}/aliases",
            params=self._params(),
            json_data={"alias": alias}
        )
        self._raise_for_status(response, AliasError, f"Alias {alias}")

        assigned = self._json(response, AliasError, f"Alias {alias}").get("alias") or alias
        return f"https://{assigned}"

    def alias_for(self, project_name: str) -> str:
        return f"{project_name}.vercel.app"

    # ------------------------------------------------------------------
    # Project domains
    # ------------------------------------------------------------------

    def list_domains(self, project_name: str) -> List[ProviderDomain]:
        logger.info(f"Fetching Vercel domains for {project_name}")

        response = self._send(
            "GET",
            f"{self.base_url}/v9/projects/{project_name}/domains",
            params=self._params()
        )
        self._raise_for_status(response, DomainError, f"List domains for {project_name}")

        data = self._json(response, DomainError, f"List domains for {project_name}")
        domains = [self._to_domain(item) for item in data.get("domains") or []]
        logger.info(f"Found {len(domains)} domains")
        return domains

    def add_domain(self, project_name: str, domain: str) -> ProviderDomain:
        logger.info(f"Adding domain {domain} to Vercel project {project_name}")

        response = self._send(
            "POST",
            f"{self.base_url}/v10/projects/{project_name}/domains",
            params=self._params(),
            json_data={"name": domain}
        )
        self._raise_for_status(response, DomainError, f"Add domain {domain}")

        return self._to_domain(self._json(response, DomainError, f"Add domain {domain}"))

    def remove_domain(self, project_name: str, domain: str) -> None:
        logger.info(f"Removing domain {domain} from Vercel project {project_name}")

        response = self._send(
            "DELETE",
            f"{self.base_url}/v9/projects/{project_name}/domains/{domain}",
            params=self._params()
        )
        self._raise_for_status(response, DomainError, f"Remove domain {domain}")

    @staticmethod
    def _to_domain(item: Dict[str, Any]) -> ProviderDomain:
        created_at = None
        if item.get("createdAt"):
            # Vercel timestamps are epoch milliseconds
            created_at = datetime.fromtimestamp(item["createdAt"] / 1000, tz=timezone.utc)
        return ProviderDomain(
            name=item.get("name", ""),
            verified=bool(item.get("verified", False)),
            created_at=created_at,
        )
