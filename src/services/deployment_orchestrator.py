"""
Deployment Orchestrator
Drives one static-site deployment end to end against a single hosting
provider: collect → hash → upload/create → poll → alias, and records the
run as exactly one Deployment row.
"""

import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from src.api.base_provider import BaseHostingProvider
from src.api.exceptions import APIError
from src.models.deployment import (
    Deployment,
    DeploymentResult,
    DeploymentState,
    DeploymentStatus,
    PipelineStage,
)
from src.persistence.repository import Repository
from src.services.content_hasher import build_bundle
from src.services.file_collector import collect_build_artifacts, exclude_artifacts
from src.services.readiness_poller import ReadinessPoller
from src.utils.config import get_settings, Settings
from src.utils.logger import get_logger, truncate

logger = get_logger(__name__)


class OrchestratorError(Exception):
    """Raised when any unrecoverable step of the deployment pipeline fails"""

    def __init__(self, message: str, stage: PipelineStage, record: Optional[Deployment] = None):
        self.stage = stage
        self.record = record
        super().__init__(message)


class DeploymentOrchestrator:
    """
    End-to-end deployment pipeline orchestrator.

    Runs these stages in order:

    1. COLLECTING — read the build directory, drop internal sidecar files
    2. HASHING    — SHA-1 every file
    3. UPLOADING / CREATING — ordering owned by the provider adapter
    4. POLLING    — bounded readiness polling; a timeout is not a failure
    5. ALIASING   — best effort; falls back to the raw deployment URL
    6. DONE       — SUCCESS row with the final URL

    Any other failure ends in FAILED: the row is updated with the error
    text and OrchestratorError is raised. Provider and repository are
    passed in, so one orchestrator serves exactly one provider.
    """

    def __init__(
        self,
        provider: BaseHostingProvider,
        deployments: Repository[Deployment],
        poller: Optional[ReadinessPoller] = None,
        config: Optional[Settings] = None
    ):
        """
        Args:
            provider: Hosting provider adapter
            deployments: Repository the Deployment rows are written to
            poller: Optional ReadinessPoller. Built from config when omitted.
            config: Optional Settings object. Defaults to get_settings().
        """
        self.config = config or get_settings()
        self.provider = provider
        self.deployments = deployments
        self.poller = poller or ReadinessPoller(
            interval_seconds=self.config.poll_interval_seconds,
            max_wait_seconds=self.config.poll_timeout_seconds,
        )

    def deploy(
        self,
        project_id: str,
        project_name: str,
        build_dir: Path,
        deployed_by: Optional[str] = None
    ) -> DeploymentResult:
        """
        Run the complete deployment pipeline.

        Args:
            project_id: Owning project id (stored on the Deployment row)
            project_name: Provider-side project / site name
            build_dir: Finalized build directory from the template renderer
            deployed_by: Optional user id recorded on the row

        Returns:
            DeploymentResult with the final URL and provider deployment id

        Raises:
            OrchestratorError: If any unrecoverable step fails. The FAILED
                row is attached as ``error.record``.
        """
        platform = self.provider.platform or self.provider.get_provider_name().upper()
        stages: List[PipelineStage] = []

        def enter(stage: PipelineStage) -> None:
            stages.append(stage)
            logger.info(f"── {stage.value}")

        record = self.deployments.create(Deployment(
            project_id=project_id,
            status=DeploymentStatus.BUILDING,
            platform=platform,
            deployed_by=deployed_by,
        ))

        logger.info(f"🚀 Starting {platform} deployment for {project_name}")
        logger.info(f"   Build:      {build_dir}")
        logger.info(f"   Deployment: {record.id} ({record.version})")

        started = time.monotonic()
        metadata: Dict[str, Any] = {}

        try:
            enter(PipelineStage.COLLECTING)
            artifacts = exclude_artifacts(
                collect_build_artifacts(Path(build_dir)),
                self.config.excluded_build_files,
            )
            if not artifacts:
                raise OrchestratorError(f"Build directory is empty: {build_dir}", PipelineStage.COLLECTING)

            enter(PipelineStage.HASHING)
            bundle = build_bundle(artifacts)
            metadata["files"] = len(bundle)
            metadata["bytes"] = bundle.total_bytes

            created = self.provider.publish(project_name, bundle, on_stage=enter)
            metadata["deploymentId"] = created.deployment_id
            metadata["rawUrl"] = created.url
            if created.required:
                metadata["required"] = len(created.required)

            enter(PipelineStage.POLLING)
            outcome = self.poller.poll(created.deployment_id, self.provider.poll_status)
            metadata["pollAttempts"] = outcome.attempts
            metadata["timedOut"] = outcome.timed_out

            if outcome.state is DeploymentState.ERROR:
                raise OrchestratorError(
                    f"{platform} reported a failed build for {created.deployment_id}",
                    PipelineStage.POLLING,
                )
            if outcome.timed_out:
                # the alias can still land once the provider finishes
                logger.warning("Proceeding to aliasing without a READY state")

            enter(PipelineStage.ALIASING)
            alias = self.provider.alias_for(project_name)
            url, aliased = self._assign_alias(created.deployment_id, alias, created.url)
            metadata["alias"] = alias if aliased else None

            enter(PipelineStage.DONE)

        except Exception as exc:
            failed_at = stages[-1] if stages else PipelineStage.COLLECTING
            stages.append(PipelineStage.FAILED)
            elapsed_ms = int((time.monotonic() - started) * 1000)
            message = truncate(str(exc), self.config.error_body_limit)

            logger.error(f"❌ Deployment failed during {failed_at.value}: {message}")

            metadata["stages"] = [stage.value for stage in stages]
            metadata["failedStage"] = failed_at.value
            failed = self.deployments.update(
                record.id,
                status=DeploymentStatus.FAILED,
                build_time_ms=elapsed_ms,
                metadata=metadata,
                logs=f"Deployment failed after {elapsed_ms}ms during {failed_at.value}: {message}",
            )
            raise OrchestratorError(message, failed_at, record=failed) from exc

        elapsed_ms = int((time.monotonic() - started) * 1000)
        metadata["stages"] = [stage.value for stage in stages]

        done = self.deployments.update(
            record.id,
            status=DeploymentStatus.SUCCESS,
            deploy_url=url,
            build_time_ms=elapsed_ms,
            metadata=metadata,
            logs=f"Build completed in {elapsed_ms}ms. Deployed to {url}",
        )

        logger.info(f"🎉 Site is live at {url}")
        return DeploymentResult(
            url=url,
            deployment_id=created.deployment_id,
            record=done,
            aliased=aliased,
            timed_out=outcome.timed_out,
        )

    def _assign_alias(self, deployment_id: str, alias: str, raw_url: str):
        """Return ``(url, aliased)``; never fails the deployment"""
        try:
            url = self.provider.assign_alias(deployment_id, alias)
        except APIError as e:
            logger.warning(f"⚠️  Alias {alias} not assigned, using raw URL: {e}")
            return raw_url, False

        if not url:
            return raw_url, False
        return url, True
