"""
Business logic and service layer
"""

from src.services.file_collector import collect_build_artifacts, exclude_artifacts, FileCollectionError
from src.services.content_hasher import hash_artifact, build_bundle
from src.services.readiness_poller import ReadinessPoller, PollOutcome
from src.services.deployment_orchestrator import DeploymentOrchestrator, OrchestratorError
from src.services.deployment_service import (
    DeploymentService,
    DeploymentServiceError,
    ProjectNotFoundError,
    BuildDirectoryResolver,
)
from src.services.domain_service import DomainService, DomainServiceError
from src.services.domain_record_service import (
    DomainRecordService,
    DomainRecordError,
    compute_status,
)
from src.services.whois_service import WhoisClient

__all__ = [
    # Build input
    "collect_build_artifacts",
    "exclude_artifacts",
    "FileCollectionError",
    "hash_artifact",
    "build_bundle",
    # Pipeline
    "ReadinessPoller",
    "PollOutcome",
    "DeploymentOrchestrator",
    "OrchestratorError",
    # Projects
    "DeploymentService",
    "DeploymentServiceError",
    "ProjectNotFoundError",
    "BuildDirectoryResolver",
    # Provider domains
    "DomainService",
    "DomainServiceError",
    # Domain registry
    "DomainRecordService",
    "DomainRecordError",
    "compute_status",
    "WhoisClient",
]
