"""
Domain models shared by the deployment pipeline, the domain registry and the web layer
"""

from src.models.artifacts import BuildArtifact, FileDigest, FileBundle
from src.models.deployment import (
    Deployment,
    DeploymentStatus,
    DeploymentState,
    PipelineStage,
    UploadOutcome,
    UploadResult,
    CreatedDeployment,
    DeploymentResult,
)
from src.models.domain import (
    DomainRecord,
    DomainStatus,
    ValueSource,
    DomainRecordCreate,
    DomainRecordUpdate,
    ProviderDomain,
    WhoisResult,
)
from src.models.project import Project, DeployTarget, ProjectStatus

__all__ = [
    # Build artifacts
    "BuildArtifact",
    "FileDigest",
    "FileBundle",
    # Deployments
    "Deployment",
    "DeploymentStatus",
    "DeploymentState",
    "PipelineStage",
    "UploadOutcome",
    "UploadResult",
    "CreatedDeployment",
    "DeploymentResult",
    # Domains
    "DomainRecord",
    "DomainStatus",
    "ValueSource",
    "DomainRecordCreate",
    "DomainRecordUpdate",
    "ProviderDomain",
    "WhoisResult",
    # Projects
    "Project",
    "DeployTarget",
    "ProjectStatus",
]
