"""
Deployment Service
Project-level entry point: resolves the project's build and provider,
runs one orchestration and mirrors the outcome onto the project.
"""

from pathlib import Path
from typing import Callable, Optional

from src.api.base_provider import BaseHostingProvider
from src.api.provider_factory import get_hosting_provider
from src.models.deployment import Deployment, DeploymentResult, DeploymentStatus
from src.models.project import Project, ProjectStatus
from src.persistence.repository import Repository
from src.services.deployment_orchestrator import DeploymentOrchestrator
from src.services.readiness_poller import ReadinessPoller
from src.utils.config import get_settings, Settings
from src.utils.logger import get_logger
from src.utils.pagination import Page, paginate
from src.utils.validators import validate_slug, ValidationError

logger = get_logger(__name__)

ProviderFactory = Callable[[str, Settings], BaseHostingProvider]
SiteBuilder = Callable[[Project], Path]


class DeploymentServiceError(Exception):
    """Base exception for deployment service errors"""

    status_code = 400


class ProjectNotFoundError(DeploymentServiceError):
    """Raised when a project id does not exist"""

    status_code = 404


class BuildDirectoryResolver:
    """
    Default site builder: the template renderer writes each project's
    finalized build to ``<builds_dir>/<slug>``.
    """

    def __init__(self, builds_dir: Path):
        self.builds_dir = Path(builds_dir)

    def __call__(self, project: Project) -> Path:
        return self.builds_dir / project.slug


class DeploymentService:
    """
    Service for deploying projects and reading their deployment history.
    """

    def __init__(
        self,
        projects: Repository[Project],
        deployments: Repository[Deployment],
        provider_factory: ProviderFactory = get_hosting_provider,
        site_builder: Optional[SiteBuilder] = None,
        poller: Optional[ReadinessPoller] = None,
        config: Optional[Settings] = None
    ):
        """
        Initialize deployment service.

        Args:
            projects: Project repository
            deployments: Deployment repository
            provider_factory: Builds a provider for a deploy target
            site_builder: Returns the build directory for a project
            poller: Optional poller shared by every orchestration
            config: Optional Settings object. Defaults to get_settings().
        """
        self.config = config or get_settings()
        self.projects = projects
        self.deployments = deployments
        self.provider_factory = provider_factory
        self.site_builder = site_builder or BuildDirectoryResolver(Path(self.config.builds_dir))
        self.poller = poller

    def get_project(self, project_id: str) -> Project:
        project = self.projects.find_by_id(project_id)
        if project is None:
            raise ProjectNotFoundError(f"Project not found: {project_id}")
        return project

    def trigger_deploy(self, project_id: str, deployed_by: Optional[str] = None) -> DeploymentResult:
        """
        Deploy a project to its configured target.

        Args:
            project_id: Project to deploy
            deployed_by: Optional user id

        Returns:
            DeploymentResult

        Raises:
            ProjectNotFoundError: If the project does not exist
            DeploymentServiceError: If no deploy target is set or the slug is invalid
            ConfigurationError: If the target's token is missing
            OrchestratorError: If the pipeline fails
        """
        project = self.get_project(project_id)
        if project.deploy_target is None:
            raise DeploymentServiceError("No deploy target configured for this project")

        try:
            project_name = validate_slug(project.slug)
        except ValidationError as e:
            raise DeploymentServiceError(str(e)) from e

        provider = self.provider_factory(project.deploy_target.value, self.config)
        orchestrator = DeploymentOrchestrator(
            provider,
            self.deployments,
            poller=self.poller,
            config=self.config,
        )

        result = orchestrator.deploy(
            project_id=project.id,
            project_name=project_name,
            build_dir=self.site_builder(project),
            deployed_by=deployed_by,
        )

        # concurrent runs for one project are not serialized; last write wins
        self.projects.update(project.id, deploy_url=result.url, status=ProjectStatus.DEPLOYED)
        logger.info(f"✅ Project {project.name} deployed: {result.url}")
        return result

    def list_deployments(self, project_id: str, page: int = 1, limit: int = 20) -> Page:
        """Deployment history for a project, most recent first"""
        self.get_project(project_id)
        return paginate(
            self.deployments,
            page=page,
            limit=limit,
            order_by="created_at",
            descending=True,
            project_id=project_id,
        )

    def has_successful_deployment(self, project_id: str) -> bool:
        return self.deployments.count(project_id=project_id, status=DeploymentStatus.SUCCESS) > 0
