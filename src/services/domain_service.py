"""
Domain Service
Provider-side custom domain management for deployed projects.
Independent of the domain registry: a provider domain may exist without
a DomainRecord and the other way round.
"""

from typing import List, Optional

from src.api.base_provider import BaseHostingProvider
from src.api.exceptions import APIError
from src.api.provider_factory import get_hosting_provider
from src.models.deployment import Deployment, DeploymentStatus
from src.models.domain import ProviderDomain
from src.models.project import Project
from src.persistence.repository import Repository
from src.services.deployment_service import ProviderFactory
from src.utils.config import get_settings, Settings
from src.utils.logger import get_logger
from src.utils.validators import validate_domain, validate_slug, ValidationError

logger = get_logger(__name__)

# provider statuses that describe the request rather than the provider
CLIENT_STATUSES = {400, 404, 409}


def _surface_status(error: APIError) -> int:
    if error.status_code in CLIENT_STATUSES:
        return error.status_code
    return 502


class DomainServiceError(Exception):
    """Base exception for domain service errors"""

    def __init__(self, message: str, status_code: int = 502):
        self.status_code = status_code
        super().__init__(message)


class DomainService:
    """
    Add, list and remove custom domains on a project's hosting provider.
    Adding a domain mirrors it onto the project's ``domain`` field.
    """

    def __init__(
        self,
        projects: Repository[Project],
        deployments: Repository[Deployment],
        provider_factory: ProviderFactory = get_hosting_provider,
        config: Optional[Settings] = None
    ):
        self.config = config or get_settings()
        self.projects = projects
        self.deployments = deployments
        self.provider_factory = provider_factory

    def _resolve(self, project_id: str):
        project = self.projects.find_by_id(project_id)
        if project is None:
            raise DomainServiceError(f"Project not found: {project_id}", status_code=404)
        if project.deploy_target is None:
            raise DomainServiceError("No deploy target configured for this project", status_code=400)

        try:
            project_name = validate_slug(project.slug)
        except ValidationError as e:
            raise DomainServiceError(str(e), status_code=400) from e

        provider: BaseHostingProvider = self.provider_factory(project.deploy_target.value, self.config)
        return project, project_name, provider

    def list_domains(self, project_id: str) -> List[ProviderDomain]:
        """
        Read the provider's live list of domains linked to a project.

        Raises:
            DomainServiceError: If the project is unknown or the provider call fails
        """
        project, project_name, provider = self._resolve(project_id)

        try:
            domains = provider.list_domains(project_name)
        except APIError as e:
            logger.error(f"Error fetching domains: {str(e)}")
            raise DomainServiceError(f"Failed to fetch domains: {e.message}", status_code=_surface_status(e)) from e

        logger.info(f"Found {len(domains)} domains for {project.name}")
        return domains

    def add_domain(self, project_id: str, domain: str) -> ProviderDomain:
        """
        Link a custom domain to a deployed project.

        Raises:
            DomainServiceError: 400 for an invalid hostname, 409 when the
                project has never deployed successfully, provider status
                otherwise
        """
        try:
            domain = validate_domain(domain)
        except ValidationError as e:
            raise DomainServiceError(f"Invalid domain format: {str(e)}", status_code=400) from e

        project, project_name, provider = self._resolve(project_id)

        if self.deployments.count(project_id=project.id, status=DeploymentStatus.SUCCESS) == 0:
            raise DomainServiceError(
                "Project must have a successful deployment before adding a domain",
                status_code=409
            )

        try:
            linked = provider.add_domain(project_name, domain)
        except APIError as e:
            logger.error(f"Failed to add {domain}: {str(e)}")
            raise DomainServiceError(f"Failed to add domain: {e.message}", status_code=_surface_status(e)) from e

        self.projects.update(project.id, domain=domain)
        logger.info(f"✅ {domain} linked to {project.name}")
        return linked

    def remove_domain(self, project_id: str, domain: str) -> None:
        """
        Unlink a custom domain; clears the project's mirror when it points at it.

        Raises:
            DomainServiceError: If the project is unknown or the provider call fails
        """
        try:
            domain = validate_domain(domain)
        except ValidationError as e:
            raise DomainServiceError(f"Invalid domain format: {str(e)}", status_code=400) from e

        project, project_name, provider = self._resolve(project_id)

        try:
            provider.remove_domain(project_name, domain)
        except APIError as e:
            logger.error(f"Failed to remove {domain}: {str(e)}")
            raise DomainServiceError(f"Failed to remove domain: {e.message}", status_code=_surface_status(e)) from e

        if project.domain == domain:
            self.projects.update(project.id, domain=None)
        logger.info(f"Removed {domain} from {project.name}")
