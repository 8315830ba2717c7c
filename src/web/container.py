"""
Wiring of repositories and services shared by every request
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from src.api.provider_factory import get_hosting_provider
from src.models.deployment import Deployment
from src.models.domain import DomainRecord
from src.models.project import Project
from src.persistence.memory import InMemoryRepository
from src.persistence.repository import Repository
from src.services.deployment_service import DeploymentService, ProviderFactory, SiteBuilder
from src.services.domain_record_service import DomainRecordService
from src.services.domain_service import DomainService
from src.services.readiness_poller import ReadinessPoller
from src.services.whois_service import WhoisClient
from src.utils.config import get_settings, Settings


@dataclass
class AppContainer:
    config: Settings
    projects: Repository[Project]
    deployments: Repository[Deployment]
    domain_records: Repository[DomainRecord]
    deployment_service: DeploymentService
    domain_service: DomainService
    domain_record_service: DomainRecordService

    @classmethod
    def build(
        cls,
        config: Optional[Settings] = None,
        projects: Optional[Repository[Project]] = None,
        deployments: Optional[Repository[Deployment]] = None,
        domain_records: Optional[Repository[DomainRecord]] = None,
        provider_factory: ProviderFactory = get_hosting_provider,
        site_builder: Optional[SiteBuilder] = None,
        poller: Optional[ReadinessPoller] = None,
        whois: Optional[WhoisClient] = None
    ) -> "AppContainer":
        """Build a container; anything not supplied gets an in-memory default"""
        config = config or get_settings()
        projects = projects if projects is not None else InMemoryRepository()
        deployments = deployments if deployments is not None else InMemoryRepository()
        domain_records = domain_records if domain_records is not None else InMemoryRepository()

        return cls(
            config=config,
            projects=projects,
            deployments=deployments,
            domain_records=domain_records,
            deployment_service=DeploymentService(
                projects,
                deployments,
                provider_factory=provider_factory,
                site_builder=site_builder,
                poller=poller,
                config=config,
            ),
            domain_service=DomainService(
                projects,
                deployments,
                provider_factory=provider_factory,
                config=config,
            ),
            domain_record_service=DomainRecordService(domain_records, whois=whois, config=config),
        )


def get_container(request: Request) -> AppContainer:
    return request.app.state.container
