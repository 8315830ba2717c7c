"""
Tests for provider-side custom domains on projects.
"""

from unittest.mock import MagicMock

import pytest

from src.api.exceptions import DomainError
from src.models.deployment import Deployment, DeploymentStatus
from src.models.domain import ProviderDomain
from src.models.project import DeployTarget, Project
from src.persistence import InMemoryRepository
from src.services.domain_service import DomainService, DomainServiceError


@pytest.fixture
def projects():
    return InMemoryRepository()


@pytest.fixture
def deployments():
    return InMemoryRepository()


@pytest.fixture
def provider():
    provider = MagicMock()
    provider.add_domain.return_value = ProviderDomain(name="acme.com", verified=False)
    provider.list_domains.return_value = [ProviderDomain(name="acme.com", verified=True)]
    return provider


@pytest.fixture
def service(projects, deployments, provider, settings):
    return DomainService(projects, deployments, provider_factory=MagicMock(return_value=provider), config=settings)


@pytest.fixture
def project(projects):
    return projects.create(Project(name="Acme", slug="acme", deploy_target=DeployTarget.VERCEL))


def _deployed(deployments, project, status=DeploymentStatus.SUCCESS):
    deployments.create(Deployment(project_id=project.id, platform="VERCEL", status=status))


class TestAddDomain:

    def test_requires_a_successful_deployment(self, service, deployments, project, provider):
        _deployed(deployments, project, DeploymentStatus.FAILED)

        with pytest.raises(DomainServiceError) as excinfo:
            service.add_domain(project.id, "acme.com")

        assert excinfo.value.status_code == 409
        provider.add_domain.assert_not_called()

    def test_links_and_mirrors_onto_project(self, service, projects, deployments, project, provider):
        _deployed(deployments, project)

        linked = service.add_domain(project.id, "ACME.com")

        assert linked.name == "acme.com"
        provider.add_domain.assert_called_once_with("acme", "acme.com")
        assert projects.find_by_id(project.id).domain == "acme.com"

    def test_invalid_hostname_is_400(self, service, project):
        with pytest.raises(DomainServiceError) as excinfo:
            service.add_domain(project.id, "not a domain")
        assert excinfo.value.status_code == 400

    def test_provider_conflict_keeps_its_status(self, service, deployments, project, provider):
        _deployed(deployments, project)
        provider.add_domain.side_effect = DomainError("taken", status_code=409)

        with pytest.raises(DomainServiceError) as excinfo:
            service.add_domain(project.id, "acme.com")
        assert excinfo.value.status_code == 409

    def test_provider_outage_is_502(self, service, deployments, project, provider):
        _deployed(deployments, project)
        provider.add_domain.side_effect = DomainError("down", status_code=500)

        with pytest.raises(DomainServiceError) as excinfo:
            service.add_domain(project.id, "acme.com")
        assert excinfo.value.status_code == 502


class TestListAndRemove:

    def test_list_reads_provider_live(self, service, project, provider):
        domains = service.list_domains(project.id)
        assert [d.name for d in domains] == ["acme.com"]
        provider.list_domains.assert_called_once_with("acme")

    def test_unknown_project_is_404(self, service):
        with pytest.raises(DomainServiceError) as excinfo:
            service.list_domains("missing")
        assert excinfo.value.status_code == 404

    def test_remove_clears_matching_mirror(self, service, projects, project, provider):
        projects.update(project.id, domain="acme.com")

        service.remove_domain(project.id, "acme.com")

        provider.remove_domain.assert_called_once_with("acme", "acme.com")
        assert projects.find_by_id(project.id).domain is None

    def test_remove_keeps_other_mirror(self, service, projects, project):
        projects.update(project.id, domain="acme.com")
        service.remove_domain(project.id, "www.acme.com")
        assert projects.find_by_id(project.id).domain == "acme.com"
