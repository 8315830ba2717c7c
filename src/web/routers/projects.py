"""
Project deployment and provider domain routes
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Query, status

from src.models.domain import ProviderDomain
from src.web.container import AppContainer, get_container
from src.web.schemas import AddDomainRequest, dump, envelope

router = APIRouter(prefix="/projects", tags=["projects"])


def _domain_json(domain: ProviderDomain) -> Dict[str, Any]:
    return {
        "name": domain.name,
        "verified": domain.verified,
        "createdAt": domain.created_at.isoformat() if domain.created_at else None,
    }


@router.post("/{project_id}/deploy", status_code=status.HTTP_201_CREATED)
def deploy_project(project_id: str, container: AppContainer = Depends(get_container)):
    result = container.deployment_service.trigger_deploy(project_id)
    return envelope({
        "deploymentId": result.deployment_id,
        "url": result.url,
        "deployment": dump(result.record),
    })


@router.get("/{project_id}/deployments")
def list_deployments(
    project_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    container: AppContainer = Depends(get_container)
):
    result = container.deployment_service.list_deployments(project_id, page=page, limit=limit)
    return envelope([dump(item) for item in result.data], meta=result.meta())


@router.get("/{project_id}/domains")
def list_domains(project_id: str, container: AppContainer = Depends(get_container)):
    domains = container.domain_service.list_domains(project_id)
    return envelope([_domain_json(domain) for domain in domains])


@router.post("/{project_id}/domains", status_code=status.HTTP_201_CREATED)
def add_domain(
    project_id: str,
    body: AddDomainRequest,
    container: AppContainer = Depends(get_container)
):
    domain = container.domain_service.add_domain(project_id, body.domain)
    return envelope(_domain_json(domain))


@router.delete("/{project_id}/domains/{domain}")
def remove_domain(project_id: str, domain: str, container: AppContainer = Depends(get_container)):
    container.domain_service.remove_domain(project_id, domain)
    return envelope({"message": f"Domain {domain} removed"})
