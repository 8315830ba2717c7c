"""
FastAPI application factory
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.exceptions import ConfigurationError
from src.persistence.repository import RecordNotFoundError
from src.services.deployment_orchestrator import OrchestratorError
from src.services.deployment_service import DeploymentServiceError
from src.services.domain_record_service import DomainRecordError
from src.services.domain_service import DomainServiceError
from src.utils.logger import get_logger
from src.web.container import AppContainer
from src.web.routers.domain_records import router as domain_records_router
from src.web.routers.projects import router as projects_router

logger = get_logger(__name__)


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message, **extra})


def _register_error_handlers(app: FastAPI) -> None:

    @app.exception_handler(ConfigurationError)
    async def configuration_error(request: Request, exc: ConfigurationError):
        return _error(exc.status_code or 400, exc.message)

    @app.exception_handler(DeploymentServiceError)
    async def deployment_service_error(request: Request, exc: DeploymentServiceError):
        return _error(exc.status_code, str(exc))

    @app.exception_handler(OrchestratorError)
    async def orchestrator_error(request: Request, exc: OrchestratorError):
        logger.error(f"Deployment failed during {exc.stage.value}: {str(exc)}")
        record_id = exc.record.id if exc.record else None
        return _error(502, str(exc), stage=exc.stage.value, deploymentRecordId=record_id)

    @app.exception_handler(DomainServiceError)
    async def domain_service_error(request: Request, exc: DomainServiceError):
        return _error(exc.status_code, str(exc))

    @app.exception_handler(DomainRecordError)
    async def domain_record_error(request: Request, exc: DomainRecordError):
        return _error(exc.status_code, str(exc))

    @app.exception_handler(RecordNotFoundError)
    async def record_not_found(request: Request, exc: RecordNotFoundError):
        return _error(404, str(exc))


def create_app(container: Optional[AppContainer] = None) -> FastAPI:
    """
    Build the HTTP application.

    Args:
        container: Optional pre-wired services. Defaults to in-memory
            repositories and providers built from settings.
    """
    app = FastAPI(title="Site Deploy API")
    app.state.container = container or AppContainer.build()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(projects_router)
    app.include_router(domain_records_router)
    _register_error_handlers(app)

    @app.get("/healthcheck")
    async def healthcheck():
        return {"status": "ok"}

    return app
