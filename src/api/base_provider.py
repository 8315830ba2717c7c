"""
Base Hosting Provider Interface
Abstract base class for static-site hosting provider implementations
"""

from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, Dict, Iterable, List, Optional, Type

import requests
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type
)

from src.api.exceptions import (
    APIError,
    AuthenticationError,
    NetworkError,
    RateLimitError,
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
from src.utils.logger import get_logger, truncate

logger = get_logger(__name__)

StageCallback = Callable[[PipelineStage], None]


def _ignore_stage(stage: PipelineStage) -> None:
    pass


class BaseHostingProvider(ABC):
    """
    Abstract base class for hosting providers.
    All provider implementations must inherit this class.

    Subclasses own the ordering of upload vs. deployment creation through
    ``publish``; the orchestrator never branches on the provider type.
    """

    platform: str = ""

    def __init__(
        self,
        token: str,
        base_url: str,
        timeout: float = 30.0,
        upload_concurrency: int = 8,
        error_body_limit: int = 500
    ):
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.upload_concurrency = upload_concurrency
        self.error_body_limit = error_body_limit
        self.headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }

    # ------------------------------------------------------------------
    # Provider contract
    # ------------------------------------------------------------------

    @abstractmethod
    def upload(
        self,
        file: FileDigest,
        content: bytes,
        deployment_id: Optional[str] = None
    ) -> UploadResult:
        """
        Upload one file. Idempotent: content the provider already holds is
        reported as ALREADY_EXISTS, never as an error.

        Raises:
            UploadError: For any rejection other than "already present"
        """
        pass

    @abstractmethod
    def create_deployment(self, project_name: str, files: List[FileDigest]) -> CreatedDeployment:
        """
        Submit the manifest of files (by digest, content not re-sent).

        Raises:
            DeploymentCreateError: If the provider rejects the manifest
        """
        pass

    @abstractmethod
    def poll_status(self, deployment_id: str) -> DeploymentState:
        """One-shot readiness check"""
        pass

    @abstractmethod
    def assign_alias(self, deployment_id: str, alias: str) -> str:
        """
        Point a friendly hostname at the deployment.

        Returns:
            Public https URL for the alias

        Raises:
            AliasError: On any non-2xx response
        """
        pass

    @abstractmethod
    def alias_for(self, project_name: str) -> str:
        """Friendly alias hostname for a project"""
        pass

    @abstractmethod
    def publish(
        self,
        project_name: str,
        bundle: FileBundle,
        on_stage: StageCallback = _ignore_stage
    ) -> CreatedDeployment:
        """
        Ship a hashed bundle: uploads plus deployment creation, in the
        order this provider requires. Calls ``on_stage`` on entering the
        UPLOADING and CREATING stages.
        """
        pass

    @abstractmethod
    def list_domains(self, project_name: str) -> List[ProviderDomain]:
        pass

    @abstractmethod
    def add_domain(self, project_name: str, domain: str) -> ProviderDomain:
        pass

    @abstractmethod
    def remove_domain(self, project_name: str, domain: str) -> None:
        pass

    def get_provider_name(self) -> str:
        """
        Get provider name.
        Default implementation returns class name.

        Returns:
            Provider name string
        """
        return self.__class__.__name__.replace("Client", "")

    # ------------------------------------------------------------------
    # Shared HTTP plumbing
    # ------------------------------------------------------------------

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(NetworkError),
        reraise=True
    )
    def _send(
        self,
        method: str,
        url: str,
        params: Optional[Dict] = None,
        json_data: Optional[Any] = None,
        data: Optional[bytes] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> requests.Response:
        """
        Make one HTTP request. Only transport failures are retried; any
        HTTP response, whatever its status, is returned to the caller.

        Raises:
            NetworkError: After the final failed transport attempt
        """
        request_headers = {**self.headers, **(headers or {})}

        logger.debug(f"{method} {url}")
        if params:
            logger.debug(f"Params: {params}")

        try:
            return requests.request(
                method=method,
                url=url,
                headers=request_headers,
                params=params,
                json=json_data,
                data=data,
                timeout=self.timeout
            )

        except requests.exceptions.Timeout:
            raise NetworkError(f"Request timed out after {self.timeout} seconds")

        except requests.exceptions.ConnectionError as e:
            raise NetworkError(f"Connection error: {str(e)}")

        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Network error: {str(e)}")

    def _raise_for_status(
        self,
        response: requests.Response,
        error_cls: Type[APIError],
        action: str
    ) -> None:
        """
        Map a non-2xx response to an exception with a size-capped body.
        """
        if 200 <= response.status_code < 300:
            return

        body = truncate(response.text, self.error_body_limit)
        response_data = self._parse_error_response(response)

        if response.status_code == 401:
            raise AuthenticationError(
                f"{action} failed: {self.get_provider_name()} rejected the token",
                status_code=401,
                response_data=response_data
            )

        if response.status_code == 429:
            raise RateLimitError(
                f"{action} failed: API rate limit exceeded",
                status_code=429,
                response_data=response_data
            )

        raise error_cls(
            f"{action} failed: {body or 'no response body'}",
            status_code=response.status_code,
            response_data=response_data
        )

    def _json(
        self,
        response: requests.Response,
        error_cls: Type[APIError],
        action: str,
        expected: type = dict
    ) -> Any:
        """
        Decode a 2xx body. A body that is not JSON of the ``expected``
        shape is reported as ``error_cls`` so callers only handle APIError.
        """
        try:
            data = response.json()
        except ValueError as e:
            raise error_cls(
                f"{action} failed: response is not JSON: "
                f"{truncate(response.text, self.error_body_limit) or 'empty body'}",
                status_code=response.status_code
            ) from e

        if not isinstance(data, expected):
            raise error_cls(
                f"{action} failed: unexpected response shape",
                status_code=response.status_code
            )
        return data

    def _parse_error_response(self, response: requests.Response) -> Dict[str, Any]:
        """
        Parse error response from the provider API.

        Args:
            response: Response object

        Returns:
            Error data dictionary
        """
        try:
            error_data = response.json()
            if isinstance(error_data, dict):
                return error_data
            return {"body": error_data}
        except ValueError:
            return {
                "message": truncate(response.text, self.error_body_limit) or "Unknown error",
                "code": response.status_code
            }

    def _upload_all(
        self,
        files: Iterable[FileDigest],
        bundle: FileBundle,
        deployment_id: Optional[str] = None
    ) -> List[UploadResult]:
        """
        Upload files with bounded parallelism. The first failure cancels
        every upload not yet started and is re-raised.
        """
        files = list(files)
        if not files:
            return []

        results = []
        executor = ThreadPoolExecutor(max_workers=min(self.upload_concurrency, len(files)))
        try:
            futures = {
                executor.submit(self.upload, file, bundle.content_for(file.sha1), deployment_id): file
                for file in files
            }
            for future in as_completed(futures):
                results.append(future.result())
        except Exception:
            executor.shutdown(wait=True, cancel_futures=True)
            raise
        else:
            executor.shutdown(wait=True)

        stored = sum(1 for result in results if result.outcome is UploadOutcome.STORED)
        logger.info(f"Uploaded {len(results)} files ({stored} new, {len(results) - stored} already present)")
        return results
