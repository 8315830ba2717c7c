"""
Custom exceptions for hosting provider API operations
"""


class APIError(Exception):
    """Base exception for all provider API errors"""

    def __init__(self, message: str, status_code: int = None, response_data: dict = None):
        self.message = message
        self.status_code = status_code
        self.response_data = response_data or {}
        super().__init__(self.message)

    def __str__(self):
        if self.status_code:
            return f"{self.__class__.__name__} (HTTP {self.status_code}): {self.message}"
        return f"{self.__class__.__name__}: {self.message}"


class ConfigurationError(APIError):
    """Raised when a provider token or setting is missing; never retried"""
    pass


class AuthenticationError(APIError):
    """Raised when the provider rejects the bearer token"""
    pass


class UploadError(APIError):
    """Raised when a file upload is rejected (anything but stored / already present)"""
    pass


class DeploymentCreateError(APIError):
    """Raised when the provider rejects a deployment manifest"""
    pass


class DeploymentStatusError(APIError):
    """Raised when a readiness check cannot be read"""
    pass


class AliasError(APIError):
    """Raised when alias assignment fails"""
    pass


class DomainError(APIError):
    """Raised when a provider-side domain operation fails"""
    pass


class RateLimitError(APIError):
    """Raised when API rate limit is exceeded"""
    pass


class NetworkError(APIError):
    """Raised when network/connection errors occur"""
    pass
