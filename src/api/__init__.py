"""
API Layer - Hosting Provider Implementations
Supports multiple static-site hosts behind a unified interface
"""

# Base Provider
from src.api.base_provider import BaseHostingProvider

# Provider Implementations
from src.api.vercel_client import VercelClient
from src.api.netlify_client import NetlifyClient

# Provider Factory
from src.api.provider_factory import get_hosting_provider

# Exceptions (shared across providers)
from src.api.exceptions import (
    APIError,
    ConfigurationError,
    AuthenticationError,
    UploadError,
    DeploymentCreateError,
    DeploymentStatusError,
    AliasError,
    DomainError,
    RateLimitError,
    NetworkError
)

__all__ = [
    # Base
    "BaseHostingProvider",

    # Providers
    "VercelClient",
    "NetlifyClient",

    # Factory
    "get_hosting_provider",

    # Exceptions
    "APIError",
    "ConfigurationError",
    "AuthenticationError",
    "UploadError",
    "DeploymentCreateError",
    "DeploymentStatusError",
    "AliasError",
    "DomainError",
    "RateLimitError",
    "NetworkError"
]
