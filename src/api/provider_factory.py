"""
Hosting Provider Factory
Creates hosting provider instances based on configuration
"""

from typing import Optional

from src.api.base_provider import BaseHostingProvider
from src.api.exceptions import ConfigurationError
from src.api.netlify_client import NetlifyClient
from src.api.vercel_client import VercelClient
from src.utils.config import get_settings, Settings
from src.utils.logger import get_logger

logger = get_logger(__name__)

PROVIDERS = {
    "VERCEL": VercelClient,
    "NETLIFY": NetlifyClient,
}


def get_hosting_provider(
    platform: str,
    config: Optional[Settings] = None
) -> BaseHostingProvider:
    """
    Factory function to create hosting provider instances.

    Args:
        platform: Deploy target ("VERCEL" or "NETLIFY")
        config: Optional Settings instance. Uses default if None.

    Returns:
        Hosting provider instance

    Raises:
        ConfigurationError: If the platform is unknown or its token is missing

    Example:
        provider = get_hosting_provider("VERCEL")
        orchestrator = DeploymentOrchestrator(provider, deployments)
    """
    if config is None:
        config = get_settings()

    platform = (platform or "").upper()

    provider_cls = PROVIDERS.get(platform)
    if provider_cls is None:
        raise ConfigurationError(
            f"Unsupported deploy target: {platform or '(none)'}. "
            f"Valid options are: {', '.join(PROVIDERS)}",
            status_code=400
        )

    if not config.token_for(platform):
        raise ConfigurationError(f"{platform}_TOKEN is not configured", status_code=400)

    logger.info(f"Creating hosting provider: {platform}")
    return provider_cls(config)
