"""
HTTP surface for the deployment pipeline and the domain registry
"""

from src.web.app import create_app
from src.web.container import AppContainer

__all__ = [
    "create_app",
    "AppContainer",
]
