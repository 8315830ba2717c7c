"""
Project fields read and written by the deployment pipeline
The rest of the project entity belongs to the CRUD layer.
"""

import uuid
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class DeployTarget(str, Enum):
    VERCEL = "VERCEL"
    NETLIFY = "NETLIFY"


class ProjectStatus(str, Enum):
    DRAFT = "DRAFT"
    IN_PROGRESS = "IN_PROGRESS"
    READY = "READY"
    DEPLOYED = "DEPLOYED"
    ARCHIVED = "ARCHIVED"


class Project(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    name: str
    slug: str
    client_id: Optional[str] = None
    deploy_target: Optional[DeployTarget] = None
    deploy_url: Optional[str] = None
    domain: Optional[str] = None
    status: ProjectStatus = ProjectStatus.DRAFT
