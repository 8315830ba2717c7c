"""
Deployment entity and the value types exchanged with hosting providers
"""

import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class DeploymentStatus(str, Enum):
    """Persisted status of a Deployment row"""
    PENDING = "PENDING"
    BUILDING = "BUILDING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class DeploymentState(str, Enum):
    """Remote build state reported by a single readiness check"""
    BUILDING = "BUILDING"
    READY = "READY"
    ERROR = "ERROR"


class PipelineStage(str, Enum):
    """Orchestrator state machine"""
    COLLECTING = "COLLECTING"
    HASHING = "HASHING"
    UPLOADING = "UPLOADING"
    CREATING = "CREATING"
    POLLING = "POLLING"
    ALIASING = "ALIASING"
    DONE = "DONE"
    FAILED = "FAILED"


class UploadOutcome(str, Enum):
    STORED = "STORED"
    ALREADY_EXISTS = "ALREADY_EXISTS"


@dataclass(frozen=True)
class UploadResult:
    """Successful upload; both outcomes count as success"""
    relative_path: str
    sha1: str
    outcome: UploadOutcome


@dataclass
class CreatedDeployment:
    """
    What a provider returns once a deployment exists.

    ``url`` is the raw per-build URL; ``required`` lists the digests the
    provider asked for (digest-declare-first providers only).
    """
    deployment_id: str
    url: str
    required: List[str] = field(default_factory=list)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_version() -> str:
    return f"v{int(time.time() * 1000)}"


class Deployment(BaseModel):
    """Persisted deployment history row, owned by the orchestrator"""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    project_id: str
    version: str = Field(default_factory=_new_version)
    status: DeploymentStatus = DeploymentStatus.PENDING
    platform: str
    deploy_url: Optional[str] = None
    logs: Optional[str] = None
    build_time_ms: Optional[int] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    deployed_by: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)


@dataclass
class DeploymentResult:
    """Outcome of one orchestration run (the DONE payload)"""
    url: str
    deployment_id: str
    record: Deployment
    aliased: bool = True
    timed_out: bool = False
