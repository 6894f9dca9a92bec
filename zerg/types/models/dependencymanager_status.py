from enum import Enum
from typing import Optional, List
from zerg.types.base import BaseModel
from zerg.types.models.gitops import GitOpsProvider
from zerg.types.models.cicd import CiCdProvider


class Phase(str, Enum):
    """Overall phase of a DependencyManager.

    Within a single reconcile pass the phase only moves forward:
    Installing, then Ready or Failed.
    """

    PENDING = "Pending"
    INSTALLING = "Installing"
    READY = "Ready"
    FAILED = "Failed"
    UPDATING = "Updating"


class DependencyInstallStatus(str, Enum):
    PENDING = "Pending"
    INSTALLING = "Installing"
    INSTALLED = "Installed"
    FAILED = "Failed"
    UPDATING = "Updating"
    UNINSTALLING = "Uninstalling"


class ConditionStatus(str, Enum):
    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


class DependencyStatus(BaseModel):
    name: str
    status: DependencyInstallStatus
    version: Optional[str] = None
    last_updated: Optional[str] = None
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.status == DependencyInstallStatus.FAILED


class GitOpsStatus(BaseModel):
    provider: GitOpsProvider
    sync_status: str
    last_sync: Optional[str] = None


class PipelineStatus(BaseModel):
    name: str
    status: str
    last_run: Optional[str] = None


class CiCdStatus(BaseModel):
    provider: CiCdProvider
    pipelines: List[PipelineStatus]


class Condition(BaseModel):
    type: str
    status: ConditionStatus
    last_transition_time: str
    reason: Optional[str] = None
    message: Optional[str] = None


class DependencyManagerStatus(BaseModel):
    """DependencyManager CRD status, owned by the reconcile engine."""

    phase: Phase
    dependencies: Optional[List[DependencyStatus]] = None
    gitops_status: Optional[GitOpsStatus] = None
    cicd_status: Optional[CiCdStatus] = None
    last_reconciled: Optional[str] = None
    observed_generation: Optional[int] = None
    conditions: Optional[List[Condition]] = None
