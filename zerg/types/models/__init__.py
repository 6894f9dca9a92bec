from .dependency import DependencyKind, DependencySource, Dependency
from .gitops import GitOpsProvider, SyncPolicy, GitOpsConfig
from .cicd import (
    CiCdProvider,
    GitTrigger,
    PipelineTrigger,
    PipelineStep,
    Pipeline,
    CiCdConfig,
)
from .dependencymanager_spec import DependencyManagerSpec
from .dependencymanager_status import (
    Phase,
    DependencyInstallStatus,
    ConditionStatus,
    DependencyStatus,
    GitOpsStatus,
    PipelineStatus,
    CiCdStatus,
    Condition,
    DependencyManagerStatus,
)

__all__ = [
    "DependencyKind",
    "DependencySource",
    "Dependency",
    "GitOpsProvider",
    "SyncPolicy",
    "GitOpsConfig",
    "CiCdProvider",
    "GitTrigger",
    "PipelineTrigger",
    "PipelineStep",
    "Pipeline",
    "CiCdConfig",
    "DependencyManagerSpec",
    "Phase",
    "DependencyInstallStatus",
    "ConditionStatus",
    "DependencyStatus",
    "GitOpsStatus",
    "PipelineStatus",
    "CiCdStatus",
    "Condition",
    "DependencyManagerStatus",
]
