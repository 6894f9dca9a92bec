from .dependency import DependencySourceSchema, DependencySchema
from .gitops import SyncPolicySchema, GitOpsConfigSchema
from .cicd import (
    GitTriggerSchema,
    PipelineTriggerSchema,
    PipelineStepSchema,
    PipelineSchema,
    CiCdConfigSchema,
)
from .dependencymanager_spec import DependencyManagerSpecSchema
from .dependencymanager_status import (
    DependencyStatusSchema,
    GitOpsStatusSchema,
    PipelineStatusSchema,
    CiCdStatusSchema,
    ConditionSchema,
    DependencyManagerStatusSchema,
)

__all__ = [
    "DependencySourceSchema",
    "DependencySchema",
    "SyncPolicySchema",
    "GitOpsConfigSchema",
    "GitTriggerSchema",
    "PipelineTriggerSchema",
    "PipelineStepSchema",
    "PipelineSchema",
    "CiCdConfigSchema",
    "DependencyManagerSpecSchema",
    "DependencyStatusSchema",
    "GitOpsStatusSchema",
    "PipelineStatusSchema",
    "CiCdStatusSchema",
    "ConditionSchema",
    "DependencyManagerStatusSchema",
]
