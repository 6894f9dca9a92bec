from .gitops import GitOpsProvisioner
from .cicd import PipelineProvisioner

__all__ = [
    "GitOpsProvisioner",
    "PipelineProvisioner",
]
