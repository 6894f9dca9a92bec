from enum import Enum
from typing import Optional
from zerg.types.base import BaseModel


class GitOpsProvider(str, Enum):
    FLUX = "flux"
    ARGOCD = "argocd"


class SyncPolicy(BaseModel):
    automated: bool = False
    self_heal: bool = False
    prune: bool = False


class GitOpsConfig(BaseModel):
    """Continuous delivery linkage for the namespace."""

    provider: GitOpsProvider
    repository: str
    branch: str
    path: str
    sync_policy: Optional[SyncPolicy] = None

    @property
    def prune(self) -> bool:
        return bool(self.sync_policy and self.sync_policy.prune)

    @property
    def automated(self) -> bool:
        return bool(self.sync_policy and self.sync_policy.automated)
