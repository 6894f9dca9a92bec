from typing import Optional, List
from zerg.types.base import BaseModel
from zerg.types.models.dependency import Dependency
from zerg.types.models.gitops import GitOpsConfig
from zerg.types.models.cicd import CiCdConfig


class DependencyManagerSpec(BaseModel):
    """DependencyManager CRD spec"""

    dependencies: List[Dependency]
    gitops: Optional[GitOpsConfig] = None
    cicd: Optional[CiCdConfig] = None

    @property
    def enabled_dependencies(self) -> List[Dependency]:
        """Enabled dependencies in declaration order."""
        return [dep for dep in self.dependencies if dep.enabled]
