from enum import Enum
from typing import Optional, List, Dict, Any
from zerg.types.base import BaseModel


class DependencyKind(str, Enum):
    """Installation strategy of a dependency."""

    HELM = "helm"
    KUSTOMIZE = "kustomize"
    YAML = "yaml"
    OPERATOR = "operator"


class DependencySource(BaseModel):
    repo: str
    chart: Optional[str] = None
    path: Optional[str] = None
    ref: Optional[str] = None


class Dependency(BaseModel):
    """A single installable unit of a DependencyManager."""

    name: str
    kind: DependencyKind
    source: DependencySource
    version: Optional[str] = None
    namespace: Optional[str] = None
    values: Optional[Dict[str, Any]] = None
    depends_on: Optional[List[str]] = None
    enabled: bool = True

    def target_namespace(self, namespace: str) -> str:
        """Dependency namespace wins over the reconcile namespace."""
        return self.namespace or namespace
