"""Built-in operator releases, installed by well-known dependency name."""

from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class OperatorRelease:
    """A fixed Helm repository, chart and namespace for one operator."""

    release: str
    repo_name: str
    repo_url: str
    chart: str
    namespace: str

    @property
    def chart_ref(self) -> str:
        return f"{self.repo_name}/{self.chart}"


BUILTIN_OPERATORS: Dict[str, OperatorRelease] = {
    "external-secrets": OperatorRelease(
        release="external-secrets",
        repo_name="external-secrets",
        repo_url="https://charts.external-secrets.io",
        chart="external-secrets",
        namespace="external-secrets-system",
    ),
    "crossplane": OperatorRelease(
        release="crossplane",
        repo_name="crossplane-stable",
        repo_url="https://charts.crossplane.io/stable",
        chart="crossplane",
        namespace="crossplane-system",
    ),
    "loki": OperatorRelease(
        release="loki",
        repo_name="grafana",
        repo_url="https://grafana.github.io/helm-charts",
        chart="loki-stack",
        namespace="loki-system",
    ),
}


def lookup_operator(name: str) -> Optional[OperatorRelease]:
    return BUILTIN_OPERATORS.get(name)
