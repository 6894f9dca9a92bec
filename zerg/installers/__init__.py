from .dispatcher import (
    DependencyHandler,
    DependencyInstaller,
    HelmHandler,
    KustomizeHandler,
    OperatorHandler,
    YamlHandler,
)
from .operators import BUILTIN_OPERATORS, OperatorRelease
from .ordering import install_order, topological_order

__all__ = [
    "DependencyHandler",
    "DependencyInstaller",
    "HelmHandler",
    "KustomizeHandler",
    "OperatorHandler",
    "YamlHandler",
    "BUILTIN_OPERATORS",
    "OperatorRelease",
    "install_order",
    "topological_order",
]
