from .base import BaseResource
from .dependencymanager import DependencyManager

__all__ = [
    "BaseResource",
    "DependencyManager",
]
