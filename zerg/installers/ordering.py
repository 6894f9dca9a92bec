import logging
from typing import Dict, List, Set
from zerg.types.models import Dependency, DependencyManagerSpec
from zerg.utils.errors import ConfigurationError

logger = logging.getLogger(__name__)


def install_order(
    spec: DependencyManagerSpec, enforce_depends_on: bool = False
) -> List[Dependency]:
    """Enabled dependencies in the order they are installed.

    Declaration order unless `enforce_depends_on` is set, in which case
    `dependsOn` references are honored as well.
    """
    enabled = spec.enabled_dependencies
    if not enforce_depends_on:
        return enabled
    return topological_order(enabled)


def topological_order(dependencies: List[Dependency]) -> List[Dependency]:
    """Order dependencies so each comes after everything it depends on.

    Ties are broken by declaration order, so a spec without `dependsOn`
    keeps its declared order. References to names that are not part of
    `dependencies` (unknown or disabled) are ignored.

    Raises:
        ConfigurationError: `dependsOn` references form a cycle.
    """
    names = {dep.name for dep in dependencies}
    requires: Dict[str, Set[str]] = {}
    for dep in dependencies:
        requires[dep.name] = set()
        for ref in dep.depends_on or []:
            if ref not in names:
                logger.warning(
                    f"Dependency {dep.name} depends on unknown or disabled "
                    f"dependency {ref}, ignoring."
                )
                continue
            requires[dep.name].add(ref)

    ordered: List[Dependency] = []
    done: Set[str] = set()
    while len(ordered) < len(dependencies):
        ready = next(
            (
                dep
                for dep in dependencies
                if dep.name not in done and requires[dep.name] <= done
            ),
            None,
        )
        if ready is None:
            remaining = [dep.name for dep in dependencies if dep.name not in done]
            raise ConfigurationError(
                f"Cyclic dependsOn between dependencies: {', '.join(remaining)}"
            )
        ordered.append(ready)
        done.add(ready.name)
    return ordered
