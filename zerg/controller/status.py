import logging
from typing import Dict, List, Optional
from marshmallow import ValidationError
from zerg.resources.dependencymanager import DependencyManager
from zerg.types.models import (
    CiCdStatus,
    Condition,
    ConditionStatus,
    DependencyManagerStatus,
    DependencyStatus,
    GitOpsStatus,
    Phase,
)
from zerg.types.schemas import ConditionSchema, DependencyManagerStatusSchema
from zerg.utils.helpers import now, remove_conditions, upsert_condition

logger = logging.getLogger(__name__)

READY = "Ready"
DEPENDENCIES_INSTALLED = "DependenciesInstalled"
GITOPS_CONFIGURED = "GitOpsConfigured"
CICD_CONFIGURED = "CiCdConfigured"

STEP_CONDITIONS = [DEPENDENCIES_INSTALLED, GITOPS_CONFIGURED, CICD_CONFIGURED]


def load_conditions(status: Optional[Dict]) -> List[Condition]:
    """Conditions of a status document as observed on the object."""
    try:
        return ConditionSchema(many=True).load((status or {}).get("conditions") or [])
    except ValidationError as e:
        logger.warning(f"Ignoring unreadable status conditions: {e.messages}")
        return []


class StatusWriter:
    """Builds status documents for one pass and patches them onto the object.

    Conditions observed on the object at the start of the pass are carried
    over, so a condition keeps its lastTransitionTime until its status flips.
    """

    resource: DependencyManager
    generation: Optional[int]
    conditions: List[Condition]

    def __init__(
        self,
        resource: DependencyManager,
        observed: Optional[Dict] = None,
        generation: Optional[int] = None,
    ) -> None:
        self.resource = resource
        self.generation = generation
        self.conditions = load_conditions(observed)
        self.schema = DependencyManagerStatusSchema()

    def condition(
        self,
        type: str,
        status: ConditionStatus,
        reason: str = None,
        message: str = None,
    ) -> None:
        self.conditions = upsert_condition(
            self.conditions, type, status, reason=reason, message=message
        )

    def prepare(
        self,
        phase: Phase,
        dependencies: Optional[List[DependencyStatus]] = None,
        gitops_status: Optional[GitOpsStatus] = None,
        cicd_status: Optional[CiCdStatus] = None,
    ) -> Dict:
        status = DependencyManagerStatus(
            phase=phase,
            dependencies=list(dependencies or []),
            gitops_status=gitops_status,
            cicd_status=cicd_status,
            last_reconciled=now(),
            observed_generation=self.generation,
            conditions=self.conditions,
        )
        return self.schema.dump(status)

    async def write(self, status: Dict) -> Dict:
        await self.resource.patch_status(status)
        return status

    async def installing(self) -> Dict:
        """Start of a pass: drop failure conditions, reset dependency entries."""
        self.conditions = [
            c
            for c in self.conditions
            if c.type not in STEP_CONDITIONS or c.status != ConditionStatus.FALSE
        ]
        self.condition(
            READY,
            ConditionStatus.UNKNOWN,
            reason="Installing",
            message="Reconciliation in progress",
        )
        return await self.write(self.prepare(Phase.INSTALLING))

    async def failed(
        self,
        message: str,
        reason: str = "ReconciliationError",
        step: Optional[str] = None,
        dependencies: Optional[List[DependencyStatus]] = None,
        gitops_status: Optional[GitOpsStatus] = None,
        cicd_status: Optional[CiCdStatus] = None,
    ) -> Dict:
        self.condition(READY, ConditionStatus.FALSE, reason=reason, message=message)
        if step:
            self.condition(step, ConditionStatus.FALSE, reason=reason, message=message)
        return await self.write(
            self.prepare(Phase.FAILED, dependencies, gitops_status, cicd_status)
        )

    async def ready(
        self,
        dependencies: List[DependencyStatus],
        gitops_status: Optional[GitOpsStatus] = None,
        cicd_status: Optional[CiCdStatus] = None,
    ) -> Dict:
        self.condition(
            READY,
            ConditionStatus.TRUE,
            reason="Reconciled",
            message="All dependencies installed",
        )
        self.condition(
            DEPENDENCIES_INSTALLED,
            ConditionStatus.TRUE,
            reason="Installed",
            message=f"{len(dependencies)} dependencies installed",
        )
        if gitops_status:
            self.condition(GITOPS_CONFIGURED, ConditionStatus.TRUE, reason="Configured")
        else:
            self.conditions = remove_conditions(self.conditions, [GITOPS_CONFIGURED])
        if cicd_status:
            self.condition(CICD_CONFIGURED, ConditionStatus.TRUE, reason="Configured")
        else:
            self.conditions = remove_conditions(self.conditions, [CICD_CONFIGURED])
        return await self.write(
            self.prepare(Phase.READY, dependencies, gitops_status, cicd_status)
        )
