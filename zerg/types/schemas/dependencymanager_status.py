from marshmallow import fields
from zerg.types.base import BaseSchema, CompactSchema
from zerg.types.models.gitops import GitOpsProvider
from zerg.types.models.cicd import CiCdProvider
from zerg.types.models.dependencymanager_status import (
    CiCdStatus,
    Condition,
    ConditionStatus,
    DependencyInstallStatus,
    DependencyManagerStatus,
    DependencyStatus,
    GitOpsStatus,
    Phase,
    PipelineStatus,
)


class DependencyStatusSchema(CompactSchema):
    __model__ = DependencyStatus

    name = fields.Str(data_key="name", required=True)
    status = fields.Enum(DependencyInstallStatus, by_value=True, data_key="status")
    version = fields.Str(data_key="version", allow_none=True, load_default=None)
    last_updated = fields.Str(data_key="lastUpdated", allow_none=True, load_default=None)
    error = fields.Str(data_key="error", allow_none=True, load_default=None)


class GitOpsStatusSchema(CompactSchema):
    __model__ = GitOpsStatus

    provider = fields.Enum(GitOpsProvider, by_value=True, data_key="provider")
    sync_status = fields.Str(data_key="syncStatus")
    last_sync = fields.Str(data_key="lastSync", allow_none=True, load_default=None)


class PipelineStatusSchema(CompactSchema):
    __model__ = PipelineStatus

    name = fields.Str(data_key="name", required=True)
    status = fields.Str(data_key="status")
    last_run = fields.Str(data_key="lastRun", allow_none=True, load_default=None)


class CiCdStatusSchema(CompactSchema):
    __model__ = CiCdStatus

    provider = fields.Enum(CiCdProvider, by_value=True, data_key="provider")
    pipelines = fields.List(
        fields.Nested(PipelineStatusSchema()), data_key="pipelines", load_default=list
    )


class ConditionSchema(CompactSchema):
    __model__ = Condition

    type = fields.Str(data_key="type", required=True)
    status = fields.Enum(ConditionStatus, by_value=True, data_key="status")
    last_transition_time = fields.Str(
        data_key="lastTransitionTime", allow_none=True, load_default=None
    )
    reason = fields.Str(data_key="reason", allow_none=True, load_default=None)
    message = fields.Str(data_key="message", allow_none=True, load_default=None)


class DependencyManagerStatusSchema(BaseSchema):
    """Status document.

    Top level keys are always dumped, None included, so that a merge patch
    clears whatever a previous pass left behind.
    """

    __model__ = DependencyManagerStatus

    phase = fields.Enum(Phase, by_value=True, data_key="phase", load_default=Phase.PENDING)
    dependencies = fields.List(
        fields.Nested(DependencyStatusSchema()),
        data_key="dependencies",
        allow_none=True,
        load_default=None,
    )
    gitops_status = fields.Nested(
        GitOpsStatusSchema(), data_key="gitopsStatus", allow_none=True, load_default=None
    )
    cicd_status = fields.Nested(
        CiCdStatusSchema(), data_key="cicdStatus", allow_none=True, load_default=None
    )
    last_reconciled = fields.Str(
        data_key="lastReconciled", allow_none=True, load_default=None
    )
    observed_generation = fields.Int(
        data_key="observedGeneration", allow_none=True, load_default=None
    )
    conditions = fields.List(
        fields.Nested(ConditionSchema()),
        data_key="conditions",
        allow_none=True,
        load_default=None,
    )
