from marshmallow import fields
from zerg.types.base import BaseSchema
from zerg.types.models.gitops import GitOpsConfig, GitOpsProvider, SyncPolicy


class SyncPolicySchema(BaseSchema):
    __model__ = SyncPolicy

    automated = fields.Bool(data_key="automated", load_default=False)
    self_heal = fields.Bool(data_key="selfHeal", load_default=False)
    prune = fields.Bool(data_key="prune", load_default=False)


class GitOpsConfigSchema(BaseSchema):
    __model__ = GitOpsConfig

    provider = fields.Enum(
        GitOpsProvider, by_value=True, data_key="provider", required=True
    )
    repository = fields.Str(data_key="repository", allow_none=False, required=True)
    branch = fields.Str(data_key="branch", allow_none=False, required=True)
    path = fields.Str(data_key="path", allow_none=False, required=True)
    sync_policy = fields.Nested(
        SyncPolicySchema(),
        data_key="syncPolicy",
        allow_none=True,
        load_default=None,
    )
