from marshmallow import fields
from zerg.types.base import BaseSchema
from zerg.types.models.cicd import (
    CiCdConfig,
    CiCdProvider,
    GitTrigger,
    Pipeline,
    PipelineStep,
    PipelineTrigger,
)


class GitTriggerSchema(BaseSchema):
    __model__ = GitTrigger

    repository = fields.Str(data_key="repository", allow_none=False, required=True)
    branches = fields.List(fields.Str(), data_key="branches", load_default=list)
    events = fields.List(fields.Str(), data_key="events", load_default=list)


class PipelineTriggerSchema(BaseSchema):
    __model__ = PipelineTrigger

    git = fields.Nested(
        GitTriggerSchema(), data_key="git", allow_none=True, load_default=None
    )
    schedule = fields.Str(data_key="schedule", allow_none=True, load_default=None)
    manual = fields.Bool(data_key="manual", load_default=False)


class PipelineStepSchema(BaseSchema):
    __model__ = PipelineStep

    name = fields.Str(data_key="name", allow_none=False, required=True)
    image = fields.Str(data_key="image", allow_none=False, required=True)
    commands = fields.List(fields.Str(), data_key="commands", load_default=list)
    env = fields.Dict(
        keys=fields.Str(),
        values=fields.Str(),
        data_key="env",
        allow_none=True,
        load_default=None,
    )
    working_dir = fields.Str(data_key="workingDir", allow_none=True, load_default=None)


class PipelineSchema(BaseSchema):
    __model__ = Pipeline

    name = fields.Str(data_key="name", allow_none=False, required=True)
    trigger = fields.Nested(
        PipelineTriggerSchema(), data_key="trigger", load_default=PipelineTrigger
    )
    steps = fields.List(
        fields.Nested(PipelineStepSchema()), data_key="steps", load_default=list
    )


class CiCdConfigSchema(BaseSchema):
    __model__ = CiCdConfig

    provider = fields.Enum(CiCdProvider, by_value=True, data_key="provider", required=True)
    pipelines = fields.List(
        fields.Nested(PipelineSchema()), data_key="pipelines", load_default=list
    )
