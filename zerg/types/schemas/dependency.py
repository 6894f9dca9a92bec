from marshmallow import fields
from zerg.types.base import BaseSchema
from zerg.types.models.dependency import (
    Dependency,
    DependencyKind,
    DependencySource,
)


class DependencySourceSchema(BaseSchema):
    __model__ = DependencySource

    repo = fields.Str(data_key="repo", allow_none=False, required=True)
    chart = fields.Str(data_key="chart", allow_none=True, load_default=None)
    path = fields.Str(data_key="path", allow_none=True, load_default=None)
    ref = fields.Str(data_key="ref", allow_none=True, load_default=None)


class DependencySchema(BaseSchema):
    __model__ = Dependency

    name = fields.Str(data_key="name", allow_none=False, required=True)
    kind = fields.Enum(
        DependencyKind, by_value=True, data_key="type", allow_none=False, required=True
    )
    source = fields.Nested(
        DependencySourceSchema(), data_key="source", allow_none=False, required=True
    )
    version = fields.Str(data_key="version", allow_none=True, load_default=None)
    namespace = fields.Str(data_key="namespace", allow_none=True, load_default=None)
    values = fields.Dict(
        keys=fields.Str(), data_key="values", allow_none=True, load_default=None
    )
    depends_on = fields.List(
        fields.Str(), data_key="dependsOn", allow_none=True, load_default=None
    )
    enabled = fields.Bool(data_key="enabled", allow_none=False, load_default=True)
