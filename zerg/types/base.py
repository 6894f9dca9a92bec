from types import SimpleNamespace
from typing import Any, Dict
from marshmallow import EXCLUDE, Schema, post_dump, post_load, pre_load

JSON = Dict[str, Any]
MAX_REPR_LEN = 50


class BaseModel(SimpleNamespace):
    """BaseModel that all models should inherit from.

    Fields left out of the constructor fall back to the class level defaults.
    Args:
        **kwargs: All passed parameters as converted to instance attributes.
    """

    def __repr__(self) -> str:
        """Return a default repr of any Model.
        Returns:
            The string model parameters up to a `MAX_REPR_LEN`.
        """
        repr_ = super().__repr__()
        if len(repr_) > MAX_REPR_LEN:
            return repr_[:MAX_REPR_LEN] + " ...)"
        else:
            return repr_


class BaseSchema(Schema):
    """The default schema for all models."""

    __model__: Any = BaseModel
    """Determine the object that is created when the load method is called."""

    class Meta:
        unknown = EXCLUDE
        ordered = True

    @pre_load
    def accept_attribute_names(self, data: Any, **kwargs: Any) -> Any:
        """Accept attribute names (`sync_policy`) in place of data keys (`syncPolicy`).

        The data key wins when a document carries both.
        """
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for attr, field in self.load_fields.items():
            key = field.data_key or attr
            if key != attr and attr in data:
                value = data.pop(attr)
                data.setdefault(key, value)
        return data

    @post_load
    def make_object(self, data: JSON, **kwargs: Any) -> "__model__":
        """Build model for the given `__model__` class attribute.
        Args:
            data: The JSON diction to use to build the model.
            **kwargs: Unused but required to match signature of `Schema.make_object`
        Returns:
            An instance of the `__model__` class.
        """
        return self.__model__(**data)


class CompactSchema(BaseSchema):
    """Schema that leaves unset (None) fields out of dumped documents.

    Used for entries of status lists, which are replaced wholesale by a
    merge patch and must not carry explicit nulls.
    """

    @post_dump
    def remove_none(self, data: JSON, **kwargs: Any) -> JSON:
        return {key: value for key, value in data.items() if value is not None}
