from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ValueModel(BaseModel):
    """Immutable value with camelCase wire names."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)
