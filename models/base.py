"""
Base schemas for all models.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class FrozenSchema(BaseModel):
    """
    Base for immutable value objects.

    Used for board metadata read from monday.com and for the batch
    configuration injected into services. Strings are kept as received:
    item names and column texts are compared after explicit trimming.
    """
    model_config = ConfigDict(frozen=True)


class CamelSchema(BaseModel):
    """
    Base for response payloads serialised with camelCase keys.

    Fields are declared in snake_case and accept either spelling on input.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True
    )
