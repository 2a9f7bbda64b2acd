"""Reusable base models for configuration, value objects and remote payloads."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    A base model that maps snake_case fields to camelCase keys.

    For example, the field name `current_fetching_tick` in a Python model is
    read from and written to JSON as `currentFetchingTick`.

    Node status endpoints and the peer discovery service both speak camelCase,
    so every payload model derives from this class.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_default=True,
    )


class StrictBaseModel(CamelModel):
    """A strict, immutable pydantic base model for values we create ourselves."""

    model_config = CamelModel.model_config | {
        "extra": "forbid",
        "frozen": True,
        "strict": True,
    }


class ResponseModel(CamelModel):
    """
    An immutable model for payloads produced by other programs.

    Unknown keys are ignored so that a node upgrade adding fields does not
    turn a healthy response into a parse failure. Every field on a subclass
    should be optional: an absent field and a malformed field must stay
    distinguishable to the caller.
    """

    model_config = CamelModel.model_config | {
        "extra": "ignore",
        "frozen": True,
    }
