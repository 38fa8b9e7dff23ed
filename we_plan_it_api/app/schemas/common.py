"""Shared schema building blocks."""

from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model exposing snake_case attributes as camelCase JSON keys.

    ``populate_by_name`` lets services build instances with Python
    names while clients send and receive camelCase.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Priority(str, Enum):
    """Priority of tasks and plans, declared from lowest to highest."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class MessageResponse(BaseModel):
    message: str
