"""Shared schema configuration."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_pascal


class PascalModel(BaseModel):
    """Model serialized with the PascalCase keys the frontend expects.

    Attributes stay snake_case in Python; either form is accepted on input.
    """

    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True)


class RowsAffected(PascalModel):
    """Number of rows a write touched; 0 means nothing matched."""

    rows_affected: int = 0


class OperationResult(PascalModel):
    """Outcome of a write that reports success instead of returning a record."""

    success: bool
    message: str


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str
