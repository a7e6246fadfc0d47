"""Reusable, strict base models for the signature schemes."""

from pydantic import BaseModel, ConfigDict


class StrictBaseModel(BaseModel):
    """
    A strict, immutable pydantic base model.

    Fields are validated without coercion, unknown fields are rejected and
    instances cannot be mutated after construction. Private attributes
    (leading underscore) are exempt from freezing and hold the little mutable
    state the schemes need, such as consumption flags.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        strict=True,
        validate_default=True,
    )
