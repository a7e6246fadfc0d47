"""
Fixed-length byte strings.

Digests and secrets are plain `bytes` whose length is fixed by the
parameter set they belong to. Construction fails on any length the type
does not list, so a value of an unknown size can never slip into a
container.
"""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic.annotated_handlers import GetCoreSchemaHandler
from pydantic_core import core_schema
from typing_extensions import Self


class BaseBytes(bytes):
    """
    A `bytes` subclass restricted to a known set of lengths.

    Subclasses set one of:
      - `LENGTH`: the exact size in bytes.
      - `LENGTHS`: every accepted size, for types shared by several
        parameter sets.

    and optionally:
      - `REDACTED`: hide the content from `repr` (for secret material).
    """

    LENGTH: ClassVar[int]
    """The exact number of bytes (overridden by subclasses)."""

    LENGTHS: ClassVar[frozenset[int]]
    """The accepted numbers of bytes (overridden by subclasses)."""

    REDACTED: ClassVar[bool] = False
    """Whether `repr` must not show the content."""

    @classmethod
    def lengths(cls) -> frozenset[int]:
        """
        The sizes this type accepts.

        Raises:
            TypeError: If the subclass defines neither `LENGTH` nor `LENGTHS`.
        """
        if hasattr(cls, "LENGTHS"):
            return cls.LENGTHS
        if hasattr(cls, "LENGTH"):
            return frozenset([cls.LENGTH])
        raise TypeError(f"{cls.__name__} must define LENGTH or LENGTHS")

    def __new__(cls, value: bytes | bytearray | memoryview = b"") -> Self:
        """
        Create and validate a new instance.

        Only bytes-like input is accepted. Integers, strings and iterables are
        rejected so that `Digest(32)` or `Digest("ab" * 16)` cannot silently
        produce a value.

        Raises:
            TypeError: If no length is defined or `value` is not bytes-like.
            ValueError: If `value` has a length the type does not accept.
        """
        lengths = cls.lengths()
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise TypeError(f"{cls.__name__} requires bytes-like input, got {type(value).__name__}")

        raw = bytes(value)
        if len(raw) not in lengths:
            if len(lengths) == 1:
                (length,) = lengths
                raise ValueError(f"{cls.__name__} expects exactly {length} bytes, got {len(raw)}")
            raise ValueError(
                f"{cls.__name__} expects one of {sorted(lengths)} bytes, got {len(raw)}"
            )
        return super().__new__(cls, raw)

    @classmethod
    def zero(cls, length: int | None = None) -> Self:
        """
        The all-zero value.

        Args:
            length: The size to use. Required when the type accepts several.
        """
        if length is None:
            lengths = cls.lengths()
            if len(lengths) != 1:
                raise TypeError(f"{cls.__name__} accepts several lengths, pass one to zero()")
            (length,) = lengths
        return cls(bytes(length))

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        """
        Validate instances as-is and raw `bytes` of an accepted length by construction.

        Serialized form (e.g. JSON) is lowercase hex.
        """
        lengths = cls.lengths()
        from_raw = core_schema.chain_schema(
            [
                core_schema.bytes_schema(min_length=min(lengths), max_length=max(lengths)),
                core_schema.no_info_plain_validator_function(cls),
            ]
        )
        return core_schema.union_schema(
            [core_schema.is_instance_schema(cls), from_raw],
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda value: bytes(value).hex()
            ),
        )

    def __repr__(self) -> str:
        name = type(self).__name__
        if self.REDACTED:
            return f"{name}(<redacted>)"
        return f"{name}({bytes(self).hex()})"

    def __hash__(self) -> int:
        # Same bytes under two types are distinct set/dict keys.
        return hash((type(self), bytes(self)))
