from __future__ import annotations

from decimal import Decimal
from typing import Any, Iterable


class ParameterBinder:
    """
    Turns ``(value, type)`` pairs into a positional parameter tuple.

    ``None`` binds as SQL NULL for any type. Anything else must already be an
    instance of the declared type (bool is not accepted for int); a mismatch
    raises TypeError before the statement runs.
    """

    def bind(self, pairs: Iterable[tuple[Any, type]]) -> tuple:
        return tuple(self.bind_one(i, value, typ) for i, (value, typ) in enumerate(pairs, start=1))

    def bind_one(self, index: int, value: Any, typ: type) -> Any:
        if value is None:
            return None
        if typ is int and isinstance(value, bool):
            raise TypeError(f"parameter {index}: bool given where int expected")
        if not isinstance(value, typ):
            raise TypeError(
                f"parameter {index}: expected {typ.__name__}, got {type(value).__name__} ({value!r})"
            )
        if typ is Decimal:
            return value.quantize(Decimal("0.01"))
        return value
