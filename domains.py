"""
Numeric domains for bounded accumulation.

A domain is one concrete fixed-width representation (a NumPy scalar
type) together with its statically known MIN and MAX.  Python's own
``int`` never overflows, so every value that flows through the
accumulator is first cast into its domain's scalar type and all
arithmetic happens there.

The set of domains is closed: the registry below is the dispatch table
that every caller resolves through.
"""

from __future__ import annotations

import operator
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

import numpy as np


class DomainKind(Enum):
    SIGNED = auto()
    UNSIGNED = auto()
    FLOATING = auto()


class DomainValueError(ValueError):
    """Raised when a value cannot be represented in a domain."""


class UnknownDomainError(KeyError):
    """Raised when a domain key is not in the registry."""


@dataclass(frozen=True)
class NumericDomain:
    """
    A numeric representation with inclusive range [lo, hi].

    For floating domains ``lo`` is the most negative finite value, not
    the smallest positive normal.
    """

    name: str
    dtype: type

    def __post_init__(self):
        if not (
            np.issubdtype(self.dtype, np.integer)
            or np.issubdtype(self.dtype, np.floating)
        ):
            raise ValueError(
                f"dtype must be a NumPy integer or floating type, got {self.dtype!r}"
            )

    # -- limits -----------------------------------------------------------

    @property
    def kind(self) -> DomainKind:
        if np.issubdtype(self.dtype, np.floating):
            return DomainKind.FLOATING
        if np.issubdtype(self.dtype, np.signedinteger):
            return DomainKind.SIGNED
        return DomainKind.UNSIGNED

    @property
    def integral(self) -> bool:
        return self.kind is not DomainKind.FLOATING

    @property
    def signed(self) -> bool:
        return self.kind is not DomainKind.UNSIGNED

    @property
    def bits(self) -> int:
        """Storage width in bits."""
        return np.dtype(self.dtype).itemsize * 8

    @property
    def _info(self):
        if self.integral:
            return np.iinfo(self.dtype)
        return np.finfo(self.dtype)

    @property
    def lo(self) -> Any:
        return self.dtype(self._info.min)

    @property
    def hi(self) -> Any:
        return self.dtype(self._info.max)

    # -- values -----------------------------------------------------------

    def contains(self, value: Any) -> bool:
        try:
            self.cast(value)
        except DomainValueError:
            return False
        return True

    def cast(self, value: Any) -> Any:
        """Coerce ``value`` into a scalar of this domain, or raise."""
        if isinstance(value, (bool, np.bool_)) or not isinstance(
            value, (int, float, np.number)
        ):
            raise DomainValueError(f"{value!r} is not a number")

        if self.integral:
            return self._cast_integral(value)

        try:
            with np.errstate(over="ignore", invalid="ignore"):
                converted = self.dtype(value)
        except (TypeError, ValueError, OverflowError) as e:
            raise DomainValueError(
                f"{value!r} is not representable as {self.name}"
            ) from e
        if not np.isfinite(converted):
            raise DomainValueError(
                f"{value!r} is outside the finite range of {self.name}"
            )
        return converted

    def _cast_integral(self, value: Any) -> Any:
        try:
            whole = operator.index(value)
        except TypeError:
            if not float(value).is_integer():
                raise DomainValueError(
                    f"{value!r} is not an integer value for {self.name}"
                ) from None
            whole = int(value)

        info = self._info
        if not info.min <= whole <= info.max:
            raise DomainValueError(
                f"{whole} is outside bounds [{info.min}, {info.max}] of {self.name}"
            )
        return self.dtype(whole)

    def to_python(self, value: Any) -> int | float | str:
        """Plain Python value for reporting and JSON."""
        if self.integral:
            return int(value)
        if abs(value) <= np.finfo(np.float64).max:
            return float(value)
        # longdouble beyond float64 range
        return str(value)

    def __str__(self) -> str:
        return self.name


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

INT8 = NumericDomain("int8", np.int8)
INT16 = NumericDomain("int16", np.int16)
INT32 = NumericDomain("int32", np.int32)
INT64 = NumericDomain("int64", np.int64)
UINT8 = NumericDomain("uint8", np.uint8)
UINT16 = NumericDomain("uint16", np.uint16)
UINT32 = NumericDomain("uint32", np.uint32)
UINT64 = NumericDomain("uint64", np.uint64)
FLOAT32 = NumericDomain("float32", np.float32)
FLOAT64 = NumericDomain("float64", np.float64)
LONGDOUBLE = NumericDomain("longdouble", np.longdouble)

DOMAINS: dict[str, NumericDomain] = {
    d.name: d
    for d in (
        INT8, INT16, INT32, INT64,
        UINT8, UINT16, UINT32, UINT64,
        FLOAT32, FLOAT64, LONGDOUBLE,
    )
}

# C/C++ primitives under the LP64 data model, in the order the
# classic overflow/underflow exercise runs them.
C_TYPES: dict[str, NumericDomain] = {
    "char": INT8,
    "wchar_t": INT32,
    "short int": INT16,
    "int": INT32,
    "long": INT64,
    "long long": INT64,
    "unsigned char": UINT8,
    "unsigned short int": UINT16,
    "unsigned int": UINT32,
    "unsigned long": UINT64,
    "unsigned long long": UINT64,
    "float": FLOAT32,
    "double": FLOAT64,
    "long double": LONGDOUBLE,
}


def resolve_domain(key: NumericDomain | str) -> NumericDomain:
    """Look up a domain by registry name or C type name."""
    if isinstance(key, NumericDomain):
        return key
    if key in DOMAINS:
        return DOMAINS[key]
    if key in C_TYPES:
        return C_TYPES[key]
    raise UnknownDomainError(f"unknown numeric domain: {key!r}")


def c_type_names(domain: NumericDomain) -> list[str]:
    return [name for name, d in C_TYPES.items() if d == domain]
