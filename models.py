"""Request and response models for the accumulation API.

Numbers travel as plain JSON ints / floats and are cast into the
requested domain by the core.  Integral domains take JSON integers
only.  A value that does not fit the domain is a client error, while a refused accumulation is an ordinary response
with ``ok: false``.
"""

from __future__ import annotations

from typing import Literal, Union

from pydantic import (
    BaseModel,
    Field,
    StrictFloat,
    StrictInt,
    field_validator,
    model_validator,
)

from accumulator import Direction
from domains import NumericDomain, UnknownDomainError, c_type_names, resolve_domain
from outcome import Ok, Outcome, Overflow

# Strict: no bool -> int or float -> int coercion.
Number = Union[StrictInt, StrictFloat]


# ---------------------------------------------------------------------------
# Domains
# ---------------------------------------------------------------------------

class DomainInfo(BaseModel):
    """Description of one numeric domain."""

    name: str
    kind: Literal["signed", "unsigned", "floating"]
    bits: int
    min: Union[int, float, str]
    max: Union[int, float, str]
    c_types: list[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, domain: NumericDomain) -> "DomainInfo":
        return cls(
            name=domain.name,
            kind=domain.kind.name.lower(),
            bits=domain.bits,
            min=domain.to_python(domain.lo),
            max=domain.to_python(domain.hi),
            c_types=c_type_names(domain),
        )


# ---------------------------------------------------------------------------
# Accumulation
# ---------------------------------------------------------------------------

class AccumulationRequest(BaseModel):
    """Payload for a single bounded accumulation."""

    domain: str = Field(..., min_length=1, description="Domain or C type name")
    start: Number
    step: Number
    steps: StrictInt = Field(..., ge=0, description="Number of applications")
    direction: Direction = Direction.ADD

    @field_validator("domain")
    @classmethod
    def domain_is_known(cls, v: str) -> str:
        try:
            return resolve_domain(v).name
        except UnknownDomainError:
            raise ValueError(f"Unknown numeric domain: {v!r}") from None

    @model_validator(mode="after")
    def integral_domains_take_integers(self) -> "AccumulationRequest":
        if resolve_domain(self.domain).integral:
            for name in ("start", "step"):
                if isinstance(getattr(self, name), float):
                    raise ValueError(
                        f"{name} must be a JSON integer for {self.domain}"
                    )
        return self


class AccumulationResponse(BaseModel):
    domain: str
    direction: Direction
    ok: bool
    result: Union[int, float, str, None] = None
    violation: Literal["overflow", "underflow"] | None = None
    iteration: int | None = None

    @classmethod
    def from_outcome(
        cls, domain: NumericDomain, direction: Direction, outcome: Outcome
    ) -> "AccumulationResponse":
        if isinstance(outcome, Ok):
            return cls(
                domain=domain.name,
                direction=direction,
                ok=True,
                result=domain.to_python(outcome.value),
            )
        return cls(
            domain=domain.name,
            direction=direction,
            ok=False,
            violation="overflow" if isinstance(outcome, Overflow) else "underflow",
            iteration=outcome.iteration,
        )


class DemoRun(BaseModel):
    """The ``steps`` and ``steps + 1`` runs of one driver test."""

    start: Union[int, float, str]
    step: Union[int, float, str]
    steps: int
    within: AccumulationResponse
    beyond: AccumulationResponse


class DemoResponse(BaseModel):
    domain: DomainInfo
    overflow: DemoRun
    underflow: DemoRun
