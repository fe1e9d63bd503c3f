"""FastAPI endpoints for bounded accumulation.

Routes
------
GET    /domains                 List the numeric domains
GET    /domains/{name}          Describe one domain (name or C type)
GET    /domains/{name}/demo     Run the overflow / underflow driver tests
POST   /accumulate              Run one bounded accumulation

A refused accumulation is a normal 200 response with ``ok: false``.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query

from accumulator import bounded_accumulate
from domains import DOMAINS, DomainValueError, NumericDomain, UnknownDomainError, resolve_domain
from logging_config import get_logger
from models import (
    AccumulationRequest,
    AccumulationResponse,
    DemoResponse,
    DemoRun,
    DomainInfo,
)
from report import DomainRun, run_overflow_test, run_underflow_test
from settings import Settings

logger = get_logger(__name__)

domains_router = APIRouter(prefix="/domains", tags=["domains"])
accumulate_router = APIRouter(prefix="/accumulate", tags=["accumulate"])

# The settings instance is injected by the app factory (see app.py).
_settings: Settings | None = None


def set_settings(settings: Settings) -> None:
    """Inject the settings instance. Called once at app startup."""
    global _settings
    _settings = settings


def get_settings() -> Settings:
    assert _settings is not None, "Settings not initialized"
    return _settings


# ---------------------------------------------------------------------------
# Response helpers
# ---------------------------------------------------------------------------

def _lookup(name: str) -> NumericDomain:
    try:
        return resolve_domain(name)
    except UnknownDomainError:
        raise HTTPException(status_code=404, detail=f"Domain not found: {name}")


def _demo_run(run: DomainRun) -> DemoRun:
    domain = run.domain
    return DemoRun(
        start=domain.to_python(run.start),
        step=domain.to_python(run.step),
        steps=run.steps,
        within=AccumulationResponse.from_outcome(domain, run.direction, run.within),
        beyond=AccumulationResponse.from_outcome(domain, run.direction, run.beyond),
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@domains_router.get("", response_model=list[DomainInfo])
def list_domains() -> list[DomainInfo]:
    """List every numeric domain."""
    return [DomainInfo.from_domain(d) for d in DOMAINS.values()]


@domains_router.get("/{name}", response_model=DomainInfo)
def get_domain(name: str) -> DomainInfo:
    """Describe a single domain."""
    return DomainInfo.from_domain(_lookup(name))


@domains_router.get("/{name}/demo", response_model=DemoResponse)
def demo(
    name: str,
    steps: int | None = Query(default=None, ge=1, description="Defaults to settings"),
) -> DemoResponse:
    """Run the overflow and underflow driver tests for one domain."""
    domain = _lookup(name)
    count = steps if steps is not None else get_settings().default_steps
    return DemoResponse(
        domain=DomainInfo.from_domain(domain),
        overflow=_demo_run(run_overflow_test(domain, count)),
        underflow=_demo_run(run_underflow_test(domain, count)),
    )


@accumulate_router.post("", response_model=AccumulationResponse)
def accumulate(payload: AccumulationRequest) -> AccumulationResponse:
    """Run one bounded accumulation."""
    settings = get_settings()
    if payload.steps > settings.max_steps:
        raise HTTPException(
            status_code=422,
            detail=f"steps must be <= {settings.max_steps}, got {payload.steps}",
        )

    domain = resolve_domain(payload.domain)
    try:
        outcome = bounded_accumulate(
            domain, payload.start, payload.step, payload.steps, payload.direction
        )
    except DomainValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    logger.info(
        "%s %s start=%s step=%s steps=%d -> %s",
        payload.direction.value,
        domain,
        payload.start,
        payload.step,
        payload.steps,
        "ok" if outcome.ok else type(outcome).__name__.lower(),
    )
    return AccumulationResponse.from_outcome(domain, payload.direction, outcome)
