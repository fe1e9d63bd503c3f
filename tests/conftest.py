"""Shared fixtures for bounded accumulation tests."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from accumulator import BoundedAccumulator
from app import create_app
from domains import INT8, UINT8
from logging_config import reset_logging
from settings import Settings


@pytest.fixture
def uint8_acc() -> BoundedAccumulator:
    return BoundedAccumulator(domain=UINT8)


@pytest.fixture
def int8_acc() -> BoundedAccumulator:
    return BoundedAccumulator(domain=INT8)


@pytest.fixture
def settings() -> Settings:
    """Small limits so tests stay fast."""
    return Settings(max_steps=100, verification_samples=50)


@pytest.fixture
def client(settings) -> TestClient:
    return TestClient(create_app(settings=settings))


@pytest.fixture
def fresh_logging():
    reset_logging()
    yield
    reset_logging()
