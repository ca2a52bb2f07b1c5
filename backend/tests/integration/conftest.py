"""Pytest fixtures for API and CLI integration tests."""

import pytest

from samlink.api.deps import build_services
from samlink.config import Settings
from samlink.ingestion.base import CompanyRecord

from fixtures.registry import HONEYWELL_RECORD, FakeCompanies, FakeRegistry


@pytest.fixture
def test_settings():
    """Settings with no inter-strategy delays."""
    return Settings(
        strategy_delay_seconds=0,
        rate_limit_retry_delay_seconds=0,
        sam_api_key="",
        hubspot_access_token="",
    )


@pytest.fixture
def registry():
    return FakeRegistry(
        responses=[[HONEYWELL_RECORD]],
        entities={"HWLL12345678": HONEYWELL_RECORD},
    )


@pytest.fixture
def companies():
    return FakeCompanies(
        [
            CompanyRecord(id="1", name="Honeywell", state="NC"),
            CompanyRecord(id="2", name="Nobody Holdings"),
        ]
    )


@pytest.fixture
def services(test_settings, registry, companies):
    return build_services(test_settings, registry=registry, companies=companies)
