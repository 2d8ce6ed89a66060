"""Shared fixtures for the test suite."""

import sys
from datetime import date
from pathlib import Path
from typing import Any, Optional

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from crm_insights.config import Settings
from crm_insights.models import Account, Activity, FilterCriteria


class FakeLLM:
    """Stand-in for LLMClient that records calls instead of hitting the API."""

    def __init__(
        self,
        fragments: Optional[list[str]] = None,
        structured: Any = None,
        stream_error: Optional[Exception] = None,
        structured_error: Optional[Exception] = None,
        configured: bool = True,
    ):
        self.fragments = fragments if fragments is not None else []
        self.structured = structured
        self.stream_error = stream_error
        self.structured_error = structured_error
        self.configured = configured
        self.stream_calls: list[tuple[str, str]] = []
        self.structured_calls: list[dict[str, Any]] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def stream_text(self, system, content, max_tokens=None):
        self.stream_calls.append((system, content))
        for fragment in self.fragments:
            yield fragment
        if self.stream_error:
            raise self.stream_error

    async def generate_structured(self, system, content, schema, tool_name, max_tokens=None):
        self.structured_calls.append(
            {"system": system, "content": content, "schema": schema, "tool_name": tool_name}
        )
        if self.structured_error:
            raise self.structured_error
        return self.structured


SENTIMENT_PAYLOAD = {
    "overallScore": 0.4,
    "summary": "Mixed",
    "keyMoments": [
        {
            "quote": "A single source of truth for reporting.",
            "sentiment": "Positive",
            "accountName": "Innovate Corp",
        }
    ],
}


def make_activity(id: str, type: str, day: str, content: str = "Content") -> Activity:
    return Activity(id=id, type=type, date=day, summary=f"Summary {id}", content=content)


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, llm_api_key="test-key")


@pytest.fixture
def innovate_corp() -> Account:
    return Account(
        id="acc_001",
        name="Innovate Corp",
        ae="John Smith",
        team="Giants",
        tier=1,
        segment="Agency",
        activities=[
            make_activity("act_001a", "meeting", "2024-07-15", "Mark: Data fragmentation is our biggest issue."),
            make_activity("act_001b", "email", "2024-07-16", "Subject: Following up on our chat"),
            make_activity("act_001c", "note", "2024-07-20", "The budget is approved for Q3."),
        ],
    )


@pytest.fixture
def accounts(innovate_corp) -> list[Account]:
    return [
        innovate_corp,
        Account(
            id="acc_002",
            name="Quantum Solutions",
            ae="John Smith",
            team="Giants",
            tier=2,
            segment="ISV",
            activities=[
                make_activity("act_002a", "note", "2024-06-20"),
                make_activity("act_002b", "meeting", "2024-06-27", "Jane: This is impressive."),
            ],
        ),
        Account(
            id="acc_003",
            name="NextGen Logistics",
            ae="Alice Doe",
            team="Jets",
            tier=3,
            segment="Franchise/Multi-location",
            activities=[
                make_activity("act_003a", "email", "2024-07-01"),
                make_activity("act_003b", "meeting", "2024-07-05", "Tom: I'm concerned about the cost."),
            ],
        ),
    ]


@pytest.fixture
def july_criteria() -> FilterCriteria:
    return FilterCriteria(start_date=date(2024, 7, 1), end_date=date(2024, 7, 31))


@pytest.fixture
def wide_criteria() -> FilterCriteria:
    return FilterCriteria(start_date=date(2024, 1, 1), end_date=date(2024, 12, 31))
