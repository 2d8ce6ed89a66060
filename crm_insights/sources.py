"""Account data sources and record normalization."""

import json
import logging
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Union

from .models import SEGMENTS, UNASSIGNED, UNCATEGORIZED, Account, Activity

logger = logging.getLogger(__name__)

SAMPLE_DATA_PATH = Path(__file__).parent / "data" / "sample_accounts.json"
DEFAULT_TIER = 3


def _first(record: dict[str, Any], *keys: str) -> Any:
    """Return the first non-empty value among the given keys."""
    for key in keys:
        value = record.get(key)
        if value not in (None, ""):
            return value
    return None


def _normalize_tier(value: Any) -> int:
    try:
        tier = int(value)
    except (TypeError, ValueError):
        return DEFAULT_TIER
    return tier if 1 <= tier <= 5 else DEFAULT_TIER


def _normalize_segment(value: Any) -> str:
    if value in (None, ""):
        return UNCATEGORIZED
    if value not in SEGMENTS and value != UNCATEGORIZED:
        logger.info("Unrecognised segment %r mapped to %s", value, UNCATEGORIZED)
        return UNCATEGORIZED
    return value


def _normalize_type(value: Any) -> str:
    kind = str(value or "").strip().upper()
    if kind in ("CALL", "MEETING"):
        return "meeting"
    if kind == "EMAIL":
        return "email"
    return "note"


def normalize_activity(record: dict[str, Any]) -> Activity:
    """Map a raw activity record onto an Activity."""
    return Activity(
        id=str(_first(record, "activity_id", "id") or uuid.uuid4().hex[:9]),
        type=_normalize_type(record.get("type")),
        date=str(_first(record, "created_at", "date") or ""),
        summary=str(_first(record, "subject", "title", "summary") or "Activity Note"),
        content=str(_first(record, "details", "transcript", "content", "body") or "No content provided."),
    )


def normalize_account(record: dict[str, Any]) -> Account:
    """
    Map a raw account record onto an Account.

    Accepts the native field names as well as common CRM export aliases.
    Missing ownership falls back to "Unassigned", a missing or unknown
    segment to "Uncategorized" and an invalid tier to 3.
    """
    return Account(
        id=str(_first(record, "account_id", "id") or uuid.uuid4().hex),
        name=str(_first(record, "company_name", "name", "account_name") or "Unknown Company"),
        ae=str(_first(record, "salesperson_name", "salesperson", "ae") or UNASSIGNED),
        team=str(_first(record, "sales_team", "team_name", "team") or UNASSIGNED),
        tier=_normalize_tier(record.get("tier")),
        segment=_normalize_segment(_first(record, "market_segment", "segment")),
        activities=[normalize_activity(a) for a in _dict_items(record.get("activities"))],
    )


def _dict_items(value: Any) -> list[dict[str, Any]]:
    """Keep the dict entries of a list; anything else yields nothing."""
    if not isinstance(value, list):
        return []
    items = [item for item in value if isinstance(item, dict)]
    if len(items) != len(value):
        logger.warning("Skipped %d non-object record(s)", len(value) - len(items))
    return items


def extract_records(data: Any) -> list[dict[str, Any]]:
    """Pull the account list out of a list or an {"accounts"|"data": [...]} object."""
    if isinstance(data, dict):
        data = data.get("accounts") or data.get("data")
    return _dict_items(data)


class AccountSource(ABC):
    """Abstract interface for fetching accounts with their activities."""

    @abstractmethod
    async def fetch_accounts(self) -> list[Account]:
        """
        Fetch all accounts.

        Returns:
            List of Account objects, possibly empty
        """
        pass

    async def close(self) -> None:
        """Close any open connections."""


class StaticAccountSource(AccountSource):
    """Serves a fixed, in-memory list of accounts."""

    def __init__(self, accounts: list[Account]):
        self.accounts = list(accounts)

    async def fetch_accounts(self) -> list[Account]:
        return list(self.accounts)


class JsonFileAccountSource(AccountSource):
    """Reads accounts from a JSON export file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    async def fetch_accounts(self) -> list[Account]:
        return load_accounts_file(self.path)


def load_accounts_file(path: Union[str, Path]) -> list[Account]:
    """Load and normalize account records from a JSON file."""
    with open(path, encoding="utf-8") as f:
        raw = json.load(f)
    return [normalize_account(record) for record in extract_records(raw)]


def load_sample_accounts() -> list[Account]:
    """Load the bundled demo dataset."""
    return load_accounts_file(SAMPLE_DATA_PATH)
