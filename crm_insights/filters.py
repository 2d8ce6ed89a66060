"""Account filtering and filter-choice enumeration."""

from datetime import date, datetime
from typing import Optional

from .models import ALL, Account, Activity, FilterCriteria, FilterOptions


def parse_activity_date(value: str) -> Optional[date]:
    """
    Parse an activity timestamp down to its calendar day.

    Accepts plain ISO dates ("2024-07-15") and ISO datetimes, including a
    trailing "Z".

    Returns:
        The calendar date, or None if the value cannot be parsed
    """
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass

    # Fall back to the date part of timestamps fromisoformat rejects
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def activity_in_window(activity: Activity, start: date, end: date) -> bool:
    """Check if an activity falls within [start, end], inclusive."""
    day = parse_activity_date(activity.date)
    if day is None:
        return False
    return start <= day <= end


def _matches(value: str, wanted: str) -> bool:
    return wanted == ALL or value == wanted


def account_matches(account: Account, criteria: FilterCriteria) -> bool:
    """Check the team, AE, tier and segment filters for one account."""
    return (
        _matches(account.team, criteria.team)
        and _matches(account.ae, criteria.ae)
        and _matches(str(account.tier), criteria.tier)
        and _matches(account.segment, criteria.segment)
    )


def filter_accounts(accounts: list[Account], criteria: FilterCriteria) -> list[Account]:
    """
    Select accounts matching the criteria, pruned to the date window.

    An account is kept if its classification matches and at least one of its
    activities falls inside the window. Kept accounts are returned as copies
    holding only their in-window activities. Input order is preserved and
    the input is never modified.

    Args:
        accounts: Accounts to filter
        criteria: Filter criteria for this request

    Returns:
        Matching accounts with activities restricted to the window
    """
    results = []
    for account in accounts:
        if not account_matches(account, criteria):
            continue

        activities = [
            a for a in account.activities
            if activity_in_window(a, criteria.start_date, criteria.end_date)
        ]
        if not activities:
            continue

        results.append(account.model_copy(update={"activities": activities}))

    return results


def build_filter_options(accounts: list[Account]) -> FilterOptions:
    """
    Enumerate filter choices present in a dataset.

    Teams, AEs and segments keep first-seen order; tiers are sorted.
    """
    def distinct(values: list[str]) -> list[str]:
        return [ALL] + [v for v in dict.fromkeys(values) if v]

    tiers = sorted({str(a.tier) for a in accounts})
    return FilterOptions(
        teams=distinct([a.team for a in accounts]),
        aes=distinct([a.ae for a in accounts]),
        tiers=[ALL] + tiers,
        segments=distinct([a.segment for a in accounts]),
    )
