"""Heuristic acceptance filter (core domain)."""

from __future__ import annotations

from datetime import datetime
from typing import List

from core.config import FilterConfig
from core.models import Candidate


def rejection_reasons(candidate: Candidate, filters: FilterConfig, now: datetime) -> List[str]:
    """Return every failing check as a human-readable reason.

    All bounds are closed: a value exactly on the threshold passes. The age
    check only passes when the migration instant was actually parsed and is
    not in the future.
    """

    reasons: List[str] = []
    if candidate.initial_liquidity < filters.min_liquidity:
        reasons.append(f"liquidity {candidate.initial_liquidity:.2f} < {filters.min_liquidity:.2f}")
    if candidate.creator_fee > filters.max_creator_fee:
        reasons.append(f"creator fee {candidate.creator_fee:.2f} > {filters.max_creator_fee:.2f}")
    if candidate.holders < filters.min_holders:
        reasons.append(f"holders {candidate.holders} < {filters.min_holders}")

    if not candidate.migrated_at_known:
        reasons.append("migration time unknown")
    else:
        elapsed = now - candidate.migrated_at
        if elapsed.total_seconds() < 0:
            reasons.append("migration time in the future")
        elif elapsed < filters.min_age:
            reasons.append(f"age {int(elapsed.total_seconds())}s < {int(filters.min_age.total_seconds())}s")
    return reasons


def passes_filters(candidate: Candidate, filters: FilterConfig, now: datetime) -> bool:
    return not rejection_reasons(candidate, filters, now)
