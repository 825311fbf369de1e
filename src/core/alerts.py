"""Alert text for newly stored candidates.

The text is plain: the Bot API is called without a parse mode, so nothing in
a coin's name or symbol can break formatting.
"""

from __future__ import annotations

from core.models import Candidate


def format_candidate_alert(candidate: Candidate) -> str:
    """Return the message announcing a newly stored coin."""

    lines = [
        "New coin found:",
        f"Symbol: {candidate.symbol}",
        f"Contract: {candidate.address}",
        f"Liquidity: {candidate.initial_liquidity:.2f}",
    ]
    return "\n".join(lines) + "\n"
