"""Address denylist checks (core domain)."""

from __future__ import annotations

import logging
from typing import Optional

from core.config import BlacklistConfig
from core.models import Candidate

LOGGER = logging.getLogger(__name__)


def blacklist_hit(candidate: Candidate, blacklists: BlacklistConfig) -> Optional[str]:
    """Return the name of the list that blocks the candidate, if any."""

    if candidate.address in blacklists.coin_addresses:
        return "coin_addresses"
    if candidate.creator in blacklists.creator_addresses:
        return "creator_addresses"
    return None


def is_blacklisted(candidate: Candidate, blacklists: BlacklistConfig) -> bool:
    """Check both lists and log which one matched for auditing."""

    hit = blacklist_hit(candidate, blacklists)
    if hit is None:
        return False
    if hit == "coin_addresses":
        LOGGER.info("Coin %s is blacklisted (%s)", candidate.address, hit)
    else:
        LOGGER.info("Creator %s of %s is blacklisted (%s)", candidate.creator, candidate.address, hit)
    return True
