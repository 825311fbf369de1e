"""Extension points invoked by the pipeline.

Hooks receive the candidate and may do anything except influence the
pipeline: their return value is ignored.
"""

from __future__ import annotations

import logging
from typing import Protocol

from core.models import Candidate

LOGGER = logging.getLogger(__name__)


class CandidateHook(Protocol):
    async def __call__(self, candidate: Candidate) -> None:
        ...


async def log_security_check(candidate: Candidate) -> None:
    """Default security hook, runs after the blacklist check."""

    LOGGER.debug("Security checks for %s", candidate.address)


async def log_analysis(candidate: Candidate) -> None:
    """Default analysis hook, runs after persistence."""

    LOGGER.debug("Analyzing %s (%s)", candidate.symbol, candidate.address)
