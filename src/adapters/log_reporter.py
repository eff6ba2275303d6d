"""Reporter that only writes the sweep summary to the log."""

from __future__ import annotations

import logging

from adapters.report_formatting import format_failure, format_outcome
from core.errors import SweepError
from core.models import SweepOutcome

LOGGER = logging.getLogger(__name__)


class LogReporter:
    async def report(self, outcome: SweepOutcome) -> None:
        LOGGER.info("%s", format_outcome(outcome))

    async def report_failure(self, error: SweepError) -> None:
        LOGGER.error("%s", format_failure(error))
