"""Shared sweep report formatting helpers.

Keeping formatting here prevents drift between reporters and keeps sweep
summaries consistent regardless of delivery channel.
"""

from __future__ import annotations

import html

from core.errors import BatchCommitError, SweepError
from core.models import SweepOutcome

DIVIDER = "──────────────"
MAX_LISTED_PATHS = 10


def _summary_lines(outcome: SweepOutcome) -> list[str]:
    lines = [
        f"Cutoff: {outcome.cutoff.strftime('%Y-%m-%d %H:%M:%S %Z').strip()}",
        f"Matched: {outcome.matched}",
    ]
    if outcome.dry_run:
        lines.append("Dry run: nothing was deleted")
        return lines
    lines.extend(
        [
            f"Deleted: {outcome.committed}",
            f"Batches: {outcome.batches_committed} ok, {outcome.batches_failed} failed",
            f"Attachments: {outcome.blob_deletes_succeeded} deleted, {outcome.blob_deletes_failed} failed",
        ]
    )
    return lines


def _orphan_lines(outcome: SweepOutcome) -> list[str]:
    if not outcome.failed_blob_paths:
        return []
    listed = outcome.failed_blob_paths[:MAX_LISTED_PATHS]
    lines = ["", "Orphaned attachments:"]
    lines.extend(f"- {path}" for path in listed)
    hidden = len(outcome.failed_blob_paths) - len(listed)
    if hidden > 0:
        lines.append(f"... and {hidden} more")
    return lines


def format_outcome(outcome: SweepOutcome, mode: str = "text") -> str:
    """Return the sweep summary formatted for the requested mode."""

    if mode == "text":
        return "\n".join(["Retention sweep finished", DIVIDER, *_summary_lines(outcome), *_orphan_lines(outcome)])
    if mode == "html":
        body = [html.escape(line) for line in [*_summary_lines(outcome), *_orphan_lines(outcome)]]
        return "\n".join(["<b>Retention sweep finished</b>", DIVIDER, *body])
    raise ValueError(f"Unsupported report format: {mode}")


def format_failure(error: SweepError, mode: str = "text") -> str:
    """Return a failure report; batch failures include the partial outcome."""

    lines = [f"Error: {error}"]
    if isinstance(error, BatchCommitError):
        lines.extend(["", *_summary_lines(error.outcome), *_orphan_lines(error.outcome)])

    if mode == "text":
        return "\n".join(["Retention sweep FAILED", DIVIDER, *lines])
    if mode == "html":
        return "\n".join(["<b>Retention sweep FAILED</b>", DIVIDER, *(html.escape(line) for line in lines)])
    raise ValueError(f"Unsupported report format: {mode}")
