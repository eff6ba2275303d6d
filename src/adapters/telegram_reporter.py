"""Telegram Bot API sweep reporter.

Uses the Bot API for delivery so sweep summaries land in an operator chat.
"""

from __future__ import annotations

import asyncio
import json
import urllib.error
import urllib.request

from adapters.report_formatting import format_failure, format_outcome
from core.errors import SweepError
from core.models import SweepOutcome


class TelegramBotReporter:
    """Reporter adapter that sends sweep summaries via the Telegram Bot API."""

    def __init__(self, bot_token: str, chat_id: str, report_noop: bool = False) -> None:
        self._bot_token = bot_token
        self._chat_id = chat_id
        self._report_noop = report_noop

    def _endpoint(self) -> str:
        # The Bot API endpoint is deterministic and derived from the token.
        return f"https://api.telegram.org/bot{self._bot_token}/sendMessage"

    def _post(self, text: str) -> None:
        payload = {
            "chat_id": self._chat_id,
            "text": text,
            "parse_mode": "HTML",
            "disable_web_page_preview": True,
        }
        data = json.dumps(payload).encode("utf-8")
        request = urllib.request.Request(self._endpoint(), data=data, method="POST")
        request.add_header("Content-Type", "application/json")
        try:
            with urllib.request.urlopen(request, timeout=10):
                pass
        except urllib.error.HTTPError as e:
            body = e.read().decode("utf-8", errors="replace")
            raise RuntimeError(f"Bot API error {e.code}: {body}") from e

    async def report(self, outcome: SweepOutcome) -> None:
        """Send the sweep summary; quiet no-op runs are skipped by default."""

        if outcome.is_noop and not self._report_noop:
            return
        await asyncio.to_thread(self._post, format_outcome(outcome, mode="html"))

    async def report_failure(self, error: SweepError) -> None:
        await asyncio.to_thread(self._post, format_failure(error, mode="html"))
