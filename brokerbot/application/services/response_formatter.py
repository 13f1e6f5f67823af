"""
Application service: renders quote results as platform-neutral embeds.

Precision policy: prices and percentages always use two decimals, no trimming.
In test mode every reply is tagged with a per-run prefix so concurrent test
runs against the same channel can tell their replies apart.
"""

import random
import string
from typing import Optional
from urllib.parse import quote_plus

from brokerbot.domain.entities.message import Embed, EmbedField
from brokerbot.domain.entities.quote import QuoteResult

NO_DATA = "No Data"
SEARCH_URL = "https://www.google.com/search?q={}"


def random_tag(length: int = 6) -> str:
    return "".join(random.choices(string.ascii_letters, k=length))


def format_price(result: QuoteResult) -> str:
    text = f"${result.price:.2f}"
    if result.shows_change:
        text = f"{text} ({result.change_percent:.2f}%)"
    return text


class ResponseFormatter:
    def __init__(self, test_tag: Optional[str] = None) -> None:
        self._test_tag = test_tag

    @property
    def test_tag(self) -> Optional[str]:
        return self._test_tag

    def format_text(self, text: str) -> str:
        if self._test_tag:
            return f"{self._test_tag}: {text}"
        return text

    def format_single(self, result: QuoteResult) -> Embed:
        description = f"Latest Quote: {format_price(result)}" if result.has_data else NO_DATA
        return Embed(
            title=result.display_name,
            url=SEARCH_URL.format(quote_plus(result.symbol)),
            description=description,
            footer=self._test_tag,
        )

    def format_multiple(self, results: list[QuoteResult]) -> Embed:
        fields = tuple(
            EmbedField(
                name=r.display_name,
                value=format_price(r) if r.has_data else NO_DATA,
            )
            for r in results
        )
        return Embed(fields=fields, footer=self._test_tag)

    def format_results(self, results: list[QuoteResult]) -> Embed:
        if len(results) == 1:
            return self.format_single(results[0])
        return self.format_multiple(results)
