"""
Ticker classification and token clean-up for inbound commands.
Pure functions with no I/O and no infrastructure imports.
"""

from typing import Iterable

from brokerbot.domain.entities.quote import AssetClass, ClassifiedTicker

CRYPTO_MARKER = "$"
ALIAS_MARKER = "?"
MENTION_MARKERS = ("@", "<@")


def classify(token: str) -> ClassifiedTicker:
    """Map a raw token to its asset class and normalized symbol.

    '$btc' -> (CRYPTO, 'BTC'); 'aapl' -> (STOCK, 'AAPL').
    """
    if token.startswith(CRYPTO_MARKER):
        return ClassifiedTicker(token[len(CRYPTO_MARKER):].upper(), AssetClass.CRYPTO)
    return ClassifiedTicker(token.upper(), AssetClass.STOCK)


def remove_mentions(tokens: Iterable[str]) -> list[str]:
    return [t for t in tokens if not t.startswith(MENTION_MARKERS)]


def canonicalize(tokens: Iterable[str]) -> list[str]:
    return [t.upper() for t in tokens]


def dedupe(tokens: Iterable[str]) -> list[str]:
    """Drop repeated tokens, keeping the order of first appearance."""
    return list(dict.fromkeys(tokens))
