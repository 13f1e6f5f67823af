class BrokerBotError(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ProviderUnavailableError(BrokerBotError):
    """An upstream quote provider could not be reached or answered with an error."""

    def __init__(self, provider: str, symbol: str, reason: str):
        self.provider = provider
        self.symbol = symbol
        super().__init__(f"{provider} unavailable for {symbol!r}: {reason}")


class AliasLookupError(BrokerBotError):
    """The persisted alias store could not be read or written."""


class ConfigurationError(BrokerBotError):
    """Required configuration is missing or invalid; the bot must not start."""
