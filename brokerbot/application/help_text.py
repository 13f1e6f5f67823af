"""
Static help text shown for '!stonks', '!stonks help' and malformed commands.
"""

HELP_TEXT = "\n".join(
    [
        "Invoke bot with either:",
        "  @BrokerBot <ticker> <ticker> ...",
        "  or",
        "  !stonks <ticker> <ticker> ...",
        "",
        "Prefix crypto assets with $ (e.g. $BTC) and aliases with ? (e.g. ?FAANG).",
        "",
        "Other commands:",
        "  !stonks help",
        "  !stonks alias list",
        "  !stonks alias get ?<alias>",
        "  !stonks alias set ?<alias> <ticker> <ticker> ...",
        "  !stonks alias delete ?<alias>",
    ]
)
