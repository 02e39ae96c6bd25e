"""Voice command parsing package."""

from voicebudget.parser.command_parser import (
    normalize_transcript,
    parse_amount,
    parse_command,
)

__all__ = ["normalize_transcript", "parse_amount", "parse_command"]
