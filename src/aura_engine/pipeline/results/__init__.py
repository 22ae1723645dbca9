"""Best-effort recovery of structured payloads from model replies."""

from .extraction import (
    BlockGrammar,
    DelimitedFieldGrammar,
    JsonGrammar,
    extract,
    parse_json_with_repair,
    segment_prose,
)
from .parsers import ParseContext, parse_payload

__all__ = [
    "BlockGrammar",
    "DelimitedFieldGrammar",
    "JsonGrammar",
    "ParseContext",
    "extract",
    "parse_json_with_repair",
    "parse_payload",
    "segment_prose",
]
