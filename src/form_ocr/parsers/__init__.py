"""Form field parsers - one component per extracted field."""

from .base import FormContext, ParseResult, Rule, normalize_numerals
from .date_parser import DateParser
from .amount_parser import AmountParser
from .slip_parser import SlipNumberParser, ProjectCodeParser
from .item_parser import ItemNameParser
from .payee_parser import PayeeParser

__all__ = [
    'FormContext', 'ParseResult', 'Rule', 'normalize_numerals',
    'DateParser', 'AmountParser', 'SlipNumberParser', 'ProjectCodeParser',
    'ItemNameParser', 'PayeeParser',
]
