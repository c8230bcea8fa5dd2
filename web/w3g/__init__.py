"""Decoder for Warcraft III .w3g replays."""
from .errors import (DecompressionFailure, MalformedUtf8, UnexpectedEof,
                     UnsupportedEncoding, W3GError)
from .replay import ParserResult, load_w3g, parse_w3g, result_to_dict

__all__ = [
    'DecompressionFailure', 'MalformedUtf8', 'UnexpectedEof',
    'UnsupportedEncoding', 'W3GError', 'ParserResult', 'load_w3g',
    'parse_w3g', 'result_to_dict',
]
