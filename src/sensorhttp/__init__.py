"""
SensorHTTP - Best-effort HTTP request parsing for sensor devices
"""

__version__ = "1.0.0"

# Public API
from .parser import Method, ParsedRequest, HTTPLimits, parse_request, split_header_line
from .config import Config

__all__ = [
    'Method', 'ParsedRequest', 'HTTPLimits', 'parse_request',
    'split_header_line', 'Config', '__version__'
]
