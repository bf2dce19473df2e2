import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union

logger = logging.getLogger(__name__)


# ==================== HTTP DATA STRUCTURES ====================
class Method(Enum):
    """Request methods the device understands"""
    GET = "GET"
    PUT = "PUT"
    POST = "POST"
    DELETE = "DELETE"
    HEAD = "HEAD"
    INVALID = "INVALID"


@dataclass
class ParsedRequest:
    """HTTP request representation

    Fields keep their defaults for every stage the parser could not reach.
    When method is INVALID nothing else should be trusted.
    """
    method: Method = Method.INVALID
    path: str = "/"
    http_version_major: int = 1
    http_version_minor: int = 0
    headers: List[str] = field(default_factory=list)
    body: str = ""

    @property
    def version(self) -> Tuple[int, int]:
        return self.http_version_major, self.http_version_minor

    @property
    def is_valid(self) -> bool:
        return self.method is not Method.INVALID

    def append_body(self, text: str) -> None:
        """Add payload that arrived after the request head"""
        self.body += text


# ==================== PARSER LIMITS ====================
class HTTPLimits:
    """Fixed widths and caps of the request format"""
    MAX_METHOD_LENGTH = 7        # longest accepted method token
    VERSION_WIDTH = 8            # "HTTP/X.Y"
    MAX_HEADERS = 20


# Case-folded prefix -> method, checked in order
METHOD_PREFIXES = (
    ("g", Method.GET),
    ("pu", Method.PUT),
    ("po", Method.POST),
    ("d", Method.DELETE),
    ("h", Method.HEAD),
)

_DIGITS = "0123456789"


def classify_method(token: str) -> Method:
    """Map a method token to a Method by prefix.

    Any token starting with "g" is a GET, "pu" a PUT and so on, so "go" or
    "gibberish" both come back as GET.
    """
    token = token.casefold()
    for prefix, method in METHOD_PREFIXES:
        if token.startswith(prefix):
            return method
    return Method.INVALID


def _to_digit(text: str) -> int:
    if len(text) == 1 and text in _DIGITS:
        return int(text)
    return 0


def _trace(sink: Optional[logging.Logger], level: int, msg: str, *args) -> None:
    if sink is not None:
        sink.log(level, msg, *args)


# ==================== REQUEST PARSER ====================
def parse_request(
        buffer: Union[str, bytes],
        diagnostics: Optional[logging.Logger] = None,
        max_headers: int = HTTPLimits.MAX_HEADERS
) -> ParsedRequest:
    """Parse one buffered HTTP request - never raises

    Args:
        buffer: Request text as received so far. Bytes are decoded as UTF-8,
            undecodable sequences are replaced.
        diagnostics: Diagnostics sink. None disables diagnostics.
        max_headers: Header lines kept before the rest are dropped.

    Returns:
        ParsedRequest holding whatever was parsed before the first failure.
    """
    if isinstance(buffer, bytes):
        buffer = buffer.decode("utf-8", errors="replace")
    request = ParsedRequest()

    # Method
    verb_end = buffer.find(" ")
    if verb_end < 1 or verb_end > HTTPLimits.MAX_METHOD_LENGTH:
        _trace(diagnostics, logging.WARNING, "Method delimiter at %d, expected 1..%d",
               verb_end, HTTPLimits.MAX_METHOD_LENGTH)
        return request
    method = classify_method(buffer[:verb_end])
    if method is Method.INVALID:
        _trace(diagnostics, logging.WARNING, "Unknown method token: %r", buffer[:verb_end])
        return request
    request.method = method

    # Path
    rest = buffer[verb_end + 1:]
    path_end = rest.find(" ")
    if path_end == -1:
        _trace(diagnostics, logging.WARNING, "No delimiter after path: %r", rest)
        return request
    request.path = rest[:path_end]

    # Version, format is exactly HTTP/X.Y
    rest = rest[path_end + 1:]
    version = rest[:HTTPLimits.VERSION_WIDTH]
    if not version.startswith("HTTP"):
        _trace(diagnostics, logging.WARNING, "Version not HTTP/X.Y: %r", version)
        return request
    major_start = version.find("/") + 1
    request.http_version_major = _to_digit(version[major_start:major_start + 1])
    request.http_version_minor = _to_digit(version[major_start + 2:major_start + 3])
    _trace(diagnostics, logging.INFO, "Request parsed: %s %s HTTP/%d.%d",
           method.value, request.path, request.http_version_major,
           request.http_version_minor)

    # Headers
    line_end = rest.find("\n")
    rest = rest[line_end + 1:] if line_end != -1 else ""
    header_end = rest.find("\n\n")
    has_body = header_end != -1 and header_end + 2 != len(rest)
    header_text = rest[:header_end] if has_body else rest

    _trace(diagnostics, logging.INFO, "Parsing headers")
    while header_text and not header_text.startswith("\n") and len(request.headers) < max_headers:
        line, _, header_text = header_text.partition("\n")
        request.headers.append(line)
    if header_text.lstrip("\n") and len(request.headers) >= max_headers:
        _trace(diagnostics, logging.WARNING, "Header limit of %d reached", max_headers)
    if len(header_text) > 1:
        _trace(diagnostics, logging.WARNING, "Unparsed headers ignored: %r", header_text)

    # Body
    if has_body:
        request.body = rest[header_end + 2:]
    _trace(diagnostics, logging.INFO, "Headers: %d, body: %d chars",
           len(request.headers), len(request.body))
    return request


def split_header_line(line: str) -> Optional[Tuple[str, str]]:
    """Split a raw "Name: value" line, None if it has no colon"""
    if ":" not in line:
        logger.warning("Bad header format: %s", line)
        return None
    key, value = line.split(":", 1)
    return key.strip(), value.strip()
