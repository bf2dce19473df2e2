import argparse
import logging
import sys
from dataclasses import replace
from typing import List, Optional

from .config import Config
from .parser import parse_request, ParsedRequest

logger = logging.getLogger(__name__)


def format_request(request: ParsedRequest) -> str:
    """Human readable dump of a parsed request"""
    lines = [
        f"method: {request.method.value}",
        f"path: {request.path}",
        f"version: {request.http_version_major}.{request.http_version_minor}",
    ]
    lines.extend(f"header: {header}" for header in request.headers)
    lines.append(f"body: {len(request.body)} chars")
    return "\n".join(lines)


def build_arg_parser() -> argparse.ArgumentParser:
    arg_parser = argparse.ArgumentParser(
        prog="sensorhttp",
        description="Parse captured HTTP requests the way the sensor device does"
    )
    arg_parser.add_argument("files", nargs="*", default=["-"],
                            help="request captures, '-' reads stdin (default)")
    arg_parser.add_argument("--diagnostics", action="store_true", default=None,
                            help="log parser trace lines")
    arg_parser.add_argument("--max-headers", type=int, default=None,
                            help="header lines kept per request")
    return arg_parser


def read_capture(name: str) -> bytes:
    if name == "-":
        return sys.stdin.buffer.read()
    with open(name, "rb") as f:
        return f.read()


# ==================== MAIN FUNCTION ====================
def main(argv: Optional[List[str]] = None) -> int:
    """Main function"""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    args = build_arg_parser().parse_args(argv)

    try:
        config = Config.from_env()
        overrides = {}
        if args.diagnostics is not None:
            overrides["diagnostics"] = args.diagnostics
        if args.max_headers is not None:
            overrides["max_headers"] = args.max_headers
        config = replace(config, **overrides)
    except ValueError as e:
        logger.error("Bad configuration: %s", e)
        return 1

    status = 0
    for name in args.files:
        try:
            raw = read_capture(name)
        except OSError as e:
            logger.error("Cannot read %s: %s", name, e)
            return 1

        request = parse_request(raw, config.diagnostics_logger(), config.max_headers)
        if len(args.files) > 1:
            print(f"== {name}")
        print(format_request(request))
        if not request.is_valid:
            logger.warning("Invalid request in %s", name)
            status = 2
    return status


if __name__ == "__main__":
    sys.exit(main())
