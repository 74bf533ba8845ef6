"""Command line and environment configuration."""
import argparse
import os
import re
import sys
from typing import NamedTuple, Optional

from . import __version__

BANNER = f"ghb0t - {__version__}"
DEFAULT_INTERVAL = "30s"
DEFAULT_PORT = 8080

_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1,
    "m": 60,
    "h": 3600,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


class Config(NamedTuple):
    token: str
    interval: float
    webhook: bool = False
    port: int = DEFAULT_PORT
    secret: Optional[str] = None
    debug: bool = False


def parse_duration(value):
    """Parse a duration such as ``30s``, ``1m`` or ``1h30m`` into seconds."""
    text = value.strip()
    if not text:
        raise ValueError("empty duration")
    seconds = 0.0
    position = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        seconds += float(match.group(1)) * _UNITS[match.group(2)]
        position = match.end()
    if position != len(text):
        raise ValueError(f"invalid duration {value!r}")
    return seconds


def build_parser():
    parser = argparse.ArgumentParser(prog="ghbot", description=BANNER)
    parser.add_argument("--token", default=os.environ.get("GH_AUTH", ""),
                        help="GitHub API token (default: $GH_AUTH)")
    parser.add_argument("--interval", default=DEFAULT_INTERVAL,
                        help="check interval (ex. 5ms, 10s, 1m, 3h)")
    parser.add_argument("--webhook", action="store_true",
                        help="handle github webhook events instead of "
                             "checking for notifications")
    parser.add_argument("--port",
                        default=os.environ.get("PORT") or str(DEFAULT_PORT),
                        help="webhook listen port (default: $PORT or 8080)")
    parser.add_argument("--secret", default=os.environ.get("GH_SECRET"),
                        help="webhook secret used to verify deliveries "
                             "(default: $GH_SECRET)")
    parser.add_argument("-d", "--debug", action="store_true",
                        help="run in debug mode")
    parser.add_argument("-v", "--version", action="store_true",
                        help="print version and exit")
    return parser


def usage_and_exit(parser, message, status):
    if message:
        sys.stderr.write(f"{message}\n\n")
    parser.print_help(sys.stderr)
    sys.exit(status)


def load_config(argv=None):
    """Parse *argv*, exiting on ``--version`` or unusable settings."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.version:
        print(__version__)
        sys.exit(0)
    if not args.token:
        usage_and_exit(parser, "GitHub token cannot be empty.", 1)
    try:
        interval = parse_duration(args.interval)
    except ValueError as exc:
        parser.exit(1, f"parsing {args.interval} as duration failed: {exc}\n")
    if interval <= 0:
        parser.exit(1, f"interval must be positive, got {args.interval}\n")
    try:
        port = int(args.port)
    except ValueError:
        parser.exit(1, f"invalid port {args.port!r}\n")
    return Config(
        token=args.token,
        interval=interval,
        webhook=args.webhook,
        port=port,
        secret=args.secret or None,
        debug=args.debug,
    )
