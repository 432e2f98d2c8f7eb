"""
=============================================================================
CLI ENTRY POINT
=============================================================================

    myOwnWebServer -webRoot=<directory> -webIP=<address> -webPort=<port>

    python -m myownwebserver -webPort=8080 -webRoot=./site -webIP=127.0.0.1

All three arguments are mandatory and may come in any order. Anything
wrong with them (wrong count, unknown flag, duplicate, bad value) prints a
message on standard output and the server is never started.

=============================================================================
EXIT STATUS
=============================================================================

    0   Server ran and was stopped (Ctrl+C, SIGTERM)
    1   Bad arguments, or the listener could not be bound

=============================================================================
"""

import argparse
import sys
from typing import List, Optional

from .config import ServerConfig, ConfigError
from .server import WebServer


REQUIRED_ARGUMENT_COUNT = 3


class ArgumentParser(argparse.ArgumentParser):
    """argparse that raises ConfigError instead of exiting."""

    def error(self, message):
        raise ConfigError(f"Sorry, {message}")


class StoreOnce(argparse.Action):
    """Store the value, rejecting a flag given twice."""

    def __call__(self, parser, namespace, values, option_string=None):
        if getattr(namespace, self.dest) is not None:
            parser.error(f"{option_string} was provided more than once!")
        setattr(namespace, self.dest, values)


def build_parser() -> ArgumentParser:
    """
    Build the argument parser.

    Flags use a single dash and "=":  -webRoot=/var/www
    """
    parser = ArgumentParser(
        prog="myOwnWebServer",
        description="Minimal HTTP/1.1 static file server",
        add_help=False,
        allow_abbrev=False,
    )

    parser.add_argument(
        "-webRoot",
        dest="web_root",
        action=StoreOnce,
        required=True,
        help="Directory to serve files from",
    )

    parser.add_argument(
        "-webIP",
        dest="web_ip",
        action=StoreOnce,
        required=True,
        help="IP address of this machine to listen on",
    )

    parser.add_argument(
        "-webPort",
        dest="web_port",
        action=StoreOnce,
        required=True,
        help="TCP port to listen on",
    )

    return parser


def parse_config(argv: List[str]) -> ServerConfig:
    """
    Turn the command line into a validated ServerConfig.

    Raises:
        ConfigError: With the message to show the user.
    """
    if len(argv) != REQUIRED_ARGUMENT_COUNT:
        raise ConfigError("Please provide 3 command-line arguments.")

    args = build_parser().parse_args(argv)

    config = ServerConfig.from_args(args.web_root, args.web_ip, args.web_port)
    config.validate()
    return config


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    if argv is None:
        argv = sys.argv[1:]

    try:
        config = parse_config(argv)
    except ConfigError as e:
        print(e)
        return 1

    server = WebServer(config)

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
