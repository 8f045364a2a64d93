"""Command line entrypoint: print the DSN for a connection config file."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from .config import load_config, validate_connection_config
from .dsn import DSNBuilder
from .errors import ConfigError, RegistrationConflictError, TLSProfileBuildError
from .registry import TLSProfileRegistry

LOG = logging.getLogger(__name__)

EXIT_TLS_ERROR = 1
EXIT_CONFIG_ERROR = 2


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="securedsn",
        description="Validate a MySQL connection config and print its DSN.",
    )
    parser.add_argument("config", type=Path, help="Path to a .toml or .json connection config")
    parser.add_argument(
        "--validate-only",
        action="store_true",
        help="Validate the config and exit without building a DSN",
    )
    parser.add_argument(
        "--show-profile",
        action="store_true",
        help="Also print the registered TLS profile, if any",
    )
    parser.add_argument(
        "--lenient",
        action="store_true",
        help="Drop the tls parameter instead of failing when certificates cannot be parsed",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and return its exit status."""

    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = validate_connection_config(load_config(args.config))
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    if args.validate_only:
        print(f"{args.config}: ok")
        return 0

    builder = DSNBuilder(TLSProfileRegistry(), strict=not args.lenient)
    try:
        dsn = builder.build(config)
    except (TLSProfileBuildError, RegistrationConflictError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_TLS_ERROR
    print(dsn)

    if args.show_profile:
        registry = builder.registry
        for name in registry.names():
            profile = registry.get(name)
            if profile is None:
                continue
            print(f"[{name}]")
            for key, value in profile.summary().items():
                print(f"{key} = {value}")
    LOG.debug("Built DSN for %s:%s", config.resolved_host, config.resolved_port)
    return 0


__all__ = ["main", "parse_args"]
