#!/usr/bin/env python3
"""Generate a throwaway signing chain, encrypted key and icon for local pass builds."""

import argparse
import sys
from pathlib import Path

from pass_packaging.lib.config import FixtureConfig
from pass_packaging.lib.fixture_factory import FixtureFactory
from pass_packaging.lib.logging_config import LOGGER


def main() -> int:
    """Write test fixtures to the output directory.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = argparse.ArgumentParser(description="Generate pass signing test fixtures")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("pass_packaging/tests/fixtures"),
        help="Output directory for fixtures (default: pass_packaging/tests/fixtures)",
    )
    parser.add_argument(
        "--password",
        default="password",
        help="Password protecting the signer key (default: password)",
    )
    parser.add_argument(
        "--no-password",
        action="store_true",
        help="Write the signer key unencrypted",
    )
    parser.add_argument(
        "--pass-type-identifier",
        default=FixtureConfig.pass_type_identifier,
        help=f"Pass type identifier (default: {FixtureConfig.pass_type_identifier})",
    )
    parser.add_argument(
        "--team-identifier",
        default=FixtureConfig.team_identifier,
        help=f"Team identifier (default: {FixtureConfig.team_identifier})",
    )
    args = parser.parse_args()

    try:
        config = FixtureConfig(
            pass_type_identifier=args.pass_type_identifier,
            team_identifier=args.team_identifier,
        )
        password = None if args.no_password else args.password

        LOGGER.info("Creating test fixtures...")
        result = FixtureFactory(config).write_fixtures(args.output_dir, password)

        LOGGER.info("Fixtures created:")
        LOGGER.info("  WWDR cert: %s", result.wwdr_cert_path)
        LOGGER.info("  Signer cert: %s", result.cert_path)
        LOGGER.info("  Signer key: %s", result.key_path)
        LOGGER.info("  Icon: %s", result.icon_path)
        return 0

    except (OSError, ValueError) as e:
        LOGGER.error("Fixture generation failed: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
