#!/usr/bin/env python3
"""Package a pass document and its assets into a signed .pkpass archive."""

import argparse
import os
import sys
from pathlib import Path

from pass_packaging.lib.config import PackagingConfig
from pass_packaging.lib.credentials import FilePath, SigningCredentials
from pass_packaging.lib.errors import PackagingError
from pass_packaging.lib.logging_config import LOGGER
from pass_packaging.lib.pass_packager import PassPackager
from pass_packaging.lib.signer import SIGNER_KINDS
from pass_packaging.lib.ssm_client import SSMClient


def parse_asset(value: str) -> tuple[str, Path]:
    """Parse NAME=PATH into (name, path)."""
    name, sep, path = value.partition("=")
    if not sep or not name or not path:
        raise argparse.ArgumentTypeError(f"expected NAME=PATH, got {value!r}")
    return name, Path(path)


def load_credentials(args: argparse.Namespace) -> SigningCredentials:
    """Build credentials from SSM or from local files, per the parsed arguments."""
    if args.ssm_project:
        credentials = SSMClient(region=args.region).get_signing_credentials(
            args.ssm_project, args.ssm_account
        )
    else:
        credentials = SigningCredentials(
            wwdr=FilePath(args.wwdr),
            certificate=FilePath(args.certificate),
            private_key=FilePath(args.key),
        )

    if args.password_env:
        if args.password_env not in os.environ:
            raise ValueError(f"environment variable {args.password_env} is not set")
        credentials.key_password = os.environ[args.password_env]

    return credentials


def main() -> int:
    """Generate a signed pass archive.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = argparse.ArgumentParser(description="Generate a signed .pkpass archive")
    parser.add_argument("--pass-json", type=Path, required=True, help="Serialized pass document")
    parser.add_argument(
        "--asset",
        type=parse_asset,
        action="append",
        default=[],
        dest="assets",
        metavar="NAME=PATH",
        help="Asset to include under NAME (repeatable)",
    )
    parser.add_argument("--wwdr", type=Path, help="WWDR certificate (PEM)")
    parser.add_argument("--certificate", type=Path, help="Pass type signing certificate (PEM)")
    parser.add_argument("--key", type=Path, help="Signer private key (PEM)")
    parser.add_argument("--ssm-project", help="Load credentials from SSM under this project")
    parser.add_argument("--ssm-account", help="Account/environment for SSM credentials")
    parser.add_argument("--region", default="eu-west-2", help="AWS region (default: eu-west-2)")
    parser.add_argument(
        "--password-env",
        help="Name of the environment variable holding the key password",
    )
    parser.add_argument("--output-dir", type=Path, help="Archive directory (default: temp dir)")
    parser.add_argument("--pass-name", help="Archive base name (default: random)")
    parser.add_argument(
        "--keep-staged",
        action="store_true",
        help="Keep staged pass.json, manifest.json, signature and assets",
    )
    parser.add_argument(
        "--signer",
        choices=SIGNER_KINDS,
        help="Signature engine (default: PASS_SIGNER or cryptography)",
    )
    args = parser.parse_args()

    if args.ssm_project:
        if not args.ssm_account:
            parser.error("--ssm-account is required with --ssm-project")
    elif not (args.wwdr and args.certificate and args.key):
        parser.error("--wwdr, --certificate and --key are required without --ssm-project")

    try:
        config = PackagingConfig.from_env()
        if args.output_dir:
            config.output_dir = args.output_dir
        if args.pass_name:
            config.pass_name = args.pass_name
        if args.keep_staged:
            config.delete_staged_files = False
        if args.signer:
            config.signer = args.signer

        credentials = load_credentials(args)
        pass_document = args.pass_json.read_bytes()

        result = PassPackager(config).generate(pass_document, args.assets, credentials)

        LOGGER.info("Pass generated: %s", result.archive_path)
        LOGGER.info("  Manifest entries: %d", len(result.manifest))
        if result.staging_dir is not None:
            LOGGER.info("  Staged files kept in: %s", result.staging_dir)
        return 0

    except PackagingError as e:
        LOGGER.error("Pass generation failed: %s", e)
        return 1
    except Exception as e:
        LOGGER.error("Pass generation aborted: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
