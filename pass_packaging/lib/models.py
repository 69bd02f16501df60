"""Result models for pass packaging operations."""

from dataclasses import dataclass
from pathlib import Path


@dataclass
class PackagingResult:
    """Result from a successful packaging run.

    ``staging_dir`` is None when staged files were deleted after packing.
    """

    archive_path: Path
    pass_name: str
    manifest: dict[str, str]
    staging_dir: Path | None = None


@dataclass
class FixtureResult:
    """Result from test fixture generation.

    Contains file paths for the signing chain and a sample icon asset.
    """

    wwdr_cert_path: Path
    wwdr_key_path: Path
    cert_path: Path
    key_path: Path
    icon_path: Path
    pass_type_identifier: str
    team_identifier: str
