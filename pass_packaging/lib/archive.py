"""Flat zip assembly of a staging directory."""

import zipfile
from pathlib import Path

from .errors import ArchiveCreationFailure


def staged_files(staging_dir: Path, exclude: Path | None = None) -> list[Path]:
    """List regular files directly inside staging_dir, sorted by name."""
    excluded = exclude.resolve() if exclude is not None else None
    return sorted(
        (
            path
            for path in Path(staging_dir).iterdir()
            if path.is_file() and path.resolve() != excluded
        ),
        key=lambda path: path.name,
    )


def assemble(staging_dir: Path, output_path: Path) -> Path:
    """Pack every file in staging_dir into a new zip archive at output_path.

    Entries are flat and named exactly as the files on disk. The archive
    itself is skipped if it lives inside staging_dir. A partially written
    archive is left for the caller to remove.

    Raises:
        ArchiveCreationFailure: If the archive cannot be created or an entry
            cannot be read
    """
    output_path = Path(output_path)
    try:
        files = staged_files(staging_dir, exclude=output_path)
        with zipfile.ZipFile(output_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for path in files:
                archive.write(path, arcname=path.name)
    except (OSError, zipfile.BadZipFile, zipfile.LargeZipFile) as e:
        raise ArchiveCreationFailure(e) from e

    return output_path
