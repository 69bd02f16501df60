"""Error taxonomy for the pass packaging pipeline."""

from enum import Enum
from pathlib import Path


class Stage(str, Enum):
    """Pipeline stages, in execution order."""

    RESOLVE_CREDENTIALS = "resolve_credentials"
    WRITE_DOCUMENT = "write_document"
    WRITE_MANIFEST = "write_manifest"
    SIGN = "sign"
    COPY_ASSETS = "copy_assets"
    ARCHIVE = "archive"
    CLEANUP = "cleanup"


class PackagingError(Exception):
    """Base class for every terminal pipeline failure.

    Attributes:
        stage: Stage that failed (None until the orchestrator tags it)
        diagnostic: Underlying error text, unmodified
    """

    default_stage: Stage | None = None

    def __init__(self, diagnostic: str, stage: Stage | None = None) -> None:
        self.diagnostic = diagnostic
        self.stage = stage or self.default_stage
        super().__init__(diagnostic)

    def __str__(self) -> str:
        if self.stage is None:
            return self.diagnostic
        return f"[{self.stage.value}] {self.diagnostic}"


class InvalidCredentialSource(PackagingError):
    """Credential field is neither a FilePath nor an InlineContent."""

    default_stage = Stage.RESOLVE_CREDENTIALS

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"invalid credential source: {type(value).__name__}")


class FileReadError(PackagingError):
    """An asset or the pass document could not be read."""

    default_stage = Stage.WRITE_MANIFEST

    def __init__(
        self, name: str, path: Path | str, cause: BaseException, stage: Stage | None = None
    ) -> None:
        self.name = name
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"cannot read {name!r} from {self.path}: {cause}", stage)


class FileWriteError(PackagingError):
    """A staging or credential file could not be written."""

    def __init__(self, path: Path | str, cause: BaseException, stage: Stage | None = None) -> None:
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"cannot write {self.path}: {cause}", stage)


class SigningFailure(PackagingError):
    """The manifest signature could not be produced."""

    default_stage = Stage.SIGN


class ArchiveCreationFailure(PackagingError):
    """The archive could not be created or an entry could not be packed."""

    default_stage = Stage.ARCHIVE

    def __init__(self, cause: BaseException | str) -> None:
        self.cause = cause
        super().__init__(f"archive creation failed: {cause}")
