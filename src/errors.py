"""Exception taxonomy for dependency resolution."""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class ResolutionError(Exception):
    """Base class for every resolution failure raised by this project."""


class MissingCoordinateError(ResolutionError):
    """A coordinate lacks its group, artifact or version; nothing is fetched."""

    def __init__(self, gav: Any, message: Optional[str] = None):
        self.gav = gav
        super().__init__(message or f"Unable to download dependency {gav}")


class MavenDownloadingError(ResolutionError):
    """Every repository failed to provide a descriptor.

    ``failures`` maps each repository that was tried to the reason it failed.
    """

    def __init__(self, gav: Any, failures: Optional[Dict[Any, str]] = None):
        self.gav = gav
        self.failures = dict(failures or {})
        lines = [
            f"    Id: {repo.id}, URL: {repo.uri}, cause: {cause}"
            for repo, cause in self.failures.items()
        ]
        message = f"Unable to download dependency {gav} from any of these repositories: \n"
        super().__init__(message + "\n".join(lines))


class MetadataUnavailableError(ResolutionError):
    """One repository could not supply metadata. Soft: the merge continues."""

    def __init__(self, gav: Any, repository: Any, cause: str):
        self.gav = gav
        self.repository = repository
        self.cause = cause
        super().__init__(
            f"Unable to download metadata for {gav} from {repository.id} ({repository.uri}): {cause}"
        )


class InvalidConstraintError(ResolutionError, ValueError):
    """A version constraint was rejected by every comparator dialect."""

    def __init__(self, constraint: str, failures: List[Any]):
        self.constraint = constraint
        self.failures = list(failures)
        reasons = "; ".join(str(f) for f in self.failures)
        super().__init__(f"Invalid version constraint '{constraint}': {reasons}")


class NormalizationError(ResolutionError):
    """A repository could not be normalized and is skipped for the session."""

    def __init__(self, repository: Any, cause: str):
        self.repository = repository
        self.cause = cause
        super().__init__(f"Unable to normalize repository {repository.id} ({repository.uri}): {cause}")
