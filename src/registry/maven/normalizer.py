"""Repository normalization: mirrors, credentials, placeholders and a reachability probe."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional

import requests

from common.logging_utils import extra_context, is_debug_enabled, safe_url
from errors import NormalizationError
from .pom import Pom
from .repository import MavenRepository, maven_central

if TYPE_CHECKING:
    from .session import ResolutionSession

logger = logging.getLogger(__name__)

_HTTP_SCHEME_RE = re.compile(r"^http://", re.IGNORECASE)


class RepositoryNormalizer:
    """Turn declared repositories into the form used for downloads.

    A repository that is not known to exist is probed once per session,
    preferring ``https``; one that answers neither way is skipped for the
    rest of the session.
    """

    def __init__(self, session: "ResolutionSession"):
        self.session = session

    def normalize(self, repository: MavenRepository, containing_pom: Optional[Pom] = None) -> Optional[MavenRepository]:
        """Return the normalized repository, or None when it is unreachable.

        Args:
            repository: The repository as declared.
            containing_pom: POM whose properties expand ``${...}`` in the URI.
        """
        repository = self.session.apply_credentials(self.session.apply_mirrors(repository))
        if containing_pom is not None:
            repository = repository.with_uri(containing_pom.value(repository.uri) or repository.uri)
        if repository.known_to_exist:
            return repository

        def probe() -> Optional[MavenRepository]:
            try:
                return self._probe(repository)
            except Exception as e:  # pylint: disable=broad-exception-caught
                self.session.on_error(NormalizationError(repository, str(e)))
                return None

        normalized = self.session.cache.normalized_repositories.compute(repository, probe)
        if normalized is None:
            return None
        return self.session.apply_credentials(normalized)

    def _probe(self, repository: MavenRepository) -> Optional[MavenRepository]:
        original = repository.uri
        https_uri = _HTTP_SCHEME_RE.sub("https://", original, count=1)
        transport = self.session.transport
        try:
            transport.head(https_uri, auth=repository.auth)
            normalized = repository.with_uri(https_uri)
        except requests.RequestException:
            if https_uri == original:
                normalized = None
            else:
                try:
                    transport.head(original, auth=repository.auth)
                    normalized = repository
                except requests.RequestException:
                    normalized = None

        if normalized is None:
            logger.warning(
                "Repository unreachable; skipping for this session",
                extra=extra_context(
                    event="repository_probe",
                    component="normalizer",
                    action="probe",
                    outcome="unreachable",
                    target=safe_url(original),
                ),
            )
        elif is_debug_enabled(logger):
            logger.debug(
                "Repository reachable",
                extra=extra_context(
                    event="repository_probe",
                    component="normalizer",
                    action="probe",
                    outcome="reachable",
                    target=safe_url(normalized.uri),
                ),
            )
        return normalized

    def distinct_normalized(
        self,
        repositories: Iterable[MavenRepository],
        containing_pom: Optional[Pom] = None,
        accepts_version: Optional[str] = None,
    ) -> List[MavenRepository]:
        """Normalize, filter and de-duplicate ``repositories`` preserving order.

        Maven Central is appended last unless the session disables it.
        """
        distinct: Dict[MavenRepository, MavenRepository] = {}
        for repository in repositories:
            normalized = self.normalize(repository, containing_pom)
            if normalized is None:
                continue
            if accepts_version is not None and not normalized.accepts_version(accepts_version):
                continue
            distinct.setdefault(normalized, normalized)
        if self.session.include_maven_central:
            central = self.normalize(maven_central(), containing_pom)
            if central is not None:
                distinct.setdefault(central, central)
        return list(distinct.values())
