"""Download POMs and ``maven-metadata.xml`` from an ordered list of repositories."""

from __future__ import annotations

import logging
import os
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Optional, Sequence, Union

import requests

from common.logging_utils import Timer, extra_context, is_debug_enabled, safe_url
from constants import Constants
from errors import MavenDownloadingError, MetadataUnavailableError, MissingCoordinateError
from versioning.models import GroupArtifact, GroupArtifactVersion, ResolvedGroupArtifactVersion
from .metadata import EMPTY, MavenMetadata, parse_metadata
from .normalizer import RepositoryNormalizer
from .pom import Pom, parse_pom
from .repository import MavenRepository

if TYPE_CHECKING:
    from .session import ResolutionSession

logger = logging.getLogger(__name__)


def _group_path(group: str) -> str:
    return group.replace(".", "/")


class MavenPomDownloader:
    """Fetch descriptors and metadata for coordinates within one session.

    Project POMs are consulted before any repository. Repositories are tried
    in order; the first that serves the POM wins and every failure before it
    is kept for the error report.
    """

    def __init__(self, session: "ResolutionSession"):
        self.session = session
        self.normalizer = RepositoryNormalizer(session)

    def download_metadata(
        self,
        gav: Union[GroupArtifact, GroupArtifactVersion],
        repositories: Sequence[MavenRepository] = (),
        containing_pom: Optional[Pom] = None,
    ) -> MavenMetadata:
        """Merge the metadata every reachable repository has for ``gav``.

        Per-repository failures go to the session's ``on_error`` and never
        stop the merge.

        Raises:
            MissingCoordinateError: when the group is missing.
        """
        if isinstance(gav, GroupArtifact):
            gav = GroupArtifactVersion(gav.group, gav.artifact, None)
        if not gav.group:
            raise MissingCoordinateError(gav, "Unable to download maven metadata because of a missing groupId.")

        merged = EMPTY
        for repo in self.normalizer.distinct_normalized(repositories, containing_pom):
            key = (repo.uri, gav)
            result = self.session.cache.metadata.compute(key, lambda r=repo: self._fetch_metadata_or_report(gav, r))
            if result is not None:
                merged = merged.merge(result)
        return merged

    def _fetch_metadata_or_report(self, gav: GroupArtifactVersion, repo: MavenRepository) -> Optional[MavenMetadata]:
        """Fetch metadata; a transport failure is reported and cached as absent."""
        try:
            return self._fetch_metadata(gav, repo)
        except requests.RequestException as e:
            self.session.on_error(MetadataUnavailableError(gav, repo, str(e)))
            return None

    def _fetch_metadata(self, gav: GroupArtifactVersion, repo: MavenRepository) -> Optional[MavenMetadata]:
        url = (
            f"{repo.uri.rstrip('/')}/{_group_path(gav.group or '')}/{gav.artifact}/"
            + (f"{gav.version}/" if gav.version else "")
            + Constants.METADATA_FILE
        )
        with Timer() as t:
            res = self.session.transport.get(url, auth=repo.auth)
        if res.status_code != 200:
            if is_debug_enabled(logger):
                logger.debug(
                    "Metadata unavailable",
                    extra=extra_context(
                        event="metadata_fetch",
                        component="downloader",
                        action="download_metadata",
                        outcome="unavailable",
                        status_code=res.status_code,
                        duration_ms=t.duration_ms(),
                        target=safe_url(url),
                    ),
                )
            return None
        try:
            return parse_metadata(res.content)
        except ET.ParseError as e:
            self.session.on_error(MetadataUnavailableError(gav, repo, f"unparseable metadata: {e}"))
            return None

    def dated_snapshot_version(
        self,
        gav: GroupArtifactVersion,
        repositories: Sequence[MavenRepository] = (),
        containing_pom: Optional[Pom] = None,
    ) -> Optional[str]:
        """Return the timestamped version a ``-SNAPSHOT`` coordinate is published under.

        Pinned snapshot versions win; otherwise the metadata's snapshot block is
        used. Non-snapshot versions, and snapshots without metadata, are
        returned unchanged.
        """
        version = gav.version
        if version is None or not version.endswith(Constants.SNAPSHOT_SUFFIX):
            return version

        for pinned in self.session.pinned_snapshot_versions:
            if (
                pinned.dated_snapshot_version is not None
                and pinned.group == gav.group
                and pinned.artifact == gav.artifact
                and pinned.version == version
            ):
                return pinned.dated_snapshot_version

        metadata = self.download_metadata(gav, repositories, containing_pom)
        if metadata.snapshot is not None:
            base = version[: -len("SNAPSHOT")]
            return f"{base}{metadata.snapshot.timestamp}-{metadata.snapshot.build_number}"
        return version

    def _project_pom(
        self, gav: GroupArtifactVersion, relative_path: Optional[str], containing_pom: Optional[Pom]
    ) -> Optional[Pom]:
        for pom in self.session.project_poms.values():
            if (pom.group, pom.artifact, pom.version) == (gav.group, gav.artifact, gav.version):
                return pom

        if containing_pom is not None and containing_pom.source_path is not None and relative_path and relative_path.strip():
            candidate = self.session.project_pom(
                Path(os.path.dirname(str(containing_pom.source_path))) / relative_path / Constants.POM_XML_FILE
            )
            # published POMs keep relative parent paths, so the GAV must match too
            if candidate is not None and (candidate.group, candidate.artifact, candidate.version) == (
                gav.group, gav.artifact, gav.version
            ):
                return candidate
        return None

    def download(
        self,
        gav: GroupArtifactVersion,
        relative_path: Optional[str] = None,
        containing_pom: Optional[Pom] = None,
        repositories: Sequence[MavenRepository] = (),
        failures: Optional[Dict[MavenRepository, str]] = None,
    ) -> Pom:
        """Return the POM for ``gav``.

        Args:
            gav: Fully specified coordinate.
            relative_path: Parent relative path declared by ``containing_pom``.
            containing_pom: The POM that referenced ``gav``.
            repositories: Repositories to search, in order.
            failures: Collects the reason each repository tried before the
                winning one failed.

        Raises:
            MissingCoordinateError: when group, artifact or version is missing.
            MavenDownloadingError: when no repository could provide the POM.
        """
        if not gav.group or not gav.artifact or not gav.version:
            raise MissingCoordinateError(gav)

        effective = self.dated_snapshot_version(gav, repositories, containing_pom) or gav.version

        local = self._project_pom(gav, relative_path, containing_pom)
        if local is not None:
            return local

        if failures is None:
            failures = {}
        for repo in self.normalizer.distinct_normalized(repositories, containing_pom, gav.version):
            resolved = ResolvedGroupArtifactVersion(
                repository=repo.uri,
                group=gav.group,
                artifact=gav.artifact,
                version=gav.version,
                dated_snapshot_version=None if effective == gav.version else effective,
            )
            try:
                pom = self.session.cache.poms.compute(
                    resolved, lambda r=repo, rg=resolved: self._fetch_pom(rg, r, failures)
                )
            except requests.RequestException as e:
                failures[repo] = f"Download failure. {e}"
                continue
            if pom is not None:
                return pom
            failures.setdefault(repo, "Download failure. Not available in this session.")

        raise MavenDownloadingError(gav, failures)

    def _fetch_pom(
        self,
        resolved: ResolvedGroupArtifactVersion,
        repo: MavenRepository,
        failures: Dict[MavenRepository, str],
    ) -> Optional[Pom]:
        url = (
            f"{repo.uri.rstrip('/')}/{_group_path(resolved.group)}/{resolved.artifact}/{resolved.version}/"
            f"{resolved.artifact}-{resolved.effective_version}.{Constants.POM_EXTENSION}"
        )
        with Timer() as t:
            res = self.session.transport.get(url, auth=repo.auth)
        if not 200 <= res.status_code < 300:
            failures[repo] = f"Download failure. Response code is [{res.status_code}]."
            logger.debug(
                "POM unavailable",
                extra=extra_context(
                    event="pom_fetch",
                    component="downloader",
                    action="download",
                    outcome="unavailable",
                    status_code=res.status_code,
                    duration_ms=t.duration_ms(),
                    target=safe_url(url),
                ),
            )
            return None

        try:
            pom = parse_pom(res.content, repository=repo)
        except (ET.ParseError, ValueError) as e:
            failures[repo] = f"Download failure. Unparseable POM: {e}"
            return None
        if is_debug_enabled(logger):
            logger.debug(
                "POM downloaded",
                extra=extra_context(
                    event="pom_fetch",
                    component="downloader",
                    action="download",
                    outcome="downloaded",
                    duration_ms=t.duration_ms(),
                    target=safe_url(url),
                ),
            )
        return pom.with_gav(resolved)
