"""Tests for batch resolution and upgrade lookup."""

import pytest

from conftest import REPO_A, metadata_xml, pom_xml
from errors import InvalidConstraintError, ResolutionError
from registry.maven.resolver import DependencyRequest, DependencyResolver
from registry.maven.session import ResolutionSession
from versioning.models import GroupArtifact, ResolutionMode
from versioning.requested import RequestedVersions

GA = GroupArtifact("org.example", "lib")
METADATA_URL = "https://a.example.com/maven2/org/example/lib/maven-metadata.xml"


def pom_url(artifact, version):
    return f"https://a.example.com/maven2/org/example/{artifact}/{version}/{artifact}-{version}.pom"


@pytest.fixture
def repo_session(transport, errors):
    with ResolutionSession(
        repositories=[REPO_A], transport=transport, on_error=errors.append, include_maven_central=False
    ) as session:
        yield session


class TestDependencyRequest:
    def test_parse(self):
        request = DependencyRequest.parse("org.example:lib:[1.0,2.0)")
        assert request.group_artifact == GA
        assert request.constraints == ("[1.0,2.0)",)
        assert request.identifier == "org.example:lib"

    @pytest.mark.parametrize("text", ["org.example:lib", "org.example::1.0", ""])
    def test_parse_rejects_incomplete(self, text):
        with pytest.raises(ValueError):
            DependencyRequest.parse(text)


class TestResolve:
    def test_resolve_version_from_range(self, session, http):
        http.add(METADATA_URL, body=metadata_xml(["0.9", "1.0", "1.5", "2.0"]))
        resolver = DependencyResolver(session)
        assert resolver.resolve_version(GA, ["[1.0,2.0)"], [REPO_A]) == "1.5"

    def test_nearest_fixed_version_needs_no_metadata(self, session, http):
        http.add(pom_url("lib", "1.0"), body=pom_xml("org.example", "lib", "1.0"))
        resolved = DependencyResolver(session).resolve(
            DependencyRequest("org.example", "lib", ("1.0", "[1.0,2.0)")), [REPO_A]
        )
        assert resolved.gav.version == "1.0"
        assert resolved.repository == REPO_A
        assert resolved.requested == "1.0"
        assert http.count(METADATA_URL) == 0

    def test_unsatisfiable_range(self, session, http):
        http.add(METADATA_URL, body=metadata_xml(["3.0"]))
        with pytest.raises(ResolutionError, match="No version of org.example:lib"):
            DependencyResolver(session).resolve(DependencyRequest("org.example", "lib", ("[1.0,2.0)",)), [REPO_A])

    def test_resolve_all_keeps_input_order(self, repo_session, http):
        http.add(METADATA_URL, body=metadata_xml(["1.0", "1.5", "2.0"]))
        http.add(pom_url("lib", "1.0"), body=pom_xml("org.example", "lib", "1.0"))
        http.add(pom_url("lib", "1.5"), body=pom_xml("org.example", "lib", "1.5"))
        requests = [
            DependencyRequest("org.example", "lib", ("1.0",)),
            DependencyRequest("org.example", "missing", ("2.0",)),
            DependencyRequest("org.example", "lib", ("[1.0,2.0)",)),
        ]
        results = DependencyResolver(repo_session).resolve_all(requests)

        assert [r.identifier for r in results] == ["org.example:lib", "org.example:missing", "org.example:lib"]
        assert results[0].ok and results[0].resolved_version == "1.0"
        assert results[0].resolution_mode == ResolutionMode.EXACT
        assert not results[1].ok
        assert "Unable to download dependency org.example:missing:2.0" in results[1].error
        assert results[2].resolved_version == "1.5"
        assert results[2].resolution_mode == ResolutionMode.RANGE
        assert results[2].dependency.pom.version == "1.5"

    def test_each_lookup_gets_its_own_arena(self, session):
        """Declarations from one lookup are not kept alive by the next."""
        resolver = DependencyResolver(session)
        first = resolver.requested_version(GA, ["1.0", "[1.0,2.0)"])
        second = resolver.requested_version(GA, ["1.0"])
        assert first.arena is not second.arena
        assert len(first.arena) == 2
        assert len(second.arena) == 1
        assert not hasattr(resolver, "requested_versions")

    def test_shared_arena_for_one_batch(self, session):
        arena = RequestedVersions()
        resolver = DependencyResolver(session)
        resolver.requested_version(GA, ["1.0"], arena)
        handle = resolver.requested_version(GA, ["[1.0,2.0)", "[1.5,3.0)"], arena)
        assert handle.arena is arena
        assert len(arena) == 3

    def test_resolve_all_empty(self, session):
        assert DependencyResolver(session).resolve_all([]) == []

    def test_downloads_jar_when_cache_dir_configured(self, transport, http, tmp_path):
        http.add(pom_url("lib", "1.0"), body=pom_xml("org.example", "lib", "1.0"))
        http.add("https://a.example.com/maven2/org/example/lib/1.0/lib-1.0.jar", body=b"jar")
        with ResolutionSession(
            repositories=[REPO_A], artifact_cache_dir=tmp_path, transport=transport, include_maven_central=False
        ) as session:
            resolved = DependencyResolver(session).resolve(DependencyRequest("org.example", "lib", ("1.0",)))
        assert resolved.artifact_path == tmp_path / "org" / "example" / "lib" / "1.0" / "lib-1.0.jar"
        assert resolved.artifact_path.read_bytes() == b"jar"


class TestFindUpgrade:
    def test_invalid_constraint_fails_before_network(self, repo_session, http):
        with pytest.raises(InvalidConstraintError):
            DependencyResolver(repo_session).find_upgrade(GA, "1.0", "not a version")
        assert http.calls == []

    def test_latest_patch(self, repo_session, http):
        http.add(METADATA_URL, body=metadata_xml(["1.2.3", "1.2.4", "1.3.0"]))
        assert DependencyResolver(repo_session).find_upgrade(GA, "1.2.3", "latest.patch") == "1.2.4"

    def test_no_upgrade_available(self, repo_session, http):
        http.add(METADATA_URL, body=metadata_xml(["1.0"]))
        assert DependencyResolver(repo_session).find_upgrade(GA, "1.0", "^2.0") is None
