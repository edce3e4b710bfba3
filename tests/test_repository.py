"""Tests for repository descriptions, mirrors and credentials."""

from constants import Constants
from registry.maven.repository import (
    MavenRepository,
    MavenRepositoryCredentials,
    MavenRepositoryMirror,
    apply_credentials,
    apply_mirrors,
)


class TestAcceptsVersion:
    def test_release_repository(self):
        repo = MavenRepository("r", "https://repo.example.com")
        assert repo.accepts_version("1.0")
        assert not repo.accepts_version("1.0-SNAPSHOT")

    def test_snapshot_repository(self):
        repo = MavenRepository("s", "https://repo.example.com", releases=False, snapshots=True)
        assert repo.accepts_version("1.0-SNAPSHOT")
        assert not repo.accepts_version("1.0")

    def test_spring_milestones_only_serve_milestones(self):
        repo = MavenRepository("spring", Constants.SPRING_MILESTONE_URL.upper())
        assert repo.accepts_version("6.0.0-M3")
        assert repo.accepts_version("6.0.0-RC1")
        assert not repo.accepts_version("6.0.0")


class TestCredentials:
    def test_equality_ignores_credentials(self):
        plain = MavenRepository("r", "https://repo.example.com")
        secured = plain.with_credentials("user", "s3cret")
        assert plain == secured
        assert hash(plain) == hash(secured)
        assert secured.auth == ("user", "s3cret")
        assert plain.auth is None

    def test_credentials_never_rendered(self):
        repo = MavenRepository("r", "https://repo.example.com", username="user", password="s3cret")
        assert "s3cret" not in repr(repo)
        assert "s3cret" not in str(repo.to_dict())
        cred = MavenRepositoryCredentials("r", "user", "s3cret")
        assert "s3cret" not in repr(cred)

    def test_apply_by_id(self):
        creds = [MavenRepositoryCredentials("other", "x", "y"), MavenRepositoryCredentials("r", "user", "pw")]
        repo = apply_credentials(creds, MavenRepository("r", "https://repo.example.com"))
        assert repo.auth == ("user", "pw")
        untouched = apply_credentials(creds, MavenRepository("none", "https://repo.example.com"))
        assert untouched.auth is None


class TestMirrors:
    def test_star_matches_everything(self):
        mirror = MavenRepositoryMirror("m", "https://mirror.example.com", "*")
        repo = apply_mirrors([mirror], MavenRepository("r", "http://repo.example.com"))
        assert (repo.id, repo.uri) == ("m", "https://mirror.example.com")

    def test_external_skips_local_repositories(self):
        mirror = MavenRepositoryMirror("m", "https://mirror.example.com", "external:*")
        assert mirror.matches(MavenRepository("r", "https://repo.example.com"))
        assert not mirror.matches(MavenRepository("l", "http://localhost:8081/repo"))
        assert not mirror.matches(MavenRepository("f", "file:///tmp/repo"))

    def test_exclusion(self):
        mirror = MavenRepositoryMirror("m", "https://mirror.example.com", "*,!repo-b")
        assert mirror.matches(MavenRepository("repo-a", "https://a.example.com"))
        assert not mirror.matches(MavenRepository("repo-b", "https://b.example.com"))

    def test_match_by_id_or_uri(self):
        mirror = MavenRepositoryMirror("m", "https://mirror.example.com", "repo-a,https://c.example.com")
        assert mirror.matches(MavenRepository("repo-a", "https://a.example.com"))
        assert mirror.matches(MavenRepository("other", "https://c.example.com"))
        assert not mirror.matches(MavenRepository("repo-b", "https://b.example.com"))

    def test_unset_flags_are_inherited(self):
        repo = MavenRepository("r", "https://repo.example.com", releases=False, snapshots=True)
        inherit = MavenRepositoryMirror("m", "https://mirror.example.com", "*")
        override = MavenRepositoryMirror("m", "https://mirror.example.com", "*", releases=True, snapshots=False)
        mirrored = inherit.apply_to(repo)
        assert (mirrored.releases, mirrored.snapshots) == (False, True)
        mirrored = override.apply_to(repo)
        assert (mirrored.releases, mirrored.snapshots) == (True, False)

    def test_first_matching_mirror_wins(self):
        first = MavenRepositoryMirror("first", "https://one.example.com", "r")
        second = MavenRepositoryMirror("second", "https://two.example.com", "*")
        assert apply_mirrors([first, second], MavenRepository("r", "https://x")).id == "first"
        assert apply_mirrors([first, second], MavenRepository("q", "https://x")).id == "second"
