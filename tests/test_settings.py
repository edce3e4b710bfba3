"""Tests for settings.xml parsing and session construction from it."""

from registry.maven.session import ResolutionSession
from registry.maven.settings import MavenSettings

SETTINGS = """<?xml version="1.0" encoding="UTF-8"?>
<settings xmlns="http://maven.apache.org/SETTINGS/1.0.0">
  <servers>
    <server>
      <id>corp</id>
      <username>${env.CORP_USER}</username>
      <password>${env.CORP_PASSWORD}</password>
    </server>
  </servers>
  <mirrors>
    <mirror>
      <id>corp</id>
      <url>https://nexus.example.com/repository/all</url>
      <mirrorOf>external:*,!internal</mirrorOf>
    </mirror>
    <mirror>
      <id>broken</id>
    </mirror>
  </mirrors>
  <profiles>
    <profile>
      <id>default</id>
      <activation><activeByDefault>true</activeByDefault></activation>
      <repositories>
        <repository>
          <id>internal</id>
          <url>https://internal.example.com/maven</url>
        </repository>
      </repositories>
    </profile>
    <profile>
      <id>snapshots</id>
      <repositories>
        <repository>
          <id>nightly</id>
          <url>https://nightly.example.com/maven</url>
          <releases><enabled>false</enabled></releases>
          <snapshots><enabled>true</enabled></snapshots>
        </repository>
      </repositories>
    </profile>
    <profile>
      <id>unused</id>
      <repositories>
        <repository><id>unused</id><url>https://unused.example.com</url></repository>
      </repositories>
    </profile>
  </profiles>
  <activeProfiles>
    <activeProfile>snapshots</activeProfile>
  </activeProfiles>
</settings>
"""


class TestMavenSettings:
    def test_parse_text(self, monkeypatch):
        monkeypatch.setenv("CORP_USER", "deployer")
        monkeypatch.delenv("CORP_PASSWORD", raising=False)
        settings = MavenSettings.parse(SETTINGS)

        assert [s.id for s in settings.servers] == ["corp"]
        assert settings.servers[0].username == "deployer"
        assert settings.servers[0].password == "${env.CORP_PASSWORD}"
        assert [m.id for m in settings.mirrors] == ["corp"]
        assert settings.mirrors[0].mirror_of == "external:*,!internal"
        assert settings.active_profiles == ["snapshots"]

    def test_active_repositories(self):
        settings = MavenSettings.parse(SETTINGS)
        repos = settings.active_repositories()
        assert [r.id for r in repos] == ["internal", "nightly"]
        assert (repos[0].releases, repos[0].snapshots) == (True, False)
        assert (repos[1].releases, repos[1].snapshots) == (False, True)
        assert [r.id for r in settings.active_repositories(["unused"])] == ["internal", "nightly", "unused"]

    def test_parse_file(self, tmp_path):
        path = tmp_path / "settings.xml"
        path.write_text(SETTINGS, encoding="utf-8")
        assert MavenSettings.parse(path).active_profiles == ["snapshots"]
        assert MavenSettings.parse(str(path)).active_profiles == ["snapshots"]


class TestSessionFromSettings:
    def test_builds_session(self, monkeypatch, transport):
        monkeypatch.setenv("CORP_USER", "deployer")
        monkeypatch.setenv("CORP_PASSWORD", "s3cret")
        settings = MavenSettings.parse(SETTINGS)
        with ResolutionSession.from_settings(settings, transport=transport) as session:
            assert [r.id for r in session.repositories] == ["internal", "nightly"]
            assert [m.id for m in session.mirrors] == ["corp"]
            mirrored = session.apply_credentials(
                session.apply_mirrors(session.repositories[1])
            )
            assert mirrored.uri == "https://nexus.example.com/repository/all"
            assert mirrored.auth == ("deployer", "s3cret")
            internal = session.apply_mirrors(session.repositories[0])
            assert internal.uri == "https://internal.example.com/maven"
