"""Tests for POM and maven-metadata.xml parsing."""

import xml.etree.ElementTree as ET

import pytest

from conftest import pom_xml
from registry.maven.metadata import EMPTY, MavenMetadata, Snapshot, parse_metadata
from registry.maven.pom import load_pom, parse_pom

CHILD_POM = """<project xmlns="http://maven.apache.org/POM/4.0.0">
  <parent>
    <groupId>org.example</groupId>
    <artifactId>parent</artifactId>
    <version>2.1</version>
  </parent>
  <artifactId>child</artifactId>
  <packaging>bundle</packaging>
  <properties>
    <repo.base>https://repo.example.com</repo.base>
    <repo.url>${repo.base}/maven2</repo.url>
  </properties>
  <dependencies>
    <dependency>
      <groupId>org.example</groupId>
      <artifactId>util</artifactId>
      <version>${project.version}</version>
      <scope>test</scope>
      <optional>true</optional>
    </dependency>
  </dependencies>
  <repositories>
    <repository>
      <id>corp</id>
      <url>${repo.url}</url>
      <snapshots><enabled>false</enabled></snapshots>
    </repository>
  </repositories>
</project>
"""


class TestParsePom:
    def test_inherits_coordinates_from_parent(self):
        pom = parse_pom(CHILD_POM)
        assert (pom.group, pom.artifact, pom.version) == ("org.example", "child", "2.1")
        assert pom.parent.artifact == "parent"
        assert pom.packaging == "bundle"
        assert pom.gav.repository is None

    def test_dependencies_and_repositories(self):
        pom = parse_pom(CHILD_POM)
        (dep,) = pom.dependencies
        assert dep.gav.artifact == "util"
        assert dep.scope == "test"
        assert dep.optional is True
        assert pom.value(dep.gav.version) == "2.1"
        (repo,) = pom.repositories
        assert (repo.id, repo.releases, repo.snapshots) == ("corp", True, False)
        assert pom.value(repo.uri) == "https://repo.example.com/maven2"

    def test_value_keeps_unknown_placeholders(self):
        pom = parse_pom(CHILD_POM)
        assert pom.value("${unknown}/x") == "${unknown}/x"
        assert pom.value("${project.parent.groupId}") == "org.example"
        assert pom.value(None) is None

    def test_requires_artifact_id(self):
        with pytest.raises(ValueError):
            parse_pom("<project><groupId>g</groupId></project>")

    def test_rejects_malformed_xml(self):
        with pytest.raises(ET.ParseError):
            parse_pom("<project>")

    def test_load_from_disk(self, tmp_path):
        path = tmp_path / "pom.xml"
        path.write_text(pom_xml("org.example", "app", "1.0"), encoding="utf-8")
        pom = load_pom(path)
        assert pom.source_path == path
        assert pom.version == "1.0"


class TestMetadata:
    def test_parse_snapshot_metadata(self):
        content = """<metadata>
          <groupId>org.example</groupId><artifactId>lib</artifactId><version>1.0-SNAPSHOT</version>
          <versioning>
            <snapshot><timestamp>20230101.120000</timestamp><buildNumber>3</buildNumber></snapshot>
            <lastUpdated>20230101120000</lastUpdated>
            <snapshotVersions>
              <snapshotVersion>
                <extension>jar</extension>
                <value>1.0-20230101.120000-3</value>
                <updated>20230101120000</updated>
              </snapshotVersion>
            </snapshotVersions>
          </versioning>
        </metadata>"""
        metadata = parse_metadata(content)
        assert metadata.snapshot == Snapshot("20230101.120000", "3")
        assert metadata.snapshot_versions[0].value == "1.0-20230101.120000-3"
        assert metadata.snapshot_versions[0].classifier is None
        assert metadata.last_updated == "20230101120000"

    def test_no_versioning(self):
        assert parse_metadata("<metadata/>").versions == []

    def test_merge(self):
        a = MavenMetadata(versions=["1.0"], snapshot=Snapshot("t1", "1"))
        b = MavenMetadata(versions=["2.0"], snapshot=Snapshot("t2", "2"))
        merged = a.merge(b)
        assert merged.versions == ["1.0", "2.0"]
        assert merged.snapshot == Snapshot("t1", "1")
        assert EMPTY.merge(b) is b
        assert a.merge(EMPTY) is a
