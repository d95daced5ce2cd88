"""Tests for download URI resolution."""

import json
import urllib.parse

import pytest

from nexus3.cache import RepositoryInfoCache
from nexus3.errors import ParseError, TransportError, ValidationError
from nexus3.models import ArtifactCoordinates, Credentials
from nexus3.resolver import DownloadUriResolver, has_value, is_snapshot

NEXUS_URL = "http://nexus.example.com"


class FakeExecutor:
    """Records calls and answers with a repositories API document."""

    def __init__(self, repository_format="maven2", body=None):
        self.calls = []
        self.body = body if body is not None else json.dumps({
            "name": "mygroup-maven",
            "format": repository_format,
            "type": "group",
            "url": f"{NEXUS_URL}/repository/mygroup-maven",
            "attributes": {},
        })

    def __call__(self, url, credentials, accept_untrusted_certs, **kwargs):
        self.calls.append((url, credentials, accept_untrusted_certs, kwargs))
        return self.body


def _query(url):
    return urllib.parse.parse_qsl(urllib.parse.urlsplit(url).query, keep_blank_values=True)


def _coords(**overrides):
    values = {
        "repository": "mygroup-maven",
        "group": "com.example.group.X",
        "artifact": "fizz-buzz-X",
    }
    values.update(overrides)
    return ArtifactCoordinates(**values)


class TestHasValue:
    """Tests for the optional-value presence rule."""

    @pytest.mark.parametrize("value", [None, "", "   ", "-", " - ", "\t-\n"])
    def test_absent_values(self, value):
        assert has_value(value) is False

    @pytest.mark.parametrize("value", ["a", " a ", "--", "-x", "0"])
    def test_present_values(self, value):
        assert has_value(value) is True


class TestIsSnapshot:
    """Tests for SNAPSHOT detection."""

    def test_suffix_is_case_sensitive(self):
        assert is_snapshot("1.0.0-SNAPSHOT") is True
        assert is_snapshot("1.0.0-snapshot") is False
        assert is_snapshot("1.0.0-SNAPSHOT.1") is False
        assert is_snapshot("SNAPSHOT") is False


class TestBuildDownloadUrl:
    """Tests for URL assembly once the format is known."""

    def test_maven_snapshot_example(self):
        resolver = DownloadUriResolver(executor=FakeExecutor())
        url = resolver.build_download_url(NEXUS_URL, _coords(version="1.0.0-SNAPSHOT"), "maven2")

        assert url == (
            "http://nexus.example.com/service/rest/v1/search/assets/download?"
            "repository=mygroup-maven&maven.groupId=com.example.group.X"
            "&maven.artifactId=fizz-buzz-X&maven.classifier="
            "&maven.baseVersion=1.0.0-SNAPSHOT&sort=version"
        )
        assert len(_query(url)) == 6

    def test_npm_example_omits_empty_scope(self):
        resolver = DownloadUriResolver(executor=FakeExecutor())
        url = resolver.build_download_url(NEXUS_URL, _coords(group="", version="1.0.0"), "npm")

        assert _query(url) == [
            ("repository", "mygroup-maven"),
            ("name", "fizz-buzz-X"),
            ("version", "1.0.0"),
        ]

    @pytest.mark.parametrize("repository_format, expected", [
        ("maven2", ["repository", "maven.groupId", "maven.artifactId", "maven.classifier"]),
        ("npm", ["repository", "npm.scope", "name"]),
        ("nuget", ["repository", "nuget.id"]),
    ])
    def test_exact_parameters_without_version(self, repository_format, expected):
        resolver = DownloadUriResolver(executor=FakeExecutor())
        url = resolver.build_download_url(NEXUS_URL, _coords(), repository_format)

        assert [name for name, _ in _query(url)] == expected

    def test_maven_optional_fields_are_sent(self):
        resolver = DownloadUriResolver(executor=FakeExecutor())
        url = resolver.build_download_url(
            NEXUS_URL, _coords(extension="jar", classifier="sources", version="2.1"), "maven2"
        )

        assert _query(url) == [
            ("repository", "mygroup-maven"),
            ("maven.groupId", "com.example.group.X"),
            ("maven.artifactId", "fizz-buzz-X"),
            ("maven.extension", "jar"),
            ("maven.classifier", "sources"),
            ("version", "2.1"),
        ]

    def test_blank_marker_uses_default_classifier(self):
        resolver = DownloadUriResolver(executor=FakeExecutor())
        url = resolver.build_download_url(NEXUS_URL, _coords(classifier=" - ", extension="-"), "maven2")

        params = dict(_query(url))
        assert params["maven.classifier"] == ""
        assert "maven.extension" not in params

    def test_unmapped_fields_are_ignored_for_nuget(self, caplog):
        resolver = DownloadUriResolver(executor=FakeExecutor())
        with caplog.at_level("INFO"):
            url = resolver.build_download_url(
                NEXUS_URL, _coords(extension="nupkg", classifier="x"), "nuget"
            )

        assert [name for name, _ in _query(url)] == ["repository", "nuget.id"]
        assert "Ignoring group" in caplog.text
        assert "Ignoring extension" in caplog.text

    def test_snapshot_never_sends_plain_version(self):
        resolver = DownloadUriResolver(executor=FakeExecutor())
        url = resolver.build_download_url(NEXUS_URL, _coords(group="", version="2.0-SNAPSHOT"), "npm")

        names = [name for name, _ in _query(url)]
        assert "version" not in names
        assert names[-2:] == ["maven.baseVersion", "sort"]

    def test_release_never_sends_snapshot_parameters(self):
        resolver = DownloadUriResolver(executor=FakeExecutor())
        url = resolver.build_download_url(NEXUS_URL, _coords(version="2.0"), "maven2")

        names = [name for name, _ in _query(url)]
        assert "maven.baseVersion" not in names
        assert "sort" not in names
        assert names[-1] == "version"

    def test_snapshot_sort_replaces_existing_sort(self):
        resolver = DownloadUriResolver(executor=FakeExecutor())
        url = resolver.build_download_url(
            "http://nexus.example.com/?sort=name", _coords(version="1-SNAPSHOT"), "maven2"
        )

        assert [v for k, v in _query(url) if k == "sort"] == ["version"]

    def test_blank_version_is_omitted(self):
        resolver = DownloadUriResolver(executor=FakeExecutor())
        url = resolver.build_download_url(NEXUS_URL, _coords(version=" "), "maven2")

        names = [name for name, _ in _query(url)]
        assert "version" not in names
        assert "maven.baseVersion" not in names

    def test_sub_path_base_url(self):
        resolver = DownloadUriResolver(executor=FakeExecutor())
        url = resolver.build_download_url("https://host/nexus", _coords(), "maven2")

        assert url.startswith("https://host/nexus/service/rest/v1/search/assets/download?")

    def test_missing_required_field_names_it(self):
        resolver = DownloadUriResolver(executor=FakeExecutor())
        with pytest.raises(ValidationError) as excinfo:
            resolver.build_download_url(NEXUS_URL, _coords(group=None), "maven2")

        assert len(excinfo.value.missing) == 1
        assert "group" in excinfo.value.missing[0]
        assert "maven.groupId" in str(excinfo.value)

    def test_all_missing_fields_are_listed(self):
        resolver = DownloadUriResolver(executor=FakeExecutor())
        coords = ArtifactCoordinates(repository="-", artifact="", group=None, version="1.0")
        with pytest.raises(ValidationError) as excinfo:
            resolver.build_download_url(NEXUS_URL, coords, "maven2")

        message = str(excinfo.value)
        assert len(excinfo.value.missing) == 3
        assert message.count("\n") == 2
        assert "'repository'" in message
        assert "'maven.groupId'" in message
        assert "'maven.artifactId'" in message

    def test_npm_missing_name(self):
        resolver = DownloadUriResolver(executor=FakeExecutor())
        with pytest.raises(ValidationError) as excinfo:
            resolver.build_download_url(NEXUS_URL, _coords(artifact=None), "npm")

        assert excinfo.value.missing == ["artifact is required for npm repositories (parameter 'name')"]


class TestResolve:
    """Tests for the full resolution with metadata lookup."""

    def test_uses_repository_format(self):
        executor = FakeExecutor(repository_format="npm")
        resolver = DownloadUriResolver(executor=executor)

        url = resolver.resolve(NEXUS_URL, _coords(group="", version="1.0.0"))

        assert [name for name, _ in _query(url)] == ["repository", "name", "version"]
        assert executor.calls[0][0] == "http://nexus.example.com/service/rest/v1/repositories/mygroup-maven"

    def test_passes_credentials_and_trust_flag(self):
        executor = FakeExecutor()
        resolver = DownloadUriResolver(executor=executor)
        creds = Credentials.basic("user", "secret")

        resolver.resolve("https://nexus.example.com", _coords(), creds, True)

        _, seen_creds, seen_trust, kwargs = executor.calls[0]
        assert seen_creds is creds
        assert seen_trust is True
        assert kwargs == {}

    def test_passes_timeout_when_configured(self):
        executor = FakeExecutor()
        resolver = DownloadUriResolver(executor=executor, timeout=5)

        resolver.resolve(NEXUS_URL, _coords())

        assert executor.calls[0][3] == {"timeout": 5}

    def test_unknown_format_falls_back_to_maven2(self):
        resolver = DownloadUriResolver(executor=FakeExecutor(repository_format="raw"))

        url = resolver.resolve(NEXUS_URL, _coords())

        assert [name for name, _ in _query(url)] == [
            "repository", "maven.groupId", "maven.artifactId", "maven.classifier",
        ]

    def test_missing_format_falls_back_to_maven2(self):
        resolver = DownloadUriResolver(executor=FakeExecutor(body='{"name": "r"}'))

        url = resolver.resolve(NEXUS_URL, _coords())

        assert "maven.groupId=" in url

    def test_metadata_fetched_once_per_url(self):
        executor = FakeExecutor()
        cache = RepositoryInfoCache()
        resolver = DownloadUriResolver(cache=cache, executor=executor)

        first = resolver.resolve(NEXUS_URL, _coords())
        second = resolver.resolve(NEXUS_URL, _coords(version="1.0"))

        assert len(executor.calls) == 1
        assert first != second
        key = "http://nexus.example.com/service/rest/v1/repositories/mygroup-maven"
        assert cache.get(key, lambda: pytest.fail("cache miss")) == executor.body

    def test_separate_caches_fetch_separately(self):
        executor = FakeExecutor()

        DownloadUriResolver(cache=RepositoryInfoCache(), executor=executor).resolve(NEXUS_URL, _coords())
        DownloadUriResolver(cache=RepositoryInfoCache(), executor=executor).resolve(NEXUS_URL, _coords())

        assert len(executor.calls) == 2

    def test_repository_name_is_percent_encoded(self):
        executor = FakeExecutor()
        resolver = DownloadUriResolver(executor=executor)

        resolver.get_repository_info(NEXUS_URL, "my repo/x")

        assert executor.calls[0][0].endswith("/repositories/my%20repo%2Fx")

    def test_malformed_json_raises_parse_error(self):
        resolver = DownloadUriResolver(executor=FakeExecutor(body="<html>login</html>"))

        with pytest.raises(ParseError):
            resolver.resolve(NEXUS_URL, _coords())

    def test_non_object_json_raises_parse_error(self):
        resolver = DownloadUriResolver(executor=FakeExecutor(body="[]"))

        with pytest.raises(ParseError):
            resolver.resolve(NEXUS_URL, _coords())

    def test_transport_error_propagates_and_is_not_cached(self):
        calls = []

        def failing(url, credentials, accept_untrusted_certs):
            calls.append(url)
            raise TransportError("boom", url, status_code=503)

        resolver = DownloadUriResolver(executor=failing)

        for _ in range(2):
            with pytest.raises(TransportError):
                resolver.resolve(NEXUS_URL, _coords())
        assert len(calls) == 2

    def test_validation_error_after_metadata(self):
        executor = FakeExecutor(repository_format="nuget")
        resolver = DownloadUriResolver(executor=executor)

        with pytest.raises(ValidationError) as excinfo:
            resolver.resolve(NEXUS_URL, _coords(artifact="-"))

        assert "nuget.id" in str(excinfo.value)

    def test_missing_repository_fails_before_fetch(self):
        executor = FakeExecutor()
        resolver = DownloadUriResolver(executor=executor)

        with pytest.raises(ValidationError) as excinfo:
            resolver.resolve(NEXUS_URL, _coords(repository=" - "))

        assert "repository" in str(excinfo.value)
        assert executor.calls == []
