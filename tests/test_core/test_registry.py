"""
Tests for Outline CLI server registry.

This module tests loading and saving of the YAML registry, file
permissions, server CRUD operations and installer JSON import.
"""

import os
import stat
from unittest.mock import Mock

import pytest
import yaml

from conftest import TEST_API_URL, TEST_CERT_SHA256
from outline_cli.core.exceptions import ConfigurationError, NotFoundError, ValidationError
from outline_cli.core.registry import ServerRegistry, default_config_path
from outline_cli.shared.constants import DEFAULT_CONFIG_FILE


class TestDefaultConfigPath:
    """Test default_config_path."""

    def test_env_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("OUTLINE_CLI_CONFIG", str(tmp_path / "custom.yaml"))

        assert default_config_path() == tmp_path / "custom.yaml"

    def test_default_location(self, monkeypatch):
        monkeypatch.delenv("OUTLINE_CLI_CONFIG", raising=False)

        assert default_config_path() == DEFAULT_CONFIG_FILE
        assert DEFAULT_CONFIG_FILE.parts[-2:] == ("outline-cli", "config.yaml")


class TestLoad:
    """Test reading the registry file."""

    def test_missing_file_is_empty_registry(self, config_file):
        reg = ServerRegistry(config_file, logger=Mock())

        assert reg.list_all() == []
        assert not config_file.exists()

    def test_uses_env_path_by_default(self, config_file):
        reg = ServerRegistry(logger=Mock())

        assert reg.path == config_file

    def test_loads_existing_entries(self, config_file):
        config_file.parent.mkdir(parents=True)
        config_file.write_text(
            yaml.safe_dump(
                {"servers": {"prod": {"name": "prod", "url": TEST_API_URL, "certSha256": TEST_CERT_SHA256}}}
            )
        )

        reg = ServerRegistry(config_file, logger=Mock())

        server = reg.get("prod")
        assert server.url == TEST_API_URL
        assert server.cert_sha256 == TEST_CERT_SHA256

    def test_empty_file_is_empty_registry(self, config_file):
        config_file.parent.mkdir(parents=True)
        config_file.write_text("")

        assert ServerRegistry(config_file, logger=Mock()).list_all() == []

    def test_invalid_yaml_raises(self, config_file):
        config_file.parent.mkdir(parents=True)
        config_file.write_text("servers: [unclosed")

        with pytest.raises(ConfigurationError) as exc_info:
            ServerRegistry(config_file, logger=Mock())

        assert "invalid YAML" in str(exc_info.value)

    def test_non_mapping_document_raises(self, config_file):
        config_file.parent.mkdir(parents=True)
        config_file.write_text("- just\n- a list\n")

        with pytest.raises(ConfigurationError):
            ServerRegistry(config_file, logger=Mock())

    @pytest.mark.parametrize("entry", ["x", ["a", "b"], 42])
    def test_non_mapping_entry_raises(self, config_file, entry):
        config_file.parent.mkdir(parents=True)
        config_file.write_text(yaml.safe_dump({"servers": {"a": entry}}))

        with pytest.raises(ConfigurationError) as exc_info:
            ServerRegistry(config_file, logger=Mock())

        assert "server entry 'a'" in str(exc_info.value)

    def test_entry_without_fingerprint_raises(self, config_file):
        config_file.parent.mkdir(parents=True)
        config_file.write_text(yaml.safe_dump({"servers": {"old": {"url": TEST_API_URL}}}))

        with pytest.raises(ConfigurationError) as exc_info:
            ServerRegistry(config_file, logger=Mock())

        assert "'old'" in str(exc_info.value)


class TestSave:
    """Test writing the registry file."""

    def test_round_trip(self, registry, config_file):
        reloaded = ServerRegistry(config_file, logger=Mock())

        assert reloaded.get("myserver") == registry.get("myserver")

    def test_file_is_owner_only(self, registry, config_file):
        mode = stat.S_IMODE(os.stat(config_file).st_mode)

        assert mode == 0o600

    def test_parent_directory_created(self, registry, config_file):
        assert config_file.parent.is_dir()

    def test_yaml_layout(self, registry, config_file):
        data = yaml.safe_load(config_file.read_text())

        assert data == {
            "servers": {
                "myserver": {"name": "myserver", "url": TEST_API_URL, "certSha256": TEST_CERT_SHA256}
            }
        }

    def test_dump_matches_file(self, registry, config_file):
        assert registry.dump() == config_file.read_text()


class TestAdd:
    """Test adding servers."""

    def test_duplicate_name_rejected(self, registry):
        with pytest.raises(ConfigurationError) as exc_info:
            registry.add("myserver", TEST_API_URL, TEST_CERT_SHA256)

        assert "already exists" in str(exc_info.value)

    def test_empty_fingerprint_rejected(self, registry):
        with pytest.raises(ValidationError):
            registry.add("other", TEST_API_URL, "")

        assert registry.lookup("other") is None

    def test_invalid_url_rejected(self, registry):
        with pytest.raises(ValidationError):
            registry.add("other", "no-scheme", TEST_CERT_SHA256)

        assert registry.lookup("other") is None

    def test_add_persists(self, registry, config_file):
        registry.add("second", "https://198.51.100.1:1111/xyz", "ab" * 32)

        reloaded = ServerRegistry(config_file, logger=Mock())
        assert [s.name for s in reloaded.list_all()] == ["myserver", "second"]


class TestAddFromJSON:
    """Test importing the installer's JSON output."""

    def test_valid_json(self, config_file):
        reg = ServerRegistry(config_file, logger=Mock())

        server = reg.add_from_json(
            "fromjson", f'{{"apiUrl": "{TEST_API_URL}", "certSha256": "{TEST_CERT_SHA256}"}}'
        )

        assert server.url == TEST_API_URL
        assert server.cert_sha256 == TEST_CERT_SHA256

    @pytest.mark.parametrize(
        "payload,message",
        [
            ("{not json", "invalid JSON format"),
            ("[1, 2]", "invalid JSON format"),
            (f'{{"certSha256": "{TEST_CERT_SHA256}"}}', "apiUrl is required"),
            (f'{{"apiUrl": "{TEST_API_URL}"}}', "certSha256 is required"),
        ],
    )
    def test_invalid_json(self, config_file, payload, message):
        reg = ServerRegistry(config_file, logger=Mock())

        with pytest.raises(ValidationError) as exc_info:
            reg.add_from_json("bad", payload)

        assert message in str(exc_info.value)
        assert not config_file.exists()


class TestGetUpdateDelete:
    """Test lookup, URL update and deletion."""

    def test_get_unknown_raises(self, registry):
        with pytest.raises(NotFoundError) as exc_info:
            registry.get("nope")

        assert str(exc_info.value) == "server 'nope' not found"

    def test_update_url_keeps_fingerprint(self, registry, config_file):
        registry.update_url("myserver", "https://198.51.100.2:9999/new")

        reloaded = ServerRegistry(config_file, logger=Mock()).get("myserver")
        assert reloaded.url == "https://198.51.100.2:9999/new"
        assert reloaded.cert_sha256 == TEST_CERT_SHA256

    def test_update_without_url_is_noop(self, registry):
        server = registry.update_url("myserver", None)

        assert server.url == TEST_API_URL

    def test_update_unknown_raises(self, registry):
        with pytest.raises(NotFoundError):
            registry.update_url("nope", TEST_API_URL)

    def test_update_invalid_url_raises(self, registry):
        with pytest.raises(ValidationError):
            registry.update_url("myserver", "bad")

        assert registry.get("myserver").url == TEST_API_URL

    def test_delete(self, registry, config_file):
        assert registry.delete("myserver") is True
        assert registry.lookup("myserver") is None
        assert ServerRegistry(config_file, logger=Mock()).list_all() == []

    def test_delete_unknown_returns_false(self, registry):
        assert registry.delete("nope") is False
