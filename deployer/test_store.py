#!/usr/bin/env python3
"""
Tests for the KEY=value config store
"""

import pytest

from deployer.store import ConfigStore


class TestConfigStore:
    """Reading and appending the deployments file"""

    def test_missing_file_is_empty(self, tmp_path):
        """A store whose file does not exist yet has no entries"""
        store = ConfigStore(tmp_path / "missing.env")
        assert store.load() == {}
        assert len(store) == 0
        assert "ANY_KEY" not in store

    def test_load_parses_comments_and_quotes(self, tmp_path):
        """Comments and section markers are ignored, quotes are unwrapped"""
        path = tmp_path / "deployments.env"
        path.write_text(
            "# ===== Forwarder =====\n"
            "ERC2771_FORWARDER_ADDRESS=0x1111111111111111111111111111111111111111\n"
            'DAO_ADDRESS="0x2222222222222222222222222222222222222222"\n'
        )
        store = ConfigStore(path)

        assert store.keys() == ["ERC2771_FORWARDER_ADDRESS", "DAO_ADDRESS"]
        assert store.get("DAO_ADDRESS") == "0x2222222222222222222222222222222222222222"

    def test_key_without_value_is_left_out(self, tmp_path):
        """A bare key line carries no value; an empty assignment does"""
        path = tmp_path / "deployments.env"
        path.write_text("BARE_KEY\nEMPTY=\n")
        entries = ConfigStore(path).load()

        assert "BARE_KEY" not in entries
        assert entries["EMPTY"] == ""

    def test_append_with_section(self, tmp_path):
        """Entries are written under a section marker"""
        store = ConfigStore(tmp_path / "deployments.env")
        store.append("TAI_VAULT_ADDRESS", "0x3333333333333333333333333333333333333333", section="TaiVault")

        assert store.path.read_text() == (
            "\n# ===== TaiVault =====\n"
            "TAI_VAULT_ADDRESS=0x3333333333333333333333333333333333333333\n"
        )
        assert store.get("TAI_VAULT_ADDRESS") == "0x3333333333333333333333333333333333333333"

    def test_append_after_unterminated_line(self, tmp_path):
        """Appending to a file without a trailing newline keeps the last entry intact"""
        path = tmp_path / "deployments.env"
        path.write_text("A=1")
        store = ConfigStore(path)
        store.append("B", "2")

        assert path.read_text() == "A=1\nB=2\n"
        assert store.load() == {"A": "1", "B": "2"}

    def test_append_creates_parent_directory(self, tmp_path):
        """The store file and its directory are created on first write"""
        store = ConfigStore(tmp_path / "nested" / "deployments.env")
        store.append("KEY", "value")
        assert store.get("KEY") == "value"

    def test_append_rejects_invalid_key(self, tmp_path):
        """Keys must be identifiers"""
        store = ConfigStore(tmp_path / "deployments.env")
        with pytest.raises(ValueError):
            store.append("BAD KEY", "value")
        with pytest.raises(ValueError):
            store.append("1KEY", "value")

    def test_append_rejects_multiline_value(self, tmp_path):
        """A value spanning lines would corrupt the file"""
        store = ConfigStore(tmp_path / "deployments.env")
        with pytest.raises(ValueError):
            store.append("KEY", "one\ntwo")
        assert not store.path.exists()


if __name__ == "__main__":
    pytest.main([__file__])
