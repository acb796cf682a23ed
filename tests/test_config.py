"""Tests for configuration file handling."""

import argparse

import pytest

from dirquery.config import (
    DEFAULT_CONFIG_TEMPLATE,
    ConfigError,
    build_connection_config,
    generate_config_file,
    load_config,
    merge_config_with_args,
    normalize_protocol,
)


class TestLoadConfig:
    def test_load_from_ini(self, sample_ini):
        values = load_config(str(sample_ini))
        assert values["host"] == "ldap.example.com"
        assert values["protocol"] == "ldaps"
        assert values["port"] is None
        assert values["base_dn"] == "dc=example,dc=com"
        assert values["tls_insecure"] is True
        assert values["bind_dn"] == "cn=reader,dc=example,dc=com"
        assert values["bind_password"] == "p%ss"
        assert values["base"] == "ou=people,dc=example,dc=com"
        assert values["scope"] == "one"
        assert values["attributes"] == "cn, mail"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(str(tmp_path / "missing.ini"))

    def test_invalid_port(self, tmp_path):
        path = tmp_path / "bad.ini"
        path.write_text("[server]\nhost = h\nport = abc\n")
        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_template_is_loadable(self, tmp_path):
        path = tmp_path / "template.ini"
        path.write_text(DEFAULT_CONFIG_TEMPLATE)
        values = load_config(str(path))
        assert values["host"] == "ldap.example.com"
        assert values["bind_dn"] is None
        assert values["attributes"] is None


class TestBuildConnectionConfig:
    def test_from_ini_values(self, sample_ini):
        config = build_connection_config(load_config(str(sample_ini)))
        assert config.protocol == "ldaps"
        assert config.port == 636
        assert config.tls_insecure is True
        assert "BEGIN CERTIFICATE" in config.ca_pem
        assert config.bind_password == "p%ss"

    def test_defaults(self):
        config = build_connection_config({"host": " h "})
        assert config.host == "h"
        assert config.protocol == "ldap"
        assert config.port == 389
        assert config.ca_pem is None

    def test_missing_ca_file(self, tmp_path):
        with pytest.raises(ConfigError):
            build_connection_config({"host": "h", "ca_file": str(tmp_path / "nope.pem")})


class TestNormalizeProtocol:
    @pytest.mark.parametrize("value,expected", [
        (None, "ldap"), ("plain", "ldap"), ("LDAP", "ldap"), ("tls", "ldaps"), ("ldaps", "ldaps"),
    ])
    def test_aliases(self, value, expected):
        assert normalize_protocol(value) == expected

    def test_unknown(self):
        with pytest.raises(ConfigError):
            normalize_protocol("http")


class TestMergeConfigWithArgs:
    def test_cli_wins(self):
        args = argparse.Namespace(host="cli-host", scope=None, tls_insecure=None)
        merged = merge_config_with_args({"host": "file-host", "scope": "one", "tls_insecure": True}, args)
        assert merged.host == "cli-host"
        assert merged.scope == "one"
        assert merged.tls_insecure is True

    def test_none_values_skipped(self):
        args = argparse.Namespace(host="cli-host")
        assert merge_config_with_args({"host": None}, args).host == "cli-host"


class TestGenerateConfigFile:
    def test_returns_template(self):
        assert generate_config_file() == DEFAULT_CONFIG_TEMPLATE

    def test_writes_file(self, tmp_path):
        path = tmp_path / "out.ini"
        generate_config_file(str(path))
        assert path.read_text() == DEFAULT_CONFIG_TEMPLATE
