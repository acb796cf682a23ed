"""Shared pytest fixtures."""

import pytest

from dirquery.models import ConnectionConfig


class FakeClient:
    """Stands in for LdapSession; records calls and replays scripted results."""

    def __init__(self, entries=None, bind_error=None, search_error=None, unbind_error=None):
        self.entries = entries if entries is not None else []
        self.bind_error = bind_error
        self.search_error = search_error
        self.unbind_error = unbind_error
        self.descriptor = None
        self.bind_calls = []
        self.search_calls = []
        self.unbind_calls = 0

    def __call__(self, descriptor):
        # Used directly as the client factory
        self.descriptor = descriptor
        return self

    def bind(self, dn, password):
        self.bind_calls.append((dn, password))
        if self.bind_error:
            raise self.bind_error

    def search(self, base_dn, **options):
        self.search_calls.append((base_dn, options))
        if self.search_error:
            raise self.search_error
        return self.entries

    def unbind(self):
        self.unbind_calls += 1
        if self.unbind_error:
            raise self.unbind_error


@pytest.fixture
def fake_client():
    return FakeClient(entries=[{"dn": "cn=Alice,dc=example,dc=com", "cn": "Alice"},
                               {"dn": "cn=Bob,dc=example,dc=com", "cn": "Bob"}])


@pytest.fixture
def config():
    return ConnectionConfig(host="example.com", port=389, protocol="ldap", base_dn="dc=example,dc=com")


@pytest.fixture
def config_with_credentials():
    return ConnectionConfig(
        host="example.com",
        protocol="ldap",
        base_dn="dc=example,dc=com",
        bind_dn="cn=admin",
        bind_password="secret",
    )


@pytest.fixture
def sample_ini(tmp_path):
    """Create a sample dirquery.ini config file."""
    ca_path = tmp_path / "ca.pem"
    ca_path.write_text("-----BEGIN CERTIFICATE-----\nAAAA\n-----END CERTIFICATE-----\n")
    config_content = f"""
[server]
host = ldap.example.com
protocol = ldaps
port =
base_dn = dc=example,dc=com
tls_insecure = true
ca_file = {ca_path}

[bind]
bind_dn = cn=reader,dc=example,dc=com
bind_password = p%ss

[search]
base = ou=people,dc=example,dc=com
filter = (cn=A*)
scope = one
attributes = cn, mail
"""
    config_path = tmp_path / "dirquery.ini"
    config_path.write_text(config_content)
    return config_path


@pytest.fixture
def make_client():
    """Factory for FakeClient instances with scripted failures."""
    return FakeClient
