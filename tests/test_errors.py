"""Tests for LDAP error classification."""

import pytest
from ldap3.core.exceptions import (
    LDAPInvalidCredentialsResult,
    LDAPResponseTimeoutError,
    LDAPSocketOpenError,
)

from dirquery.ldap.errors import (
    CODE_NAMES,
    NAME_CODES,
    RESULT_CODES,
    LdapError,
    classify,
    classify_short,
    create_ldap_error,
    parse_ad_error_code,
)


class TestResultCodeTable:
    @pytest.mark.parametrize("code", sorted(set(RESULT_CODES) - {32, 50}))
    def test_code_maps_to_table_entry(self, code):
        info = classify({"code": code})
        short, description = RESULT_CODES[code]
        assert info.code == code
        assert info.short == short
        assert info.description == description

    def test_no_such_object_is_reworded(self):
        info = classify({"code": 32})
        assert info.short == "base dn not found"
        assert info.description == RESULT_CODES[32][1]

    def test_insufficient_access_is_reworded(self):
        info = classify({"code": 50})
        assert info.short == "insufficient rights"

    def test_tables_are_read_only(self):
        with pytest.raises(TypeError):
            RESULT_CODES[999] = ("x", "y")
        with pytest.raises(TypeError):
            NAME_CODES["Foo"] = 1

    def test_codes_stay_within_protocol_range(self):
        assert all(0 <= code <= 123 for code in RESULT_CODES)
        assert all(code in RESULT_CODES for code in NAME_CODES.values())


class TestNameLookup:
    @pytest.mark.parametrize("name", sorted(NAME_CODES))
    def test_name_matches_code_lookup(self, name):
        by_name = classify({"name": name})
        by_code = classify({"code": NAME_CODES[name]})
        assert by_name.code == by_code.code
        assert by_name.short == by_code.short
        assert by_name.description == by_code.description

    def test_name_ignored_when_code_present(self):
        info = classify({"code": 49, "name": "NoSuchObjectError", "message": "bad"})
        assert info.short == "invalid credentials"

    def test_canonical_name_wins_for_shared_code(self):
        # LDAPSocketOpenError and ConnectError both map to 91
        assert CODE_NAMES[91] == "ConnectError"
        assert CODE_NAMES[89] == "ParamError"
        assert CODE_NAMES[85] == "TimeoutError"


class TestHeuristics:
    @pytest.mark.parametrize("message", [
        "connect ECONNREFUSED 1.2.3.4:636",
        "getaddrinfo ENOTFOUND ldap.invalid",
        "connect EHOSTUNREACH 10.0.0.1:389",
        "read ECONNRESET",
        "socket connection error while opening: [Errno 111] Connection refused",
        "[Errno -2] Name or service not known",
        "[Errno 113] No route to host",
    ])
    def test_connection_failures(self, message):
        info = classify({"message": message})
        assert info.code == 91
        assert info.short == "connection error"
        assert "firewall" in info.description
        assert info.message == message

    def test_connection_overrides_explicit_code(self):
        info = classify({"code": 49, "name": "InvalidCredentialsError", "message": "ECONNREFUSED"})
        assert info.code == 91
        assert info.short == "connection error"

    def test_timeout_by_name(self):
        info = classify({"name": "TimeoutError", "message": "request abandoned"})
        assert info.code == 85
        assert info.short == "timeout"

    @pytest.mark.parametrize("message", ["request timeout", "connect ETIMEDOUT", "timed out"])
    def test_timeout_by_message(self, message):
        assert classify({"message": message}).short == "timeout"

    def test_timeout_overrides_explicit_code(self):
        info = classify({"code": 32, "message": "Timeout waiting for response"})
        assert info.code == 85
        assert info.short == "timeout"

    def test_connection_beats_timeout(self):
        assert classify({"message": "ETIMEDOUT then ECONNRESET"}).short == "connection error"


class TestFallback:
    def test_unknown_name_uses_raw_message(self):
        info = classify({"name": "Unrecognized", "message": "strange issue"})
        assert info.short == "strange issue"
        assert info.description == "An error occurred."
        assert info.code is None

    def test_short_never_empty(self):
        assert classify({}).short
        assert classify(Exception()).short

    def test_unknown_numeric_code_falls_back(self):
        info = classify({"code": 9999, "message": "weird"})
        assert info.short == "weird"
        assert info.code == 9999

    def test_boolean_code_is_ignored(self):
        assert classify({"code": True, "message": "odd"}).short == "odd"

    def test_classifier_never_raises(self):
        class Exploding:
            @property
            def code(self):
                raise RuntimeError("boom")

        info = classify(Exploding())
        assert info.short == "error"

    def test_classify_short(self):
        assert classify_short({"code": 49}) == "invalid credentials"


class TestExceptions:
    def test_plain_exception(self):
        info = classify(ValueError("something odd"))
        assert info.name == "ValueError"
        assert info.short == "something odd"

    def test_attribute_error_reports_its_type(self):
        try:
            None.fileno()
        except AttributeError as e:
            info = classify(e)
        assert info.name == "AttributeError"
        assert info.code is None
        assert info.short == "'NoneType' object has no attribute 'fileno'"

    def test_import_error_module_name_is_not_a_kind(self):
        info = classify(ImportError("cannot load backend", name="timeout"))
        assert info.name == "ImportError"
        assert info.short == "cannot load backend"

    def test_ldap_error(self):
        info = classify(LdapError("Invalid credentials", code=49, name="InvalidCredentialsError"))
        assert info.code == 49
        assert info.name == "InvalidCredentialsError"
        assert info.short == "invalid credentials"

    def test_ldap3_operation_result(self):
        err = LDAPInvalidCredentialsResult(
            result=49,
            description="invalidCredentials",
            message="80090308: LdapErr: DSID-0C09042A, comment: AcceptSecurityContext error, data 775, v3839",
        )
        info = classify(err)
        assert info.code == 49
        assert info.short == "invalid credentials"
        assert info.detail == "ERROR_ACCOUNT_LOCKED_OUT"

    def test_ldap3_socket_error(self):
        err = LDAPSocketOpenError("socket connection error while opening: [Errno 111] Connection refused")
        assert classify(err).short == "connection error"

    def test_ldap3_response_timeout(self):
        info = classify(LDAPResponseTimeoutError("no response from server"))
        assert info.short == "timeout"

    def test_ldap3_name_without_code(self):
        from ldap3.core.exceptions import LDAPInvalidFilterError
        info = classify(LDAPInvalidFilterError("malformed filter"))
        assert info.code == 87
        assert info.short == "filter error"


class TestCreateLdapError:
    def test_param_error(self):
        err = create_ldap_error(89, "Missing base DN")
        assert isinstance(err, LdapError)
        assert err.code == 89
        assert err.name == "ParamError"
        assert str(err) == "Missing base DN"

    def test_message_defaults_to_description(self):
        err = create_ldap_error(49)
        assert err.message == RESULT_CODES[49][1]
        assert err.name == "InvalidCredentialsError"

    def test_explicit_name(self):
        assert create_ldap_error(80, "x", name="CustomError").name == "CustomError"

    def test_unknown_code(self):
        err = create_ldap_error(4096)
        assert err.message == "LDAP error"
        assert err.name == "LDAPError"

    def test_round_trip_through_classifier(self):
        info = classify(create_ldap_error(89, "Invalid search scope: invalid"))
        assert info.code == 89
        assert info.short == "param error"
        assert info.message == "Invalid search scope: invalid"


class TestAdErrorCodes:
    def test_parse(self):
        assert parse_ad_error_code("AcceptSecurityContext error, data 52e, v4563") == 0x52e

    def test_no_match(self):
        assert parse_ad_error_code("Invalid credentials") is None
