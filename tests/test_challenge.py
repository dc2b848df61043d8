"""Tests for webauthz challenge parsing."""

import httpx

from webauthz.challenge import parse_bearer_params, parse_challenge, split_auth_params

RESOURCE_URI = "https://resource.example.com/api/contact/1234"


def challenge_response(header: str | None, status_code: int = 401) -> httpx.Response:
    headers = {"WWW-Authenticate": header} if header is not None else {}
    return httpx.Response(status_code, headers=headers)


class TestSplitAuthParams:
    """Tests for splitting auth-param lists."""

    def test_splits_on_commas(self):
        assert split_auth_params('a="1",b=2') == ['a="1"', "b=2"]

    def test_keeps_commas_inside_quotes(self):
        assert split_auth_params('scope="read,write", realm=x') == ['scope="read,write"', " realm=x"]

    def test_escaped_quote_does_not_end_quoted_value(self):
        assert split_auth_params(r'realm="a\"b,c", scope=y') == [r'realm="a\"b,c"', " scope=y"]


class TestParseBearerParams:
    """Tests for parsing Bearer challenge parameters."""

    def test_quoted_values(self):
        params = parse_bearer_params(
            'Bearer realm="x",scope="y",path="/",webauthz_discovery_uri="https://auth.example/d"'
        )
        assert params == {
            "realm": "x",
            "scope": "y",
            "path": "/",
            "webauthz_discovery_uri": "https://auth.example/d",
        }

    def test_unquoted_values_are_percent_decoded(self):
        params = parse_bearer_params(
            "Bearer webauthz_discovery_uri=https%3A%2F%2Fauth.example%2Fd, path=%2Fapi"
        )
        assert params["webauthz_discovery_uri"] == "https://auth.example/d"
        assert params["path"] == "/api"

    def test_quoted_values_are_percent_decoded(self):
        params = parse_bearer_params('Bearer scope="read%20write"')
        assert params["scope"] == "read write"

    def test_scheme_is_case_insensitive(self):
        assert parse_bearer_params("BEARER realm=x") == {"realm": "x"}
        assert parse_bearer_params("bearer realm=x") == {"realm": "x"}

    def test_other_scheme_returns_none(self):
        assert parse_bearer_params('Basic realm="x"') is None

    def test_value_split_on_first_equals(self):
        params = parse_bearer_params('Bearer webauthz_discovery_uri="https://a.example/d?x=1"')
        assert params["webauthz_discovery_uri"] == "https://a.example/d?x=1"

    def test_whitespace_and_empty_items_ignored(self):
        params = parse_bearer_params("Bearer  realm=x ,  , scope=y ,")
        assert params == {"realm": "x", "scope": "y"}

    def test_item_without_equals_ignored(self):
        assert parse_bearer_params("Bearer garbage, realm=x") == {"realm": "x"}

    def test_quoted_comma_is_preserved(self):
        params = parse_bearer_params('Bearer scope="read,write", realm="x"')
        assert params == {"scope": "read,write", "realm": "x"}

    def test_backslash_escapes_resolved_in_quoted_values(self):
        params = parse_bearer_params(r'Bearer realm="C:\x", scope="a\\b", path="say \"hi\""')
        assert params == {"realm": "C:x", "scope": "a\\b", "path": 'say "hi"'}

    def test_backslash_kept_in_unquoted_values(self):
        assert parse_bearer_params(r"Bearer realm=C:\x") == {"realm": "C:\\x"}


class TestParseChallenge:
    """Tests for finding webauthz challenges in responses."""

    def test_populated_challenge(self):
        response = challenge_response(
            'Bearer realm="x",scope="y",path="/",webauthz_discovery_uri="https://auth.example/d"'
        )

        challenge = parse_challenge(RESOURCE_URI, "sparky", response)

        assert challenge is not None
        assert challenge.resource_uri == RESOURCE_URI
        assert challenge.realm == "x"
        assert challenge.scope == "y"
        assert challenge.path == "/"
        assert challenge.webauthz_discovery_uri == "https://auth.example/d"
        assert challenge.user_id == "sparky"

    def test_missing_discovery_uri_returns_none(self):
        response = challenge_response('Bearer realm="x",scope="y"')
        assert parse_challenge(RESOURCE_URI, "sparky", response) is None

    def test_empty_discovery_uri_returns_none(self):
        response = challenge_response('Bearer webauthz_discovery_uri=""')
        assert parse_challenge(RESOURCE_URI, "sparky", response) is None

    def test_no_header_returns_none(self):
        assert parse_challenge(RESOURCE_URI, "sparky", challenge_response(None)) is None

    def test_non_bearer_scheme_returns_none(self):
        response = challenge_response('Basic realm="x", webauthz_discovery_uri="https://a/d"')
        assert parse_challenge(RESOURCE_URI, "sparky", response) is None

    def test_header_name_is_case_insensitive(self):
        response = httpx.Response(
            401, headers={"www-authenticate": "Bearer webauthz_discovery_uri=https://a.example/d"}
        )
        challenge = parse_challenge(RESOURCE_URI, "sparky", response)
        assert challenge is not None
        assert challenge.webauthz_discovery_uri == "https://a.example/d"

    def test_optional_params_default_to_none(self):
        response = challenge_response("Bearer webauthz_discovery_uri=https://a.example/d")

        challenge = parse_challenge(RESOURCE_URI, "sparky", response)

        assert challenge is not None
        assert challenge.realm is None
        assert challenge.scope is None
        assert challenge.path is None

    def test_unknown_params_ignored(self):
        response = challenge_response(
            'Bearer error="invalid_token", webauthz_discovery_uri="https://a.example/d"'
        )
        challenge = parse_challenge(RESOURCE_URI, "sparky", response)
        assert challenge is not None
        assert not hasattr(challenge, "error")
