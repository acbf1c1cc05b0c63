import base64

import httpx

from bravo.core.auth import FavroAuth, basic_auth_header, mask_token


def test_basic_auth_header_encodes_email_and_token():
    """Authorization 为 email:token 的 base64"""
    header = basic_auth_header("dev@example.com", "secret-token")

    scheme, encoded = header["Authorization"].split(" ", 1)
    assert scheme == "Basic"
    assert base64.b64decode(encoded).decode("utf-8") == "dev@example.com:secret-token"


def test_mask_token_keeps_prefix_only():
    assert mask_token("abcdefgh") == "abcd***"
    assert mask_token("abc") == "***"
    assert mask_token("") == "***"


def test_favro_auth_sets_header():
    request = httpx.Request("GET", "https://favro.com/api/v1/collections")

    flow = FavroAuth("dev@example.com", "secret-token").auth_flow(request)
    authed = next(flow)

    assert authed.headers["Authorization"] == basic_auth_header(
        "dev@example.com", "secret-token"
    )["Authorization"]
