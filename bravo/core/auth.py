import base64

import httpx


def mask_token(token: str, visible_chars: int = 4) -> str:
    """对 token 进行脱敏处理，仅显示前几个字符"""
    if not token or len(token) <= visible_chars:
        return "***"
    return f"{token[:visible_chars]}***"


def basic_auth_header(user_email: str, token: str) -> dict[str, str]:
    """
    构造 Favro Basic Auth 请求头

    Favro 使用 `email:token` 的 base64 编码作为 Basic 凭证。

    Args:
        user_email: 令牌所属用户的邮箱
        token: Favro API token

    Returns:
        {"Authorization": "Basic ..."}
    """
    credentials = f"{user_email}:{token}".encode("utf-8")
    encoded = base64.b64encode(credentials).decode("ascii")
    return {"Authorization": f"Basic {encoded}"}


class FavroAuth(httpx.Auth):
    """
    Favro Basic Auth

    每个请求注入 Authorization 头，凭证来自当前会话状态。
    """

    def __init__(self, user_email: str, token: str):
        self._header = basic_auth_header(user_email, token)

    def auth_flow(self, request: httpx.Request):
        request.headers.update(self._header)
        yield request
