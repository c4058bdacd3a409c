from datetime import timedelta

from starlette.requests import Request
from starlette.responses import Response

from expat_hub.api.session_cookie import SessionCookie
from expat_hub.models.user_account import UserSession, utcnow


def _request(cookie_header=None):
    headers = []
    if cookie_header is not None:
        headers.append((b"cookie", cookie_header.encode("latin-1")))
    return Request({"type": "http", "method": "GET", "path": "/", "headers": headers})


def test_secure_flag_only_when_configured():
    record = UserSession(token="abc", user_id=1, expires_at=utcnow() + timedelta(days=30))

    secure = Response()
    SessionCookie(secure=True).attach(secure, record)
    assert secure.headers["set-cookie"].startswith("session=abc")
    assert "secure" in secure.headers["set-cookie"].lower()

    plain = Response()
    SessionCookie(secure=False).attach(plain, record)
    assert "secure" not in plain.headers["set-cookie"].lower()


def test_custom_cookie_name_and_read():
    cookie = SessionCookie(name="expat_session")
    assert cookie.read(_request("expat_session=tok123; other=1")) == "tok123"
    assert cookie.read(_request("session=tok123")) is None
    assert cookie.read(_request()) is None


def test_clear_expires_cookie():
    response = Response()
    SessionCookie().clear(response)
    header = response.headers["set-cookie"].lower()
    assert header.startswith("session=")
    assert "max-age=0" in header
