# =============================================================================
# tests/test_workers.py - Verification Email Worker Tests
# =============================================================================

import asyncio
import json
from urllib.parse import urlparse, parse_qs

import httpx
import pytest
from arq import Retry

from webapp.config import settings
from webapp.workers import tasks
from webapp.workers.redis_config import parse_redis_url

PAYLOAD = {
    "email": "alice@example.com",
    "firstName": "Alice",
    "lastName": "Smith",
    "token": "tok-123",
}


@pytest.fixture
def mail_settings(monkeypatch):
    monkeypatch.setattr(settings, "mail_api_url", "https://mail.example.com/send")
    monkeypatch.setattr(settings, "mail_api_key", "mail-key")
    monkeypatch.setattr(settings, "verification_base_url", "https://shop.example.com/")
    return settings


def make_ctx(handler, job_try=1):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return {"http_client": client, "job_try": job_try}


def test_verification_link(mail_settings):
    link = tasks.build_verification_link("alice+shop@example.com", "tok-123")

    parsed = urlparse(link)
    assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == "https://shop.example.com/v1/user/verify"
    assert parse_qs(parsed.query) == {"email": ["alice+shop@example.com"], "token": ["tok-123"]}


def test_render_email(mail_settings):
    message = tasks.render_verification_email(PAYLOAD)

    assert message["to"] == ["alice@example.com"]
    assert "Hello Alice Smith" in message["text"]
    assert "token=tok-123" in message["text"]


def test_sends_email(mail_settings):
    sent = []

    def relay(request):
        sent.append(request)
        return httpx.Response(202)

    result = asyncio.run(tasks.send_verification_email(make_ctx(relay), PAYLOAD))

    assert result == {"success": True, "email": "alice@example.com"}
    assert sent[0].headers["Authorization"] == "Bearer mail-key"
    assert json.loads(sent[0].content)["to"] == ["alice@example.com"]


def test_server_error_is_retried(mail_settings):
    ctx = make_ctx(lambda request: httpx.Response(502), job_try=2)

    with pytest.raises(Retry):
        asyncio.run(tasks.send_verification_email(ctx, PAYLOAD))


def test_network_error_is_retried(mail_settings):
    def unreachable(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(Retry):
        asyncio.run(tasks.send_verification_email(make_ctx(unreachable), PAYLOAD))


def test_rejected_message_is_not_retried(mail_settings):
    result = asyncio.run(tasks.send_verification_email(make_ctx(lambda r: httpx.Response(422)), PAYLOAD))

    assert result["success"] is False


def test_relay_not_configured(monkeypatch):
    monkeypatch.setattr(settings, "mail_api_url", None)

    result = asyncio.run(tasks.send_verification_email({}, PAYLOAD))

    assert result["success"] is False


def test_parse_redis_url():
    parsed = parse_redis_url("redis://:pw@cache.internal:6380/2")

    assert parsed.host == "cache.internal"
    assert parsed.port == 6380
    assert parsed.password == "pw"
    assert parsed.database == 2
    assert parsed.ssl is False


def test_parse_tls_redis_url():
    parsed = parse_redis_url("rediss://default:pw@cache.example.com:6379")

    assert parsed.ssl is True
    assert parsed.username == "default"
    assert parsed.database == 0
