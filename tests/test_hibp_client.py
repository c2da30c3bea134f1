"""
Tests for the Pwned Passwords range API client and protocol helpers.
"""

import asyncio

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from pwsentry.exceptions import BreachServiceUnavailable
from pwsentry.hibp.checker import BreachChecker
from pwsentry.hibp.client import HIBPClient, hash_password_sha1, parse_range_response

from conftest import sha1_upper


# ============================================================================
# DIGEST SPLITTING
# ============================================================================

@pytest.mark.parametrize("password", ["", "a", "password", "Pässwörd-ünïcode", "x" * 500])
def test_prefix_is_five_uppercase_hex_chars(password):
    prefix, suffix = hash_password_sha1(password)

    assert len(prefix) == 5
    assert len(suffix) == 35
    assert all(c in "0123456789ABCDEF" for c in prefix)
    assert prefix == prefix.upper()
    assert prefix + suffix == sha1_upper(password)


def test_digest_is_deterministic():
    assert hash_password_sha1("correct horse") == hash_password_sha1("correct horse")
    assert hash_password_sha1("correct horse") != hash_password_sha1("correct horsf")


def test_known_digest():
    # SHA-1("password") = 5BAA61E4C9B93F3F0682250B6CF8331B7EE68FD8
    assert hash_password_sha1("password") == ("5BAA6", "1E4C9B93F3F0682250B6CF8331B7EE68FD8")


# ============================================================================
# RESPONSE PARSING
# ============================================================================

SUFFIX = "1E4C9B93F3F0682250B6CF8331B7EE68FD8"


def test_parse_finds_matching_suffix():
    body = f"003D68EB55068C33ACE09247EE4C639306B:3\r\n{SUFFIX}:10434004\r\n012C192B2F16F82EA0EB9EF18D9D539B0DD:1"
    assert parse_range_response(body, SUFFIX) == 10434004


def test_parse_accepts_lf_and_lowercase():
    body = f"003D68EB55068C33ACE09247EE4C639306B:3\n{SUFFIX.lower()}: 12 \n"
    assert parse_range_response(body, SUFFIX) == 12


def test_parse_absent_suffix_is_zero():
    body = "003D68EB55068C33ACE09247EE4C639306B:3\r\n012C192B2F16F82EA0EB9EF18D9D539B0DD:1"
    assert parse_range_response(body, SUFFIX) == 0


def test_parse_padding_entry_is_zero():
    assert parse_range_response(f"{SUFFIX}:0", SUFFIX) == 0


def test_parse_ignores_blank_and_malformed_lines():
    assert parse_range_response("\r\n\r\nnot-a-pair\r\n", SUFFIX) == 0
    assert parse_range_response(f"{SUFFIX}:lots", SUFFIX) == 0


def test_parse_empty_body():
    assert parse_range_response("", SUFFIX) == 0


# ============================================================================
# HTTP CLIENT
# ============================================================================

def make_app(status: int = 200, delay: float = 0.0, body: bytes | None = None) -> tuple[web.Application, list]:
    seen = []

    async def handle_range(request: web.Request) -> web.Response:
        seen.append({
            "path": request.path,
            "prefix": request.match_info["prefix"],
            "user_agent": request.headers.get("User-Agent"),
            "padding": request.headers.get("Add-Padding"),
        })
        if delay:
            await asyncio.sleep(delay)
        if status != 200:
            return web.Response(status=status, text="unavailable")
        if body is not None:
            return web.Response(body=body, content_type="text/plain", charset="utf-8")
        return web.Response(text=f"{SUFFIX}:99\r\n003D68EB55068C33ACE09247EE4C639306B:3")

    app = web.Application()
    app.router.add_get("/range/{prefix}", handle_range)
    return app, seen


@pytest.mark.asyncio
async def test_fetch_range_sends_only_prefix():
    app, seen = make_app()

    async with TestServer(app) as server:
        async with HIBPClient(range_api_url=str(server.make_url("/range")), user_agent="pwsentry-tests") as client:
            body = await client.fetch_range("5baa6")

    assert parse_range_response(body, SUFFIX) == 99
    assert seen == [{
        "path": "/range/5BAA6",
        "prefix": "5BAA6",
        "user_agent": "pwsentry-tests",
        "padding": None,
    }]


@pytest.mark.asyncio
async def test_fetch_range_add_padding_header():
    app, seen = make_app()

    async with TestServer(app) as server:
        async with HIBPClient(range_api_url=str(server.make_url("/range")), add_padding=True) as client:
            await client.fetch_range("5BAA6")

    assert seen[0]["padding"] == "true"
    assert seen[0]["user_agent"] == HIBPClient.DEFAULT_USER_AGENT


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [404, 429, 500, 503])
async def test_fetch_range_non_success_status_raises(status):
    app, _ = make_app(status=status)

    async with TestServer(app) as server:
        async with HIBPClient(range_api_url=str(server.make_url("/range"))) as client:
            with pytest.raises(BreachServiceUnavailable) as exc:
                await client.fetch_range("5BAA6")

    assert exc.value.status == status


@pytest.mark.asyncio
async def test_fetch_range_timeout_raises():
    app, _ = make_app(delay=1.0)

    async with TestServer(app) as server:
        async with HIBPClient(range_api_url=str(server.make_url("/range")), timeout=0.1) as client:
            with pytest.raises(BreachServiceUnavailable, match="timed out"):
                await client.fetch_range("5BAA6")


@pytest.mark.asyncio
async def test_fetch_range_undecodable_body_raises():
    app, _ = make_app(body=b"\xff\xfe\xfa:12\r\n")

    async with TestServer(app) as server:
        async with HIBPClient(range_api_url=str(server.make_url("/range"))) as client:
            with pytest.raises(BreachServiceUnavailable, match="undecodable"):
                await client.fetch_range("5BAA6")


@pytest.mark.asyncio
async def test_undecodable_body_fails_open():
    app, _ = make_app(body=b"\xff\xfe\xfa:12\r\n")

    async with TestServer(app) as server:
        async with HIBPClient(range_api_url=str(server.make_url("/range"))) as client:
            result = await BreachChecker(client).check("whatever-password")

    assert result.degraded is True
    assert result.is_breached is False


@pytest.mark.asyncio
async def test_fetch_range_connection_error_raises():
    async with HIBPClient(range_api_url="http://127.0.0.1:1/range", timeout=2) as client:
        with pytest.raises(BreachServiceUnavailable):
            await client.fetch_range("5BAA6")


@pytest.mark.asyncio
@pytest.mark.parametrize("prefix", ["", "5BAA", "5BAA61", "ZZZZZ", "5BAA61E4C9B93F3F0682250B6CF8331B7EE68FD8"])
async def test_fetch_range_rejects_anything_but_a_prefix(prefix):
    client = HIBPClient()
    with pytest.raises(ValueError):
        await client.fetch_range(prefix)
    await client.close()
