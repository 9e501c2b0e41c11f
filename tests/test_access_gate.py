"""
Tests for the access control gate: the pure decision table and the middleware
"""
from urllib.parse import parse_qs, urlparse

import pytest

from auth import Role
from conftest import ADMIN_TOKEN, USER_TOKEN, auth_headers
from utils.access_gate import ADMIN_HOME, SIGN_IN, USER_HOME, GateDecision, decide


@pytest.mark.parametrize(
    "user_id,role,path,expected",
    [
        # anonymous
        (None, None, "/dashboard", GateDecision.redirect(SIGN_IN)),
        (None, None, "/dashboard/settings", GateDecision.redirect(SIGN_IN)),
        (None, None, "/forum/42", GateDecision.redirect(SIGN_IN)),
        (None, None, "/", GateDecision.proceed()),
        (None, None, "/sign-in", GateDecision.proceed()),
        (None, None, "/admin/dashboard", GateDecision.proceed()),
        # signed-in user
        ("user_1", Role.USER, "/admin/dashboard", GateDecision.redirect(USER_HOME)),
        ("user_1", Role.USER, "/administrator", GateDecision.redirect(USER_HOME)),
        ("user_1", Role.USER, "/", GateDecision.redirect(USER_HOME)),
        ("user_1", Role.USER, "/sign-up", GateDecision.redirect(USER_HOME)),
        ("user_1", Role.USER, "/dashboard", GateDecision.proceed()),
        ("user_1", None, "/forum", GateDecision.proceed()),
        # admin
        ("admin_1", Role.ADMIN, "/dashboard", GateDecision.redirect(ADMIN_HOME)),
        ("admin_1", Role.ADMIN, "/", GateDecision.redirect(ADMIN_HOME)),
        ("admin_1", Role.ADMIN, "/admin/dashboard", GateDecision.proceed()),
        ("admin_1", Role.ADMIN, "/admin/users/7", GateDecision.proceed()),
    ],
)
def test_decide(user_id, role, path, expected):
    assert decide(user_id, role, path) == expected


def test_role_from_claim_is_two_valued():
    assert Role.from_claim("admin") is Role.ADMIN
    assert Role.from_claim("user") is Role.USER
    assert Role.from_claim("superuser") is Role.USER
    assert Role.from_claim(None) is Role.USER


@pytest.mark.asyncio
async def test_anonymous_protected_page_redirects_to_sign_in(client):
    response = await client.get("/dashboard")

    assert response.status_code == 307
    location = urlparse(response.headers["location"])
    assert location.path == "/sign-in"
    assert parse_qs(location.query)["redirect_url"] == ["http://test/dashboard"]


@pytest.mark.asyncio
async def test_admin_is_sent_to_admin_home(client):
    response = await client.get("/dashboard", headers=auth_headers(ADMIN_TOKEN))

    assert response.status_code == 307
    assert response.headers["location"] == ADMIN_HOME


@pytest.mark.asyncio
async def test_user_is_kept_out_of_admin_pages(client):
    client.cookies.set("__session", USER_TOKEN)
    response = await client.get("/admin/dashboard")

    assert response.status_code == 307
    assert response.headers["location"] == USER_HOME


@pytest.mark.asyncio
async def test_signed_in_user_skips_public_pages(client):
    response = await client.get("/sign-in", headers=auth_headers(USER_TOKEN))

    assert response.status_code == 307
    assert response.headers["location"] == USER_HOME


@pytest.mark.asyncio
async def test_allowed_request_reaches_the_app(client):
    response = await client.get("/health")

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_health_check_is_not_redirected_for_admins(client):
    response = await client.get("/health", headers=auth_headers(ADMIN_TOKEN))

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_role_resolution_error_redirects_to_error_page(client, identity_provider):
    async def broken(token):
        raise RuntimeError("identity provider unreachable")

    identity_provider.verify_session = broken

    response = await client.get("/dashboard", headers=auth_headers(USER_TOKEN))

    assert response.status_code == 307
    assert response.headers["location"] == "/error"


@pytest.mark.asyncio
async def test_api_routes_bypass_page_redirects(client):
    # An admin calling a non-admin API is not bounced to the admin home page
    response = await client.get("/api/todos", headers=auth_headers(ADMIN_TOKEN))

    assert response.status_code != 307


@pytest.mark.asyncio
async def test_static_assets_skip_the_gate(client, identity_provider):
    async def broken(token):
        raise RuntimeError("should not be called")

    identity_provider.verify_session = broken

    response = await client.get("/favicon.ico", headers=auth_headers(USER_TOKEN))

    assert response.status_code == 404
