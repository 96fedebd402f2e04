"""Integration tests for the HTTP surface."""

import pytest
from aiohttp import web
from aiohttp.test_utils import TestClient, TestServer
from jose import jwt

from affiliate.services.referral.directory import validate_code
from affiliate.utils.exceptions import TransientStoreError
from web.app import create_app
from web.auth import JWTIdentityVerifier
from web.middlewares import error_middleware


JWT_SECRET = "test_jwt_secret_for_testing_only"
SALES_KEY = "test_sales_key_0123456789"
ADMIN_EMAIL = "admin@example.com"


def auth(uid: str, email: str | None = None, name: str | None = None) -> dict:
    """Authorization header for a participant."""
    claims = {"sub": uid, "email": email or f"{uid}@example.com"}
    if name:
        claims["name"] = name
    token = jwt.encode(claims, JWT_SECRET, algorithm="HS256")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def app(session_maker, commission_config, clock):
    return create_app(
        session_maker,
        JWTIdentityVerifier(JWT_SECRET),
        config=commission_config,
        sales_api_key=SALES_KEY,
        admin_emails=[ADMIN_EMAIL],
        clock=clock,
    )


@pytest.fixture
async def client(app):
    async with TestClient(TestServer(app)) as client:
        yield client


async def bootstrap(client, uid: str, name: str, referrer_code: str | None = None) -> dict:
    body = {"fullName": name}
    if referrer_code:
        body["referrerCode"] = referrer_code
    resp = await client.post("/users/bootstrap", json=body, headers=auth(uid))
    assert resp.status == 200
    return (await resp.json())["user"]


async def upgrade(client, uid: str, plan: str) -> None:
    resp = await client.post("/subscription/upgrade", json={"plan": plan}, headers=auth(uid))
    assert resp.status == 200


async def post_sale(client, body: dict, key: str = SALES_KEY):
    return await client.post("/bundle/sales", json=body, headers={"X-Sales-Key": key})


@pytest.fixture
async def chain(client):
    """E (elite) <- P (pro); returns P's referral code."""
    e_user = await bootstrap(client, "E", "Eva Elite")
    await upgrade(client, "E", "elite")
    p_user = await bootstrap(client, "P", "Pablo Pro", referrer_code=e_user["referralCode"])
    await upgrade(client, "P", "pro")
    return p_user["referralCode"]


class TestHealthAndAuth:
    """Tests for public endpoints and authentication."""

    @pytest.mark.asyncio
    async def test_health(self, client):
        resp = await client.get("/health")

        assert resp.status == 200
        assert await resp.json() == {"ok": True}

    @pytest.mark.asyncio
    async def test_missing_token(self, client):
        resp = await client.get("/me")

        assert resp.status == 401

    @pytest.mark.asyncio
    async def test_bad_signature(self, client):
        token = jwt.encode({"sub": "E"}, "another-secret", algorithm="HS256")

        resp = await client.get("/me", headers={"Authorization": f"Bearer {token}"})

        assert resp.status == 401

    @pytest.mark.asyncio
    async def test_me_before_bootstrap(self, client):
        resp = await client.get("/me", headers=auth("nobody"))

        assert resp.status == 404


class TestOnboarding:
    """Tests for bootstrap, profile and referral validation."""

    @pytest.mark.asyncio
    async def test_bootstrap_and_me(self, client):
        user = await bootstrap(client, "uid-1", "Ana Perez")

        assert user["uid"] == "uid-1"
        assert user["plan"] == "basic"
        assert user["fullName"] == "Ana Perez"
        assert validate_code(user["referralCode"])

        resp = await client.get("/me", headers=auth("uid-1"))
        assert resp.status == 200
        assert (await resp.json())["user"]["referralCode"] == user["referralCode"]

    @pytest.mark.asyncio
    async def test_bootstrap_name_from_token(self, client):
        resp = await client.post(
            "/users/bootstrap", json={}, headers=auth("uid-2", name="Token Name")
        )

        assert (await resp.json())["user"]["fullName"] == "Token Name"

    @pytest.mark.asyncio
    async def test_bootstrap_invalid_payload(self, client):
        resp = await client.post(
            "/users/bootstrap", json={"fullName": "A"}, headers=auth("uid-3")
        )

        assert resp.status == 400

    @pytest.mark.asyncio
    async def test_validate_referral(self, client):
        user = await bootstrap(client, "uid-1", "Ana Perez")

        resp = await client.get(
            "/referrals/validate", params={"code": user["referralCode"].lower()}
        )
        assert await resp.json() == {
            "valid": True,
            "referrerId": "uid-1",
            "referrerName": "Ana Perez",
        }

        resp = await client.get("/referrals/validate", params={"code": "garbage"})
        assert await resp.json() == {"valid": False}

    @pytest.mark.asyncio
    async def test_bootstrap_with_referrer(self, client):
        referrer = await bootstrap(client, "R", "Rosa Referrer")

        user = await bootstrap(client, "N", "Nico New", referrer_code=referrer["referralCode"])

        assert user["referredBy"] == "R"


class TestSales:
    """Tests for the sale intake webhook."""

    @pytest.mark.asyncio
    async def test_recorded_then_exists(self, client, chain):
        body = {
            "externalId": "order-1",
            "buyerEmail": "buyer@example.com",
            "amountPen": 100,
            "referralCode": chain,
        }

        resp = await post_sale(client, body)
        data = await resp.json()

        assert resp.status == 200
        assert data["status"] == "recorded"
        assert data["saleId"] == "order-1"
        assert [(c["level"], c["beneficiaryId"], c["amountUsd"]) for c in data["commissions"]] == [
            (1, "P", "50.00"),
            (2, "E", "20.00"),
        ]

        resp = await post_sale(client, body)
        data = await resp.json()

        assert data["status"] == "exists"
        assert len(data["commissions"]) == 2

    @pytest.mark.asyncio
    async def test_without_referral_code(self, client):
        resp = await post_sale(
            client, {"buyerEmail": "buyer@example.com", "amountPen": 100}
        )
        data = await resp.json()

        assert data["status"] == "no-referrer"
        assert data["saleId"]

    @pytest.mark.asyncio
    async def test_overlong_referral_code(self, client):
        resp = await post_sale(
            client,
            {
                "buyerEmail": "buyer@example.com",
                "amountPen": 100,
                "referralCode": "AF-" + "A" * 30,
            },
        )

        assert resp.status == 200
        assert (await resp.json())["status"] == "no-referrer"

    @pytest.mark.asyncio
    async def test_wrong_key(self, client):
        resp = await post_sale(
            client, {"buyerEmail": "buyer@example.com", "amountPen": 100}, key="wrong"
        )

        assert resp.status == 401

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"buyerEmail": "buyer@example.com", "amountPen": -1},
            {"buyerEmail": "buyer@example.com", "amountPen": 0},
            {"buyerEmail": "not-an-email", "amountPen": 100},
            {"amountPen": 100},
            {"externalId": "ab", "buyerEmail": "b@example.com", "amountPen": 1},
            {"buyerEmail": "buyer@example.com", "amountPen": 1000000000000000},
            {"buyerEmail": "buyer@example.com", "amountPen": 1, "referralCode": "AF-" + "A" * 70},
        ],
    )
    async def test_invalid_payload(self, client, body):
        resp = await post_sale(client, body)

        assert resp.status == 400

    @pytest.mark.asyncio
    async def test_key_not_configured(self, session_maker, commission_config, clock):
        app = create_app(
            session_maker,
            JWTIdentityVerifier(JWT_SECRET),
            config=commission_config,
            sales_api_key="",
            admin_emails=[],
            clock=clock,
        )

        async with TestClient(TestServer(app)) as client:
            resp = await post_sale(
                client, {"buyerEmail": "buyer@example.com", "amountPen": 100}
            )

        assert resp.status == 500


class TestDashboardEndpoints:
    """Tests for participant views."""

    @pytest.mark.asyncio
    async def test_dashboard_settles_after_hold(self, client, chain, clock):
        await post_sale(
            client,
            {
                "externalId": "order-2",
                "buyerEmail": "buyer@example.com",
                "amountPen": 100,
                "referralCode": chain,
            },
        )

        resp = await client.get("/dashboard", headers=auth("P"))
        stats = (await resp.json())["stats"]
        assert stats["totalEarnings"] == "50.00"
        assert stats["pendingBalance"] == "50.00"
        assert stats["availableBalance"] == "0.00"

        clock.advance(days=14)

        resp = await client.get("/dashboard", headers=auth("P"))
        data = await resp.json()
        assert data["stats"]["pendingBalance"] == "0.00"
        assert data["stats"]["availableBalance"] == "50.00"
        assert data["stats"]["payoutReady"] is False
        assert data["stats"]["plan"] == {"id": "pro", "name": "Pro"}
        assert [a["action"] for a in data["recentActivity"]] == ["bought the bundle"]

    @pytest.mark.asyncio
    async def test_network(self, client, chain):
        resp = await client.get("/network", headers=auth("E"))
        data = await resp.json()

        assert [lvl["unlocked"] for lvl in data["levels"]] == [True, True, True, True]
        assert data["levels"][0]["members"] == 1
        assert data["members"][0]["uid"] == "P"
        assert data["totalPotential"] == 85
        assert data["currentPotential"] == 85
        assert data["upline"] is None

        resp = await client.get("/network", headers=auth("P"))
        data = await resp.json()

        assert [lvl["unlocked"] for lvl in data["levels"]] == [True, True, False, False]
        assert data["currentPotential"] == 70
        assert data["upline"]["id"] == "E"

    @pytest.mark.asyncio
    async def test_tools(self, client):
        await bootstrap(client, "uid-1", "Ana Perez")

        resp = await client.get("/tools", headers=auth("uid-1"))
        tools = (await resp.json())["tools"]

        assert {t["id"] for t in tools} == {"contapp", "fastpage", "leadwidget"}
        assert all(t["status"] == "active" for t in tools)

    @pytest.mark.asyncio
    async def test_subscription_and_upgrade(self, client):
        await bootstrap(client, "uid-1", "Ana Perez")

        resp = await client.get("/subscription", headers=auth("uid-1"))
        data = await resp.json()
        assert data["currentPlan"] == "basic"
        assert [p["commission"] for p in data["plans"]] == [50, 70, 85]

        resp = await client.post(
            "/subscription/upgrade", json={"plan": "elite"}, headers=auth("uid-1")
        )
        assert await resp.json() == {"ok": True, "plan": "elite"}

        resp = await client.get("/subscription", headers=auth("uid-1"))
        assert (await resp.json())["currentPlan"] == "elite"

    @pytest.mark.asyncio
    async def test_upgrade_invalid_plan(self, client):
        await bootstrap(client, "uid-1", "Ana Perez")

        resp = await client.post(
            "/subscription/upgrade", json={"plan": "platinum"}, headers=auth("uid-1")
        )

        assert resp.status == 400

    @pytest.mark.asyncio
    async def test_dashboard_unknown_participant(self, client):
        resp = await client.get("/dashboard", headers=auth("ghost"))

        assert resp.status == 404


class TestAdmin:
    """Tests for admin endpoints."""

    @pytest.mark.asyncio
    async def test_non_admin_forbidden(self, client):
        resp = await client.get("/admin/users", headers=auth("uid-1"))

        assert resp.status == 403

    @pytest.mark.asyncio
    async def test_list_update_delete(self, client, chain):
        admin = auth("admin", email=ADMIN_EMAIL)

        resp = await client.get("/admin/users", params={"limit": "1"}, headers=admin)
        data = await resp.json()
        assert [u["uid"] for u in data["users"]] == ["P"]
        assert data["users"][0]["referredByName"] == "Eva Elite"

        resp = await client.get(
            "/admin/users", params={"cursor": data["nextCursor"]}, headers=admin
        )
        assert [u["uid"] for u in (await resp.json())["users"]] == ["E"]

        resp = await client.patch(
            "/admin/users/P", json={"disabled": True, "plan": "elite"}, headers=admin
        )
        user = (await resp.json())["user"]
        assert user["disabled"] is True
        assert user["plan"] == "elite"

        resp = await client.delete("/admin/users/P", headers=admin)
        assert await resp.json() == {"ok": True, "deleted": True}

        resp = await client.get("/me", headers=auth("P"))
        assert resp.status == 404

    @pytest.mark.asyncio
    async def test_update_unknown_user(self, client):
        resp = await client.patch(
            "/admin/users/ghost",
            json={"disabled": True},
            headers=auth("admin", email=ADMIN_EMAIL),
        )

        assert resp.status == 404

    @pytest.mark.asyncio
    async def test_invalid_limit(self, client):
        resp = await client.get(
            "/admin/users",
            params={"limit": "many"},
            headers=auth("admin", email=ADMIN_EMAIL),
        )

        assert resp.status == 400


class TestErrorMiddleware:
    """Tests for error responses built from arbitrary exception text."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error,status",
        [
            (RuntimeError("boom {'k': 1}"), 500),
            (TransientStoreError("sales.create", "lost {connection}"), 503),
        ],
    )
    async def test_braces_in_error_text(self, error, status):
        async def failing(request):
            raise error

        app = web.Application(middlewares=[error_middleware])
        app.router.add_get("/fail", failing)

        async with TestClient(TestServer(app)) as client:
            resp = await client.get("/fail")

            assert resp.status == status
