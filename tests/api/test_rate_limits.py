"""
Tests for the per-IP request limits on login, the admin panel
and the public site.
"""

from donation_tracker.api.rate_limit import TOO_MANY_LOGINS, TOO_MANY_REQUESTS


def login(client, **kwargs):
    return client.post(
        "/api/admin/login",
        json={"email": "nobody@example.com", "password": "whatever1"},
        **kwargs,
    )


class TestLoginLimit:

    def test_sixth_attempt_is_rejected(self, client, rate_limits):
        for _ in range(5):
            assert login(client).status_code == 401

        response = login(client)

        assert response.status_code == 429
        assert response.json() == {"error": TOO_MANY_LOGINS}

    def test_limit_follows_forwarded_ip(self, client, rate_limits):
        for _ in range(5):
            login(client, headers={"X-Forwarded-For": "203.0.113.7"})
        assert login(client, headers={"X-Forwarded-For": "203.0.113.7"}).status_code == 429

        response = login(client, headers={"X-Forwarded-For": "198.51.100.20, 10.0.0.1"})
        assert response.status_code == 401

    def test_disabled_limiter_never_rejects(self, client):
        for _ in range(8):
            assert login(client).status_code == 401


class TestAdminLimit:

    def test_budget_is_shared_across_admin_routes(self, client, admin_headers, rate_limits):
        for _ in range(25):
            assert client.get("/api/admin/verify", headers=admin_headers).status_code == 200
        for _ in range(25):
            assert client.get("/api/admin/campaigns", headers=admin_headers).status_code == 200

        response = client.get("/api/admin/donations", headers=admin_headers)

        assert response.status_code == 429
        assert response.json() == {"error": TOO_MANY_REQUESTS}

    def test_public_budget_is_separate(self, client, admin_headers, rate_limits):
        for _ in range(50):
            client.get("/api/admin/verify", headers=admin_headers)
        assert client.get("/api/admin/verify", headers=admin_headers).status_code == 429

        assert client.get("/api/campaigns").status_code == 200


class TestPublicLimit:

    def test_public_donations_share_the_public_budget(self, client, make_campaign, rate_limits):
        campaign = make_campaign()
        for _ in range(99):
            assert client.get("/api/campaigns").status_code == 200

        first = client.post("/api/donations", json={"campaign_id": campaign.id, "amount": 150})
        second = client.post("/api/donations", json={"campaign_id": campaign.id, "amount": 150})

        assert first.status_code == 201
        assert second.status_code == 429
