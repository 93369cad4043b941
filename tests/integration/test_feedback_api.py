"""Feedback submission and admin triage."""

from __future__ import annotations

from httpx import AsyncClient


async def _submit(client: AsyncClient, **body) -> int:
    response = await client.post("/api/feedback", json=body)
    assert response.status_code == 201, response.text
    return response.json()["id"]


class TestSubmission:
    async def test_public_submission(self, client: AsyncClient, admin_headers):
        await _submit(
            client,
            message="The rotation page is great",
            name="Aria",
            email="aria@kingdom.org",
            subject="Kind words",
            donation_amount=5.5,
        )
        items = (await client.get("/api/feedback", headers=admin_headers)).json()["feedback"]
        assert len(items) == 1
        assert items[0]["status"] == "new"
        assert items[0]["feedback_type"] == "general"
        assert items[0]["donation_amount"] == 5.5

    async def test_invalid_type_rejected(self, client: AsyncClient):
        response = await client.post("/api/feedback", json={"message": "hi", "feedback_type": "rant"})
        assert response.status_code == 422
        assert response.json()["detail"] == "Validation error"

    async def test_message_required(self, client: AsyncClient):
        assert (await client.post("/api/feedback", json={"feedback_type": "bug"})).status_code == 422

    async def test_negative_donation_rejected(self, client: AsyncClient):
        response = await client.post("/api/feedback", json={"message": "hi", "donation_amount": -1})
        assert response.status_code == 422


class TestAdministration:
    async def test_listing_requires_admin(self, client: AsyncClient, user_headers):
        assert (await client.get("/api/feedback", headers=user_headers)).status_code == 403
        assert (await client.get("/api/feedback/stats", headers=user_headers)).status_code == 403

    async def test_stats(self, client: AsyncClient, admin_headers):
        await _submit(client, message="Crash on save", feedback_type="bug")
        await _submit(client, message="Add dark mode", feedback_type="feature", donation_amount=10)
        fid = await _submit(client, message="Thanks", donation_amount=2.5)
        await client.put(f"/api/feedback/{fid}/status", json={"status": "resolved"}, headers=admin_headers)

        stats = (await client.get("/api/feedback/stats", headers=admin_headers)).json()
        assert stats["total"] == 3
        assert stats["total_donations"] == 12.5
        assert stats["by_status"] == {"new": 2, "in_progress": 0, "resolved": 1, "closed": 0}
        assert stats["by_type"] == {"general": 1, "bug": 1, "feature": 1, "improvement": 0}

    async def test_empty_stats(self, client: AsyncClient, admin_headers):
        stats = (await client.get("/api/feedback/stats", headers=admin_headers)).json()
        assert stats["total"] == 0
        assert stats["total_donations"] == 0

    async def test_status_update_and_delete(self, client: AsyncClient, admin_headers):
        fid = await _submit(client, message="Slow dashboard", feedback_type="improvement")

        response = await client.put(
            f"/api/feedback/{fid}/status",
            json={"status": "in_progress", "admin_notes": "Looking into it"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        item = (await client.get("/api/feedback", headers=admin_headers)).json()["feedback"][0]
        assert item["status"] == "in_progress"
        assert item["admin_notes"] == "Looking into it"
        assert item["updated_at"] is not None

        assert (await client.delete(f"/api/feedback/{fid}", headers=admin_headers)).status_code == 200
        assert (await client.delete(f"/api/feedback/{fid}", headers=admin_headers)).status_code == 404

    async def test_unknown_status_rejected(self, client: AsyncClient, admin_headers):
        fid = await _submit(client, message="Hello")
        response = await client.put(f"/api/feedback/{fid}/status", json={"status": "ignored"}, headers=admin_headers)
        assert response.status_code == 422

    async def test_update_missing_feedback(self, client: AsyncClient, admin_headers):
        response = await client.put("/api/feedback/404/status", json={"status": "closed"}, headers=admin_headers)
        assert response.status_code == 404
