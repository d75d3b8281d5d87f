"""HTTP surface: routing, status codes and error bodies."""
from datetime import datetime

from sqlalchemy.exc import OperationalError

from conftest import answers_for
from levelup.services.user_goals import user_goal_service


def _onboard(client, seed, user_id=None):
    return client.post(
        "/onboarding/answers",
        json={"user_id": user_id or seed.alice, "answers": answers_for(seed.questions)},
    )


# ---------------------------------------------------------------------------
# Basics
# ---------------------------------------------------------------------------

class TestBasics:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_categories(self, client, seed):
        response = client.get("/categories")
        assert response.status_code == 200
        assert [c["name"] for c in response.json()] == ["Santé", "Travail", "Relations"]


# ---------------------------------------------------------------------------
# Onboarding
# ---------------------------------------------------------------------------

class TestOnboardingApi:
    def test_questions(self, client, seed):
        body = client.get("/onboarding/questions").json()
        assert body["language"] == "fr"
        assert body["count"] == 13
        assert set(body["items"][0]) == {"id", "code", "question", "sort_order"}

    def test_questions_in_english(self, client, seed):
        assert client.get("/onboarding/questions", params={"lang": "en"}).json()["count"] == 1

    def test_submit_then_locked(self, client, seed):
        response = _onboard(client, seed)
        assert response.status_code == 200
        body = response.json()
        assert body["onboarding_done"] is True
        assert [p["score"] for p in body["priorities"]] == [50.0, 50.0, 50.0]

        again = _onboard(client, seed)
        assert again.status_code == 409
        assert again.json()["code"] == "onboarding_already_completed"

        questions = client.get("/onboarding/questions", params={"user_id": seed.alice})
        assert questions.status_code == 409

        assert client.get(f"/users/{seed.alice}").json()["onboarding_done"] is True

    def test_too_few_answers(self, client, seed):
        response = client.post(
            "/onboarding/answers",
            json={"user_id": seed.alice, "answers": answers_for(seed.questions[:5])},
        )
        assert response.status_code == 422
        assert response.json()["code"] == "insufficient_answers"

    def test_oversized_question_id_is_ignored(self, client, seed):
        answers = answers_for(seed.questions[:11]) + [{"question_id": 10 ** 30, "value": 4}]
        response = client.post(
            "/onboarding/answers", json={"user_id": seed.alice, "answers": answers}
        )
        assert response.status_code == 422
        assert response.json()["code"] == "insufficient_answers"

    def test_user_from_token(self, client, seed, auth_headers):
        response = client.post(
            "/onboarding/answers",
            json={"answers": answers_for(seed.questions)},
            headers=auth_headers(seed.bob),
        )
        assert response.status_code == 200
        assert response.json()["user_id"] == seed.bob

    def test_user_required(self, client, seed):
        response = client.post("/onboarding/answers", json={"answers": answers_for(seed.questions)})
        assert response.status_code == 422
        assert response.json()["code"] == "validation"

    def test_unknown_user(self, client, seed):
        response = _onboard(client, seed, user_id=999)
        assert response.status_code == 404


# ---------------------------------------------------------------------------
# Users & priorities
# ---------------------------------------------------------------------------

class TestUsersApi:
    def test_profile(self, client, seed):
        body = client.get(f"/users/{seed.alice}").json()
        assert body["username"] == "alice"
        assert body["xp_progress"] == {
            "level": 1, "prev_total": 0, "next_total": 51,
            "current": 0, "span": 51, "percent": 0,
        }

    def test_missing_profile(self, client, seed):
        response = client.get("/users/999")
        assert response.status_code == 404
        assert response.json() == {"detail": "User not found", "code": "not_found"}

    def test_priorities(self, client, seed, ranked_priorities):
        body = client.get(f"/users/{seed.alice}/priorities").json()
        assert [p["category_id"] for p in body] == [seed.health, seed.work, seed.relations]

    def test_reorder_requires_token(self, client, seed):
        response = client.put(
            f"/users/{seed.alice}/priorities/order",
            json={"ordered_category_ids": [seed.work]},
        )
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_reorder_rejects_bad_token(self, client, seed):
        response = client.put(
            f"/users/{seed.alice}/priorities/order",
            json={"ordered_category_ids": [seed.work]},
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        assert response.status_code == 401

    def test_reorder_other_user(self, client, seed, auth_headers):
        response = client.put(
            f"/users/{seed.alice}/priorities/order",
            json={"ordered_category_ids": [seed.work]},
            headers=auth_headers(seed.bob),
        )
        assert response.status_code == 403

    def test_reorder(self, client, seed, auth_headers):
        response = client.put(
            f"/users/{seed.alice}/priorities/order",
            json={"ordered_category_ids": [seed.work, seed.relations, seed.health]},
            headers=auth_headers(seed.alice),
        )
        assert response.status_code == 200
        assert response.json() == {"ok": True, "count": 3}

        body = client.get(f"/users/{seed.alice}/priorities").json()
        assert [(p["category_id"], p["score"]) for p in body] == [
            (seed.work, 100.0), (seed.relations, 90.0), (seed.health, 80.0),
        ]

    def test_reorder_empty_list(self, client, seed, auth_headers):
        response = client.put(
            f"/users/{seed.alice}/priorities/order",
            json={"ordered_category_ids": []},
            headers=auth_headers(seed.alice),
        )
        assert response.status_code == 422


# ---------------------------------------------------------------------------
# User goals
# ---------------------------------------------------------------------------

class TestUserGoalsApi:
    def _add(self, client, user_id, template_id, cadence="daily"):
        return client.post(
            f"/users/{user_id}/user-goals",
            json={"template_id": template_id, "cadence": cadence},
        )

    def test_add_created_then_existing(self, client, seed):
        created = self._add(client, seed.alice, seed.walk)
        assert created.status_code == 201
        assert created.json()["created"] is True

        existing = self._add(client, seed.alice, seed.walk)
        assert existing.status_code == 200
        assert existing.json()["created"] is False
        assert existing.json()["id"] == created.json()["id"]

    def test_add_validation(self, client, seed):
        assert self._add(client, seed.alice, seed.walk, cadence="monthly").status_code == 422
        assert self._add(client, seed.alice, 999).status_code == 404
        assert client.post(
            f"/users/{seed.alice}/user-goals", json={"template_id": 0, "cadence": "daily"}
        ).status_code == 422

    def test_complete_flow(self, client, seed, clock):
        goal_id = self._add(client, seed.alice, seed.walk).json()["id"]
        url = f"/users/{seed.alice}/user-goals/{goal_id}/complete"

        first = client.patch(url)
        assert first.status_code == 200
        body = first.json()
        assert body["awarded"] == 40
        assert body["new_xp"] == 40
        assert body["next_eligible_at"].startswith("2024-03-15T00:00:00")

        second = client.patch(url)
        assert second.status_code == 409
        assert second.json()["code"] == "already_completed_this_period"
        assert client.get(f"/users/{seed.alice}").json()["xp"] == 40

        clock.now = datetime(2024, 3, 15, 7, 30)
        assert client.patch(url).status_code == 200
        assert client.get(f"/users/{seed.alice}").json()["xp"] == 80

    def test_list(self, client, seed):
        goal_id = self._add(client, seed.alice, seed.call, cadence="weekly").json()["id"]
        client.patch(f"/users/{seed.alice}/user-goals/{goal_id}/complete")

        (row,) = client.get(f"/users/{seed.alice}/user-goals").json()
        assert row["id"] == goal_id
        assert row["cadence"] == "weekly"
        assert row["can_complete"] is False
        assert row["period_start"].startswith("2024-03-11")

        assert client.get(
            f"/users/{seed.alice}/user-goals", params={"status": "archived"}
        ).json() == []
        (unfiltered,) = client.get(
            f"/users/{seed.alice}/user-goals", params={"status": "bogus"}
        ).json()
        assert unfiltered["id"] == goal_id

    def test_schedule(self, client, seed):
        goal_id = self._add(client, seed.alice, seed.walk).json()["id"]
        url = f"/users/{seed.alice}/user-goals/{goal_id}/schedule"

        response = client.patch(url, json={"cadence": "weekly"})
        assert response.status_code == 200
        assert response.json()["effective_frequency_type"] == "weekly"

        assert client.patch(url, json={"cadence": "hourly"}).status_code == 422
        assert client.patch(url, json={}).status_code == 422

    def test_archive_lifecycle(self, client, seed):
        goal_id = self._add(client, seed.alice, seed.walk).json()["id"]
        base = f"/users/{seed.alice}/user-goals/{goal_id}"

        assert client.delete(base).status_code == 409

        archived = client.patch(f"{base}/archive")
        assert archived.json() == {"id": goal_id, "status": "archived"}
        assert client.patch(f"{base}/complete").status_code == 404
        assert client.patch(f"{base}/schedule", json={"cadence": "daily"}).status_code == 409

        unarchived = client.patch(f"{base}/unarchive").json()
        assert unarchived["reactivated"] is True
        assert client.patch(f"{base}/unarchive").json()["already_active"] is True

        client.patch(f"{base}/archive")
        assert client.delete(base).json() == {"deleted": True}
        assert client.get(
            f"/users/{seed.alice}/user-goals", params={"status": "all"}
        ).json() == []

    def test_other_users_goal_is_not_found(self, client, seed):
        goal_id = self._add(client, seed.bob, seed.walk).json()["id"]
        response = client.patch(f"/users/{seed.alice}/user-goals/{goal_id}/complete")
        assert response.status_code == 404
        assert response.json()["code"] == "user_goal_not_found"

    def test_store_busy_is_retryable(self, client, seed, monkeypatch):
        def busy(**kwargs):
            raise OperationalError("UPDATE users", {}, Exception("database is locked"))

        monkeypatch.setattr(user_goal_service, "complete_goal", busy)
        response = client.patch(f"/users/{seed.alice}/user-goals/1/complete")
        assert response.status_code == 503
        assert response.headers["retry-after"] == "1"
        assert response.json()["code"] == "store_unavailable"
