"""Profiles, priorities and the category catalog."""
from types import SimpleNamespace

import pytest

from levelup.core.exceptions import NotFoundError, PermissionError, ValidationError
from levelup.models import User
from levelup.services.users import sanitize_category_ids, score_for_rank, user_service


class TestScoreForRank:
    def test_table(self):
        assert [score_for_rank(rank) for rank in (1, 2, 6, 7, 8, 14, 15)] == [
            100.0, 90.0, 50.0, 40.0, 35.0, 5.0, 0.0,
        ]

    def test_past_the_table(self):
        assert score_for_rank(16) == 0.0
        assert score_for_rank(40) == 0.0


class TestSanitizeCategoryIds:
    def test_first_occurrence_wins(self):
        assert sanitize_category_ids([3, "3", 1, 3, 2]) == [3, 1, 2]

    def test_drops_invalid_ids(self):
        assert sanitize_category_ids([0, -1, "x", None, 2.5, 4.0, True]) == [4]

    def test_drops_ids_too_large_for_the_store(self):
        assert sanitize_category_ids([2 ** 63, 10 ** 30, 2 ** 63 - 1]) == [2 ** 63 - 1]


class TestProfile:
    def test_fresh_user(self, db, seed):
        profile = user_service.get_profile(db, seed.alice)
        assert profile["email"] == "alice@example.com"
        assert profile["xp"] == 0
        assert profile["level"] == 1
        assert profile["onboarding_done"] is False
        assert profile["xp_progress"]["span"] == 51

    def test_progress_follows_xp(self, db, seed):
        user = db.get(User, seed.alice)
        user.xp, user.level = 200, 3
        db.commit()

        profile = user_service.get_profile(db, seed.alice)
        assert profile["xp_progress"]["level"] == 3
        assert profile["xp_progress"]["current"] == 46

    def test_missing_user(self, db, seed):
        with pytest.raises(NotFoundError):
            user_service.get_profile(db, 999)


class TestPriorities:
    def test_ordered_by_score(self, db, seed, ranked_priorities):
        priorities = user_service.get_priorities(db, seed.alice)
        assert [(p["category_name"], p["score"]) for p in priorities] == [
            ("Santé", 90.0), ("Travail", 70.0), ("Relations", 10.0),
        ]

    def test_none_yet(self, db, seed):
        assert user_service.get_priorities(db, seed.alice) == []

    def test_categories(self, db, seed):
        assert [c.name for c in user_service.list_categories(db)] == [
            "Santé", "Travail", "Relations",
        ]


class TestReorderPriorities:
    def test_scores_by_rank(self, db, seed, ranked_priorities):
        alice = SimpleNamespace(id=seed.alice)
        result = user_service.reorder_priorities(
            db, seed.alice, [seed.relations, str(seed.health), seed.relations, 999, -3], alice
        )
        assert result == {"ok": True, "count": 2}

        priorities = user_service.get_priorities(db, seed.alice)
        assert [(p["category_id"], p["score"]) for p in priorities] == [
            (seed.relations, 100.0),
            (seed.health, 90.0),
            (seed.work, 70.0),
        ]

    def test_creates_missing_rows(self, db, seed):
        alice = SimpleNamespace(id=seed.alice)
        user_service.reorder_priorities(
            db, seed.alice, [seed.work, seed.health, seed.relations], alice
        )
        assert [p["score"] for p in user_service.get_priorities(db, seed.alice)] == [
            100.0, 90.0, 80.0,
        ]

    def test_only_own_priorities(self, db, seed):
        with pytest.raises(PermissionError):
            user_service.reorder_priorities(
                db, seed.alice, [seed.health], SimpleNamespace(id=seed.bob)
            )

    def test_nothing_usable(self, db, seed):
        with pytest.raises(ValidationError):
            user_service.reorder_priorities(
                db, seed.alice, ["a", 0, 999], SimpleNamespace(id=seed.alice)
            )
