"""API tests through the FastAPI TestClient.

Covers the HTTP contract: status codes for domain errors, scheduler
authentication on lifecycle endpoints, and the advance-week response shape.
"""

from datetime import timedelta

from conftest import CRON_SECRET, add_final_game, configure_week, espn_event, set_week

from pickem.database.models import League, WeekConfig
from pickem.exceptions import ProviderUnavailableError


def alice():
    return {"X-User-Id": "alice"}


class TestSystem:
    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["message"] == "Pick'em League API"

    def test_health_reports_a_league(self, client, league):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"ok": True, "league": {"id": league.id, "name": "Test League"}}

    def test_config_hides_secrets(self, client):
        body = client.get("/api/config").json()

        assert body["final_week"] == 18
        assert "cron_secret" not in body
        assert "database_url" not in body


class TestLeagueRoutes:
    def test_create_and_join(self, client):
        created = client.post(
            "/api/leagues",
            json={"name": "Office Pool", "season_year": 2025, "display_name": "Alice"},
            headers=alice(),
        )
        assert created.status_code == 201
        league = created.json()
        assert league["current_week"] == 1

        joined = client.post(
            "/api/leagues/join",
            json={"invite_code": league["invite_code"], "display_name": "Bob"},
            headers={"X-User-Id": "bob"},
        )
        assert joined.status_code == 200
        assert joined.json()["league_id"] == league["id"]

        standings = client.get(f"/api/leagues/{league['id']}/standings").json()
        assert [row["user_id"] for row in standings] == ["alice", "bob"]

    def test_anonymous_create_rejected(self, client):
        response = client.post("/api/leagues", json={"name": "X", "season_year": 2025})

        assert response.status_code == 401

    def test_unknown_league_is_404(self, client):
        assert client.get("/api/leagues/missing").status_code == 404

    def test_week_view_requires_membership(self, client, league):
        response = client.get(
            f"/api/leagues/{league.id}/weeks/1", headers={"X-User-Id": "mallory"}
        )

        assert response.status_code == 403


class TestPickRoutes:
    def test_submit_and_read_state(self, client, db, league, future_lock):
        configure_week(db, league, 1, future_lock)

        response = client.post(
            f"/api/picks/{league.id}", json={"teams": ["KC", "SF"]}, headers=alice()
        )

        assert response.status_code == 200
        body = response.json()
        assert body["picks"] == {"1": "KC", "2": "SF"}
        assert body["used_teams"] == ["KC", "SF"]
        assert "KC" not in body["options"]["2"]

        state = client.get(f"/api/picks/{league.id}", headers=alice()).json()
        assert state["picks"] == {"1": "KC", "2": "SF"}
        assert state["can_declare_bye"] is True

    def test_locked_week_is_409(self, client, db, league, future_lock):
        configure_week(db, league, 1, future_lock - timedelta(days=3))

        response = client.post(
            f"/api/picks/{league.id}", json={"teams": ["KC", "SF"]}, headers=alice()
        )

        assert response.status_code == 409

    def test_duplicate_teams_is_400(self, client, db, league, future_lock):
        configure_week(db, league, 1, future_lock)

        response = client.post(
            f"/api/picks/{league.id}", json={"teams": ["KC", "KC"]}, headers=alice()
        )

        assert response.status_code == 400

    def test_bye(self, client, db, league, future_lock):
        configure_week(db, league, 1, future_lock)

        response = client.post(f"/api/picks/{league.id}/bye", json={}, headers=alice())

        assert response.status_code == 200
        assert response.json()["bye_this_week"] is True

    def test_unconfigured_week_is_404(self, client, league):
        response = client.post(
            f"/api/picks/{league.id}", json={"teams": ["KC", "SF"]}, headers=alice()
        )

        assert response.status_code == 404


class TestLifecycleAuth:
    def test_rejects_missing_credentials(self, client, league, provider):
        response = client.post("/api/lifecycle/advance-week", json={"league_id": league.id})

        assert response.status_code == 401
        assert provider.calls == []

    def test_rejects_wrong_secret(self, client, league):
        response = client.post(
            "/api/lifecycle/grade-week",
            json={"league_id": league.id},
            headers={"x-cron-secret": "wrong"},
        )

        assert response.status_code == 401

    def test_accepts_platform_cron_header(self, client, league):
        response = client.post(
            "/api/lifecycle/grade-week",
            json={"league_id": league.id},
            headers={"x-vercel-cron": "1"},
        )

        assert response.status_code == 200

    def test_accepts_shared_secret(self, client, league):
        response = client.post(
            "/api/lifecycle/grade-week",
            json={"league_id": league.id},
            headers={"x-cron-secret": CRON_SECRET},
        )

        assert response.status_code == 200
        assert response.json()["ok"] is True


class TestLifecycleRoutes:
    def test_sync_games_then_week(self, client, db, league, provider, cron_headers, future_lock):
        provider.weeks[1] = [espn_event(1, "KC", "LAC", future_lock)]

        games = client.post(
            "/api/lifecycle/sync-games", json={"league_id": league.id}, headers=cron_headers
        )
        assert games.status_code == 200
        assert games.json()["upserted"] == 1

        week = client.post(
            "/api/lifecycle/sync-week", json={"league_id": league.id}, headers=cron_headers
        )
        assert week.status_code == 200
        assert week.json()["picks_required"] == 2
        assert db.query(WeekConfig).count() == 1

    def test_sync_games_provider_failure_is_502(self, client, league, provider, cron_headers):
        provider.error = ProviderUnavailableError("ESPN fetch failed: 500", 500)

        response = client.post(
            "/api/lifecycle/sync-games", json={"league_id": league.id}, headers=cron_headers
        )

        assert response.status_code == 502

    def test_sync_week_without_games_is_409(self, client, league, cron_headers):
        response = client.post(
            "/api/lifecycle/sync-week", json={"league_id": league.id}, headers=cron_headers
        )

        assert response.status_code == 409

    def test_sync_week_missing_league_id_is_400(self, client, cron_headers):
        response = client.post(
            "/api/lifecycle/sync-week", json={"league_id": ""}, headers=cron_headers
        )

        assert response.status_code == 400

    def test_week_zero_rejected_by_sync_week_and_grade_week(
        self, client, db, league, cron_headers
    ):
        add_final_game(db, league, 1, "101", winner="KC", loser="DAL")

        for path in ("sync-week", "grade-week"):
            response = client.post(
                f"/api/lifecycle/{path}",
                json={"league_id": league.id, "week_number": 0},
                headers=cron_headers,
            )
            assert response.status_code == 422

        assert db.query(WeekConfig).count() == 0

    def test_advance_without_next_week_is_ok_not_advanced(
        self, client, db, league, cron_headers
    ):
        set_week(db, league, 16)
        add_final_game(db, league, 16, "1601", winner="KC", loser="LV")

        response = client.post(
            "/api/lifecycle/advance-week", json={"league_id": league.id}, headers=cron_headers
        )

        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is True
        assert body["advanced"] is False
        assert body["outcome"] == "not_ready"
        assert body["reason"] == "provider_no_games"
        assert body["current_week"] == 16

    def test_advance_provider_outage_is_ok_not_advanced(
        self, client, db, league, provider, cron_headers
    ):
        add_final_game(db, league, 1, "101", winner="KC", loser="LV")
        provider.error = ProviderUnavailableError("ESPN fetch failed: 503", 503)

        body = client.post(
            "/api/lifecycle/advance-week", json={"league_id": league.id}, headers=cron_headers
        ).json()

        assert body["advanced"] is False
        assert body["outcome"] == "upstream_unavailable"
        assert body["provider_status"] == 503

    def test_advance_moves_league(
        self, client, db, league, provider, cron_headers, future_lock
    ):
        add_final_game(db, league, 1, "101", winner="KC", loser="LV")
        provider.weeks[2] = [espn_event(201, "SF", "SEA", future_lock)]

        body = client.post(
            "/api/lifecycle/advance-week", json={"league_id": league.id}, headers=cron_headers
        ).json()

        assert body["advanced"] is True
        assert body["outcome"] == "advanced"
        assert (body["from_week"], body["to_week"]) == (1, 2)
        db.expire_all()
        assert db.query(League).filter(League.id == league.id).one().current_week == 2
