"""NFL scoreboard collection from ESPN's public scoreboard API.

This module reads weekly NFL schedules and scores from ESPN's site API, the
source of truth for every game in the league.

Endpoint:
    GET https://site.api.espn.com/apis/site/v2/sports/football/nfl/scoreboard
        ?seasontype=2&week=5&dates=2025

- seasontype: 2 = regular season, 3 = postseason
- week: week number within the season type
- dates: the season year

Payload Shape (only the fields we read):
    {"events": [
        {"id": "401772510",
         "competitions": [{
             "date": "2025-10-05T17:00Z",
             "status": {"type": {"state": "post", "completed": true}},
             "competitors": [
                 {"homeAway": "home", "score": "27", "team": {"abbreviation": "KC"}},
                 {"homeAway": "away", "score": "20", "team": {"abbreviation": "DAL"}}
             ]}]}]}

For beginners:

HTTP Requests: Uses the httpx library with a bounded timeout. A timeout is
treated exactly like a non-2xx response: the provider is "unavailable" and the
caller decides whether that means "retry later" or an error.

Defensive Parsing: ESPN fields can be missing during schedule changes. Any
event without a competition, both team abbreviations or a kickoff date is
skipped instead of failing the whole sync.
"""

import logging
from datetime import datetime, timezone

import httpx
from httpx import ConnectError, HTTPError, TimeoutException

from ...config.settings import settings
from ...exceptions import ProviderUnavailableError
from .scoreboard import ProviderGame, ScoreboardProvider, compute_winner, map_status

logger = logging.getLogger(__name__)


def _parse_score(raw) -> int | None:
    if raw is None or raw == "":
        return None
    try:
        return int(float(raw))
    except (TypeError, ValueError):
        return None


def _parse_kickoff(raw: str | None) -> datetime | None:
    if not raw:
        return None
    try:
        kickoff = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return None
    if kickoff.tzinfo is None:
        kickoff = kickoff.replace(tzinfo=timezone.utc)
    return kickoff.astimezone(timezone.utc)


def parse_espn_scoreboard(payload: dict) -> list[ProviderGame]:
    """Normalize an ESPN scoreboard payload into ProviderGame records.

    Only the first competition of each event is used. Events that cannot be
    resolved to a home team, an away team and a kickoff time are skipped.

    Args:
        payload: Decoded JSON body of the scoreboard endpoint

    Returns:
        One ProviderGame per usable event, in payload order
    """
    games: list[ProviderGame] = []

    for event in payload.get("events") or []:
        competitions = event.get("competitions") or []
        if not competitions:
            continue
        comp = competitions[0]

        competitors = comp.get("competitors") or []
        home = next((c for c in competitors if c.get("homeAway") == "home"), None)
        away = next((c for c in competitors if c.get("homeAway") == "away"), None)
        home_abbr = ((home or {}).get("team") or {}).get("abbreviation")
        away_abbr = ((away or {}).get("team") or {}).get("abbreviation")
        if not home_abbr or not away_abbr:
            logger.debug(f"Skipping event {event.get('id')}: missing team abbreviation")
            continue

        kickoff = _parse_kickoff(comp.get("date") or event.get("date"))
        if kickoff is None:
            logger.warning(f"Skipping event {event.get('id')}: no usable kickoff date")
            continue

        status_type = (comp.get("status") or {}).get("type") or {}
        completed = bool(status_type.get("completed"))

        home_score = _parse_score(home.get("score"))
        away_score = _parse_score(away.get("score"))

        games.append(
            ProviderGame(
                game_id=str(event.get("id")),
                home_abbr=home_abbr,
                away_abbr=away_abbr,
                kickoff_time=kickoff,
                status=map_status(status_type.get("state")),
                home_score=home_score,
                away_score=away_score,
                winner_abbr=compute_winner(home_abbr, away_abbr, home_score, away_score, completed),
            )
        )

    return games


class EspnScoreboardCollector(ScoreboardProvider):
    """Fetches weekly NFL scoreboards from ESPN.

    Key Features:
    - Single bounded-timeout request per call (the scheduler is the retry loop)
    - Every failure mode collapses into ProviderUnavailableError
    - Injectable httpx.Client so tests can use httpx.MockTransport

    Usage:
        collector = EspnScoreboardCollector()
        games = collector.fetch_games(2025, 5, season_type=2)
    """

    name = "espn"

    def __init__(
        self,
        client: httpx.Client | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ):
        self.base_url = base_url or settings.scoreboard_url
        self.timeout = timeout if timeout is not None else settings.provider_timeout
        self.client = client or httpx.Client(
            timeout=self.timeout,
            headers={"User-Agent": "Pickem-League/1.0", "Accept": "application/json"},
        )

    def fetch_scoreboard(self, season_year: int, week_number: int, season_type: int) -> dict:
        params = {"seasontype": season_type, "week": week_number, "dates": season_year}
        logger.debug(f"Requesting ESPN scoreboard {params}")

        try:
            response = self.client.get(self.base_url, params=params)
        except TimeoutException as e:
            logger.warning(f"ESPN scoreboard request timed out after {self.timeout}s")
            raise ProviderUnavailableError(f"ESPN request timed out: {e}") from e
        except (ConnectError, HTTPError) as e:
            logger.warning(f"ESPN scoreboard network error: {e}")
            raise ProviderUnavailableError(f"ESPN network error: {e}") from e

        if not response.is_success:
            logger.warning(f"ESPN returned status {response.status_code} for {params}")
            raise ProviderUnavailableError(
                f"ESPN fetch failed: {response.status_code} {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ProviderUnavailableError("ESPN returned a non-JSON body") from e

        return payload if isinstance(payload, dict) else {}

    def parse(self, payload: dict) -> list[ProviderGame]:
        return parse_espn_scoreboard(payload)

    def close(self):
        self.client.close()
