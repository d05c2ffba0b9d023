"""Custom exceptions for the pick'em league service.

This file defines domain-specific exceptions for the week lifecycle.
Custom exceptions provide better error handling and debugging by:

1. Clear Error Communication: Specific exception types immediately indicate what went wrong
2. Targeted Error Handling: The API maps each category onto one HTTP status code
3. Better Debugging: Stack traces clearly show the type of failure

For beginners: Exceptions are Python's way of handling errors gracefully.
Instead of crashing, programs can "catch" exceptions and respond appropriately.

Error Categories:
- ValidationError: Bad input, rejected before any database access (HTTP 400)
- AuthorizationError: Caller may not perform the action (HTTP 401/403)
- NotFoundError: A referenced league or week does not exist (HTTP 404)
- ConflictError: The request is valid but the current state forbids it (HTTP 409)
- NotReadyError: A precondition for progress is not met yet (HTTP 409)
- ProviderUnavailableError: The scoreboard provider failed or timed out (HTTP 502)

Not-ready conditions inside week advancement are NOT raised to callers: the
advance pipeline turns them into a successful "not advanced" outcome so the
scheduler simply retries on its next tick.

Usage Examples:
- raise PicksLockedError("Picks for week 5 locked at 2025-10-05 17:00 UTC")
- raise TeamAlreadyUsedError("KC was already picked in week 2")
"""


class PickemError(Exception):
    """Base exception for pick'em service errors."""


class ValidationError(PickemError, ValueError):
    """Raised when request input is invalid.

    Common Scenarios:
    - Week number outside 1-18
    - Unknown team abbreviation
    - Missing slot 1 pick, or slot 2 missing in a two-pick week
    - The same team submitted in both slots
    """


class AuthorizationError(PickemError):
    """Raised when a scheduler trigger lacks the shared secret or trusted header.

    Checked before any side effect, so an unauthorized call never touches the
    database or the provider.
    """


class NotLeagueMemberError(AuthorizationError):
    """Raised when a user acts on a league they have not joined."""


class NotFoundError(PickemError, LookupError):
    """Raised when a referenced entity does not exist."""


class LeagueNotFoundError(NotFoundError):
    """Raised when no league matches the given id or invite code."""


class WeekNotConfiguredError(NotFoundError):
    """Raised when a week has no WeekConfig row yet.

    Week sync creates the row from the synced schedule. Until it has run,
    picks for the week cannot be evaluated against a lock time.
    """


class ConflictError(PickemError):
    """Raised when the current league state forbids an otherwise valid request."""


class PicksLockedError(ConflictError):
    """Raised when picks are submitted at or after the week's lock time.

    Picks become read-only at kickoff of the week's first game. The check runs
    before any write, so a late submission never mutates the database.
    """


class ByeNotAllowedError(ConflictError):
    """Raised when a bye is requested for a week after the last bye week (16)."""


class ByeAlreadyUsedError(ConflictError):
    """Raised when the user already spent their one bye in another week this season."""


class TeamAlreadyUsedError(ConflictError):
    """Raised when a team was already picked by the user in another week of the season.

    Each team can be used once per season. The check runs on the server so a
    stale or racing client cannot reuse a team.
    """


class NotReadyError(PickemError):
    """Raised when a precondition for lifecycle progress is not met yet."""


class WeekNotReadyError(NotReadyError):
    """Raised by week sync when the target week has no synced games.

    Refusing to configure the week prevents it from ever locking against a
    nonexistent or incomplete schedule. Callers may pass allow_fallback_lock
    to configure it anyway with a lock time 24 hours from now.
    """


class ProviderUnavailableError(PickemError):
    """Raised when the scoreboard provider cannot be read.

    Covers non-2xx responses, transport errors and timeouts. The advance
    pipeline reports it as "retry later"; a standalone game sync surfaces it
    as an upstream error.

    Attributes:
        status_code: Provider HTTP status, or None for timeouts and connection errors
        detail: Short human-readable description of the failure
    """

    def __init__(self, detail: str, status_code: int | None = None):
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code
