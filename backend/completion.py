"""
Completion report for a finished workout session.

The report is sent once, after the last set of the last exercise, to the
REST API's workout history endpoint. Delivery is best effort: failures are
logged and swallowed so the user always reaches the summary screen.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from backend.plan import WorkoutPlan
from backend.workout_session import Phase, SessionState
from core import DEFAULT_API_TIMEOUT

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompletionReport:
    """Aggregate totals for one finished session."""

    workout_name: str
    total_duration_minutes: int
    total_calories: float
    completed_units: int
    total_planned_units: int
    started_at: float
    ended_at: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_duration_minutes": self.total_duration_minutes,
            "total_calories": self.total_calories,
            "completed_units": self.completed_units,
            "total_planned_units": self.total_planned_units,
        }

    def to_history_payload(self) -> dict[str, Any]:
        """Body expected by ``POST /workout-history``."""
        return {
            "nome_treino": self.workout_name or None,
            "duracao": self.total_duration_minutes,
            "series_realizadas": self.completed_units,
            "calorias_queimadas": round(self.total_calories),
        }


def build_report(
    plan: WorkoutPlan,
    state: SessionState,
    started_at: float,
    ended_at: float,
) -> CompletionReport:
    """Summarise a finished session.

    Raises:
        ValueError: If ``state`` has not reached :attr:`Phase.FINISHED`.
    """
    if state.phase is not Phase.FINISHED:
        raise ValueError(f"Session is not finished ({state.phase.value})")
    return CompletionReport(
        workout_name=plan.name,
        total_duration_minutes=max(0, round((ended_at - started_at) / 60)),
        total_calories=plan.estimated_calories,
        completed_units=state.completed_units,
        total_planned_units=plan.total_units,
        started_at=started_at,
        ended_at=ended_at,
    )


class CompletionReporter:
    """
    HTTP client that posts completion reports to the workout API.

    A single request is made per report. Nothing is retried and no
    exception escapes :meth:`report`.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_API_TIMEOUT,
        auth_token: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize the reporter.

        Args:
            base_url: Base URL of the REST API (e.g., "http://localhost:3000/api")
            timeout: Request timeout in seconds
            auth_token: Bearer token of the signed-in user, if any
            transport: Optional httpx transport, used by tests
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._auth_token = auth_token
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._auth_token:
            headers["Authorization"] = f"Bearer {self._auth_token}"
        return headers

    def report(self, report: CompletionReport) -> bool:
        """
        Send ``report`` to the workout history endpoint.

        Returns:
            ``True`` if the API accepted the report, ``False`` otherwise.
        """
        url = f"{self._base_url}/workout-history"
        try:
            with httpx.Client(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = client.post(
                    url,
                    json=report.to_history_payload(),
                    headers=self._headers(),
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Workout history rejected report: %s %s",
                e.response.status_code,
                e.response.text[:200],
            )
            return False
        except (httpx.HTTPError, httpx.InvalidURL):
            logger.exception("Failed to send workout report to %s", url)
            return False

        logger.info(
            "Reported workout: %d/%d sets, %d min",
            report.completed_units,
            report.total_planned_units,
            report.total_duration_minutes,
        )
        return True
