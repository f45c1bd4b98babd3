"""Google Fitness data plugin.

Reads step counts, activity minutes and heart rate samples through the
Fitness REST API ``dataset:aggregate`` endpoint with a bearer token.

Time ranges are ISO-8601 strings. A time without an offset is taken as UTC.

Example:
    >>> plugin = GoogleFitnessPlugin(token="ya29...")
    >>> plugin.get_step_count("2025-01-01T00:00:00Z", "2025-01-02T00:00:00Z")
    8432
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import requests
from langchain_core.tools import tool
from pydantic import BaseModel, Field

from toolgate.ai.tools.exceptions import ToolExecutionError

if TYPE_CHECKING:
    from langchain_core.tools import BaseTool

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://www.googleapis.com/fitness/v1/users/me"

STEP_COUNT = "com.google.step_count.delta"
ACTIVITY_SEGMENT = "com.google.activity.segment"
HEART_RATE = "com.google.heart_rate.bpm"

NANOS_PER_MINUTE = 60 * 1_000_000_000


class TimeRangeInput(BaseModel):
    start_time: str = Field(description="Start time in ISO 8601 format")
    end_time: str = Field(description="End time in ISO 8601 format")


class HeartRateSample(BaseModel):
    """Heart rate at the start of one bucket."""

    timestamp: datetime
    bpm: int


def parse_time(value: str) -> datetime:
    """Parse an ISO-8601 string into an aware datetime (naive means UTC).

    Raises:
        ToolExecutionError: If the string is not ISO-8601
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise ToolExecutionError(f"Invalid ISO 8601 time: {value!r}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def _points(response: dict[str, Any]) -> Iterator[dict[str, Any]]:
    for bucket in response.get("bucket") or []:
        for dataset in bucket.get("dataset") or []:
            yield from dataset.get("point") or []


class GoogleFitnessPlugin:
    """Fetches fitness data for the authenticated user."""

    name = "GoogleFitness"

    def __init__(
        self,
        token: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        heart_rate_bucket_seconds: int = 60,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.heart_rate_bucket_seconds = heart_rate_bucket_seconds
        self.session = session or requests.Session()
        self.session.headers["Authorization"] = f"Bearer {token}"

    def _time_range(self, start_time: str, end_time: str) -> tuple[int, int]:
        start = to_millis(parse_time(start_time))
        end = to_millis(parse_time(end_time))
        if end <= start:
            raise ToolExecutionError(
                f"End time {end_time!r} must be after start time {start_time!r}"
            )
        return start, end

    def aggregate(
        self,
        data_type: str,
        start_millis: int,
        end_millis: int,
        bucket_millis: int,
    ) -> dict[str, Any]:
        """POST one ``dataset:aggregate`` request and return the JSON body.

        Raises:
            ToolExecutionError: On connection errors or non-success responses
        """
        body = {
            "aggregateBy": [{"dataTypeName": data_type}],
            "bucketByTime": {"durationMillis": bucket_millis},
            "startTimeMillis": start_millis,
            "endTimeMillis": end_millis,
        }
        url = f"{self.base_url}/dataset:aggregate"
        logger.debug(f"Fitness aggregate {data_type}: {start_millis}-{end_millis}")

        try:
            response = self.session.post(url, json=body, timeout=self.timeout)
        except requests.RequestException as e:
            raise ToolExecutionError(f"Fitness API request failed: {e}") from e

        if not response.ok:
            raise ToolExecutionError(
                f"Fitness API request failed: {response.status_code} {response.reason}"
            )
        try:
            data: dict[str, Any] = response.json()
        except ValueError as e:
            raise ToolExecutionError(f"Fitness API returned invalid JSON: {e}") from e
        return data

    def get_step_count(self, start_time: str, end_time: str) -> int:
        """Sum of step deltas in the range."""
        start, end = self._time_range(start_time, end_time)
        response = self.aggregate(STEP_COUNT, start, end, end - start)

        total = 0
        for point in _points(response):
            for value in point.get("value") or []:
                if value.get("intVal") is not None:
                    total += int(value["intVal"])
        return total

    def get_activity_minutes(self, start_time: str, end_time: str) -> dict[str, float]:
        """Minutes per activity type in the range.

        Keys are the Fitness activity type codes as strings. Each point counts
        for ``(endTimeNanos - startTimeNanos)`` converted to minutes; points
        without both bounds are skipped.
        """
        start, end = self._time_range(start_time, end_time)
        response = self.aggregate(ACTIVITY_SEGMENT, start, end, end - start)

        minutes: dict[str, float] = {}
        for point in _points(response):
            if point.get("startTimeNanos") is None or point.get("endTimeNanos") is None:
                continue
            duration = (int(point["endTimeNanos"]) - int(point["startTimeNanos"])) / NANOS_PER_MINUTE
            for value in point.get("value") or []:
                if value.get("intVal") is None:
                    continue
                activity = str(value["intVal"])
                minutes[activity] = minutes.get(activity, 0.0) + duration
        return minutes

    def get_heart_rate(self, start_time: str, end_time: str) -> list[HeartRateSample]:
        """One sample per bucket that has data, using the bucket's average."""
        start, end = self._time_range(start_time, end_time)
        response = self.aggregate(HEART_RATE, start, end, self.heart_rate_bucket_seconds * 1000)

        samples = []
        for point in _points(response):
            if point.get("startTimeNanos") is None:
                continue
            # Aggregated heart rate values are [average, max, min]
            values = [v["fpVal"] for v in point.get("value") or [] if v.get("fpVal") is not None]
            if not values:
                continue
            timestamp = datetime.fromtimestamp(
                int(point["startTimeNanos"]) / 1_000_000_000, tz=timezone.utc
            )
            samples.append(HeartRateSample(timestamp=timestamp, bpm=round(values[0])))
        return samples

    def as_tools(self) -> list[BaseTool]:
        @tool("get_step_count", args_schema=TimeRangeInput)
        def get_step_count(start_time: str, end_time: str) -> int:
            """Gets the user's step count for a specified time range"""
            return self.get_step_count(start_time, end_time)

        @tool("get_activity_minutes", args_schema=TimeRangeInput)
        def get_activity_minutes(start_time: str, end_time: str) -> dict[str, float]:
            """Gets the user's activity minutes for a specified time range"""
            return self.get_activity_minutes(start_time, end_time)

        @tool("get_heart_rate", args_schema=TimeRangeInput)
        def get_heart_rate(start_time: str, end_time: str) -> list[HeartRateSample]:
            """Gets the user's heart rate data for a specified time range"""
            return self.get_heart_rate(start_time, end_time)

        return [get_step_count, get_activity_minutes, get_heart_rate]
