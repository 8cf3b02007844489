"""Deployment monitor.

Polls a Render deploy until it reaches a terminal status, then probes the
deployed service's health endpoint.
"""

import threading
import time
from typing import Any, Callable

import httpx

from renderctl.clients.render import RenderClient
from renderctl.config import HealthConfig, MonitorConfig
from renderctl.core.exceptions import RenderAPIError, TransientPollError
from renderctl.core.logging import StructuredLogger
from renderctl.deploy.models import (
    DeployOutcome,
    DeployResult,
    HealthResult,
    PollResult,
    ServiceEndpoint,
    StatusCategory,
)

logger = StructuredLogger(__name__)

PollCallback = Callable[[PollResult], None]
ProbeCallback = Callable[[int, int, bool, str], None]


class DeploymentMonitor:
    """Watch a deploy to completion and verify the service is healthy."""

    def __init__(
        self,
        client: RenderClient,
        monitor_config: MonitorConfig | None = None,
        health_config: HealthConfig | None = None,
        sleep: Callable[[float], None] | None = None,
        clock: Callable[[], float] = time.monotonic,
        http: httpx.Client | None = None,
        on_poll: PollCallback | None = None,
        on_probe: ProbeCallback | None = None,
    ):
        """Initialize the monitor.

        Args:
            client: Render API client
            monitor_config: Polling settings
            health_config: Health probe settings
            sleep: Function used to wait between polls and probes. When omitted,
                waits on the cancel event if one is passed, else time.sleep
            clock: Monotonic clock used for the polling deadline
            http: HTTP client for health probes (created on demand if omitted)
            on_poll: Called with every observed status
            on_probe: Called with (attempt, max_attempts, ok, detail) per probe
        """
        self._client = client
        self._monitor = monitor_config or MonitorConfig()
        self._health = health_config or HealthConfig()
        self._sleep = sleep
        self._clock = clock
        self._http = http
        self._owns_http = http is None
        self._on_poll = on_poll
        self._on_probe = on_probe

    @property
    def http(self) -> httpx.Client:
        """Get or create the HTTP client used for health probes."""
        if self._http is None:
            self._http = httpx.Client(timeout=self._health.timeout, follow_redirects=True)
        return self._http

    def close(self) -> None:
        """Close the probe HTTP client if this monitor created it."""
        if self._http is not None and self._owns_http:
            self._http.close()
            self._http = None

    def __enter__(self) -> "DeploymentMonitor":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def _wait(self, seconds: float, cancel: threading.Event | None) -> bool:
        """Pause between attempts. Returns True if cancelled."""
        if self._sleep is not None:
            self._sleep(seconds)
            return cancel is not None and cancel.is_set()
        if cancel is not None:
            return cancel.wait(seconds)
        time.sleep(seconds)
        return False

    def _backoff(self, consecutive_errors: int) -> float:
        delay = self._monitor.poll_interval * (2 ** (consecutive_errors - 1))
        return min(delay, self._monitor.backoff_max)

    def poll(self, deploy_id: str) -> PollResult:
        """Query the current status of a deploy once.

        Raises:
            TransientPollError: The status could not be read; retrying may help
            RenderAPIError: The API rejected the request permanently
        """
        try:
            raw = self._client.get_deploy_status(deploy_id)
        except RenderAPIError as e:
            if e.transient:
                raise TransientPollError(str(e), deploy_id=deploy_id) from e
            raise

        if raw is None:
            raise TransientPollError("Deploy response has no status", deploy_id=deploy_id)

        return PollResult.from_raw(raw)

    def await_deployment(
        self,
        deploy_id: str,
        cancel: threading.Event | None = None,
    ) -> DeployResult:
        """Poll a deploy until it is live, fails, times out or is cancelled.

        Args:
            deploy_id: ID of the deploy to watch
            cancel: Optional event; setting it stops the loop

        Returns:
            DeployResult describing how the wait ended
        """
        log = logger.bind(deploy_id=deploy_id)
        started = self._clock()
        max_wait = self._monitor.max_wait
        deadline = started + max_wait if max_wait > 0 else None

        polls = 0
        errors = 0
        last_status: str | None = None

        def finish(outcome: DeployOutcome, message: str) -> DeployResult:
            return DeployResult(
                deploy_id=deploy_id,
                outcome=outcome,
                status=last_status,
                polls=polls,
                elapsed=self._clock() - started,
                message=message,
            )

        while True:
            if cancel is not None and cancel.is_set():
                return finish(DeployOutcome.CANCELLED, "Cancelled")

            polls += 1
            try:
                result = self.poll(deploy_id)
            except TransientPollError as e:
                errors += 1
                log.warning("Status poll failed", attempt=errors, error=str(e))
                if errors >= self._monitor.max_consecutive_errors:
                    return finish(
                        DeployOutcome.TIMED_OUT,
                        f"Gave up after {errors} consecutive failed polls: {e}",
                    )
                delay = self._backoff(errors)
            else:
                last_status = result.raw_status
                if self._on_poll:
                    self._on_poll(result)
                log.info("Deploy status", status=result.label)

                if result.category == StatusCategory.SUCCESS:
                    return finish(DeployOutcome.LIVE, "Deploy is live")

                if result.category == StatusCategory.FAILURE:
                    return finish(DeployOutcome.FAILED, f"Deploy failed with status: {result.label}")

                if result.category == StatusCategory.UNKNOWN:
                    errors += 1
                    log.warning("Unrecognized deploy status", status=result.label, attempt=errors)
                    if errors >= self._monitor.max_consecutive_errors:
                        return finish(
                            DeployOutcome.TIMED_OUT,
                            f"Gave up after {errors} unrecognized statuses (last: {result.label})",
                        )
                    delay = self._backoff(errors)
                else:
                    errors = 0
                    delay = self._monitor.poll_interval

            if deadline is not None:
                remaining = deadline - self._clock()
                if remaining <= 0:
                    return finish(
                        DeployOutcome.TIMED_OUT,
                        f"Deploy not finished after {max_wait:.0f}s (last status: {last_status or '<none>'})",
                    )
                delay = min(delay, remaining)

            if self._wait(delay, cancel):
                return finish(DeployOutcome.CANCELLED, "Cancelled")

    def resolve_endpoint(self) -> ServiceEndpoint:
        """Look up the service's public URL."""
        return ServiceEndpoint(self._client.get_service_url())

    def probe(self, url: str) -> tuple[bool, int | None, str]:
        """Issue one health probe. Returns (ok, status_code, detail)."""
        try:
            response = self.http.get(url)
        except httpx.HTTPError as e:
            return False, None, str(e) or e.__class__.__name__

        ok = 200 <= response.status_code < 300
        return ok, response.status_code, f"HTTP {response.status_code}"

    def verify_health(
        self,
        service_url: str,
        max_attempts: int | None = None,
        interval: float | None = None,
        cancel: threading.Event | None = None,
    ) -> HealthResult:
        """Probe the service's health endpoint until it answers with 2xx.

        Args:
            service_url: Base URL of the service
            max_attempts: Number of probes (defaults to config)
            interval: Seconds between failed probes (defaults to config)
            cancel: Optional event; setting it stops probing

        Returns:
            HealthResult, unhealthy if every probe failed

        Raises:
            ValueError: max_attempts is below 1 or interval is negative
        """
        attempts_allowed = max_attempts if max_attempts is not None else self._health.max_attempts
        wait_seconds = interval if interval is not None else self._health.interval
        if attempts_allowed < 1:
            raise ValueError("max_attempts must be at least 1")
        if wait_seconds < 0:
            raise ValueError("interval must not be negative")
        url = ServiceEndpoint(service_url).health_url(self._health.path)
        log = logger.bind(url=url)

        status_code: int | None = None
        detail = ""
        attempt = 0

        while attempt < attempts_allowed:
            attempt += 1
            ok, status_code, detail = self.probe(url)
            if self._on_probe:
                self._on_probe(attempt, attempts_allowed, ok, detail)

            if ok:
                log.info("Health check passed", attempt=attempt)
                return HealthResult(url=url, healthy=True, attempts=attempt, status_code=status_code)

            log.warning("Health check failed", attempt=attempt, detail=detail)
            if attempt < attempts_allowed and self._wait(wait_seconds, cancel):
                break

        return HealthResult(
            url=url,
            healthy=False,
            attempts=attempt,
            status_code=status_code,
            last_error=detail,
        )
