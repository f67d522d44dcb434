"""Push exporter.

Snapshots every registered view, renders it, and POSTs it to the
collector, one request per view. A failed view is logged and the cycle
moves on to the next one.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

import httpx

from ocpush.core.config import ExporterSettings, get_settings, join_endpoint
from ocpush.core.errors import (
    NonSuccessStatusError,
    PushError,
    SerializationError,
    TransportError,
    UnknownViewError,
)
from ocpush.core.exporter.render import render, render_json
from ocpush.core.stats.measure import Measurement
from ocpush.core.stats.meter import Meter
from ocpush.core.stats.view import View
from ocpush.core.tags import TagsLike, current_tags

logger = logging.getLogger(__name__)

TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"
JSON_CONTENT_TYPE = "application/json"
JSON_SCHEMA_HEADERS = {"schema": "prometheus/telemetry", "version": "0.0.2"}


@dataclass
class PushReport:
    """Outcome of one push cycle."""
    pushed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


class PushExporter:
    """Aggregates measurements and pushes them to a metrics collector."""

    def __init__(
        self,
        namespace: str,
        push_addr: str,
        push_port: str = "",
        job_name: str = "",
        instance: str = "",
        *,
        meter: Optional[Meter] = None,
        client: Optional[httpx.Client] = None,
        timeout: float = 5.0,
        body_format: str = "text",
        debug: bool = False,
    ):
        if body_format not in ("text", "json"):
            raise ValueError(f"Unknown body format: {body_format}")
        self.meter = meter or Meter()
        self._namespace = namespace
        self._endpoint = join_endpoint(push_addr, push_port)
        self._job_name = job_name
        self._instance = instance
        self._timeout = timeout
        self._body_format = body_format
        self._debug = debug

        self._client = client
        self._owns_client = client is None
        self._client_lock = threading.Lock()

        self._pushed_once = False
        self._stop_event: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

    @classmethod
    def from_settings(
        cls,
        settings: Optional[ExporterSettings] = None,
        **kwargs: Any,
    ) -> "PushExporter":
        """Create an exporter from settings (environment by default)."""
        settings = settings or get_settings()
        return cls(
            namespace=settings.NAMESPACE,
            push_addr=settings.PUSH_ADDR,
            push_port=settings.PUSH_PORT,
            job_name=settings.JOB_NAME,
            instance=settings.INSTANCE_NAME,
            timeout=settings.PUSH_TIMEOUT_SECONDS,
            body_format=settings.BODY_FORMAT,
            debug=settings.DEBUG,
            **kwargs,
        )

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def job_name(self) -> str:
        return self._job_name

    @property
    def instance(self) -> str:
        return self._instance

    def set_instance(self, instance: str) -> None:
        """Set the instance name. Ignored once metrics have been pushed."""
        if self._pushed_once:
            logger.warning(
                f"Instance already fixed to {self._instance!r}, ignoring {instance!r}",
                extra={"instance": self._instance},
            )
            return
        self._instance = instance

    def register_views(self, *views: View) -> None:
        """Register views with the meter.

        Raises:
            DuplicateViewError: on the first name collision.
        """
        self.meter.register(*views)

    def record(
        self,
        measurements: Iterable[Measurement],
        attachments: Optional[Mapping[str, Any]] = None,
        tags: TagsLike = None,
    ) -> None:
        """Record measurements under the current context's tags."""
        if tags is None:
            tags = current_tags()
        self.meter.record(tags, measurements, attachments)

    def build_url(self) -> str:
        url = f"{self._endpoint}/metrics"
        if self._job_name:
            url = f"{url}/job/{self._job_name}"
        if self._instance:
            url = f"{url}/instance/{self._instance}"
        return url

    def push_view(self, view: View) -> bool:
        """Push one view.

        Returns:
            False when the view has no rows and nothing was sent.

        Raises:
            SerializationError: the rows could not be rendered.
            TransportError: the request could not be sent.
            NonSuccessStatusError: the collector rejected the push.
        """
        rows = self.meter.retrieve_data(view.name)
        if not rows:
            return False

        if self._body_format == "json":
            body = json.dumps([render_json(self._namespace, view, rows)])
            headers = {"Content-Type": JSON_CONTENT_TYPE, **JSON_SCHEMA_HEADERS}
        else:
            body = render(self._namespace, view, rows)
            headers = {"Content-Type": TEXT_CONTENT_TYPE}

        url = self.build_url()
        if self._debug:
            logger.debug(f"Push body for {view.name}:\n{body}", extra={"view": view.name})
        self._send(url, body.encode("utf-8"), headers)
        logger.debug(
            f"Pushed view {view.name}",
            extra={"view": view.name, "url": url, "rows": len(rows), "bytes": len(body)},
        )
        return True

    def push_metrics(self) -> PushReport:
        """Run one push cycle over every registered view."""
        report = PushReport()
        self._pushed_once = True
        for view in self.meter.views():
            try:
                if self.push_view(view):
                    report.pushed.append(view.name)
                else:
                    report.skipped.append(view.name)
            except UnknownViewError:
                # unregistered while the cycle was running
                report.skipped.append(view.name)
            except (SerializationError, PushError) as e:
                report.failed[view.name] = str(e)
                logger.error(
                    f"Metrics push failed for view {view.name}: {e}",
                    extra={
                        "view": view.name,
                        "url": getattr(e, "url", None),
                        "status_code": getattr(e, "status_code", None),
                    },
                )
        if report.pushed or report.failed:
            logger.info(
                f"Push cycle done: {len(report.pushed)} pushed, {len(report.failed)} failed",
                extra={"pushed": len(report.pushed), "failed": len(report.failed)},
            )
        return report

    def _get_client(self) -> httpx.Client:
        with self._client_lock:
            if self._client is None:
                self._client = httpx.Client(timeout=self._timeout)
            return self._client

    def _send(self, url: str, content: bytes, headers: Dict[str, str]) -> None:
        """POST a body to the collector."""
        try:
            response = self._get_client().post(
                url,
                content=content,
                headers=headers,
                timeout=self._timeout,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(f"Push to {url} failed: {e}", url=url) from e
        if not response.is_success:
            raise NonSuccessStatusError(response.status_code, url, response.text[:200])

    def start(self, interval_seconds: Optional[float] = None) -> None:
        """Start pushing metrics periodically on a background thread.

        No-op while a pusher thread is alive, including one that was asked
        to stop but is still finishing a push.
        """
        if self._thread is not None:
            if self._thread.is_alive():
                if self._stop_event is not None and self._stop_event.is_set():
                    logger.warning("Previous metrics pusher is still finishing, not restarting")
                return
            self._thread = None
        interval = interval_seconds or get_settings().PUSH_INTERVAL_SECONDS
        # one event per loop so a restart never revives a stopping thread
        stop_event = threading.Event()
        self._stop_event = stop_event
        self._thread = threading.Thread(
            target=self._push_loop,
            args=(interval, stop_event),
            name="ocpush-pusher",
            daemon=True,
        )
        self._thread.start()
        logger.info(
            f"Metrics pusher started for {self.build_url()} every {interval}s",
            extra={"url": self.build_url(), "job": self._job_name},
        )

    def stop(self, timeout: float = 5.0) -> None:
        """Stop the background pusher."""
        if self._stop_event is not None:
            self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning(f"Metrics pusher did not stop within {timeout}s")
            else:
                self._thread = None

    def _push_loop(self, interval: float, stop_event: threading.Event) -> None:
        while not stop_event.wait(interval):
            try:
                self.push_metrics()
            except Exception as e:
                logger.error(f"Metrics push error: {e}", exc_info=True)

    def close(self) -> None:
        """Stop pushing and close the HTTP client if this exporter created it."""
        self.stop()
        with self._client_lock:
            if self._client is not None and self._owns_client:
                self._client.close()
                self._client = None

    def __enter__(self) -> "PushExporter":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
