"""JSON-over-HTTP backend for the work order API server."""

from __future__ import annotations

import json
import logging
import time
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Callable, List, Optional, Sequence

from ..models import (
    AppSettings,
    DocumentError,
    WorkCenter,
    WorkOrder,
    WorkOrderData,
    data_to_json,
    order_from_document,
    order_to_document,
)
from .base import PersistenceBackend, PersistenceError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:3000/api"

Opener = Callable[..., Any]


class RestBackend(PersistenceBackend):
    """Client for the ``/api/orders`` and ``/api/settings`` routes.

    Work centers are not served by the API; they come from configuration.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        *,
        work_centers: Sequence[WorkCenter] = (),
        timeout: float = 10.0,
        max_retries: int = 3,
        retry_initial_delay: float = 1.0,
        retry_backoff: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
        opener: Optional[Opener] = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: API root, e.g. ``http://localhost:3000/api``.
            work_centers: Work centers reported by :meth:`list_work_centers`.
            timeout: Socket timeout for each request (seconds).
            max_retries: Maximum number of retries for transient failures.
            retry_initial_delay: Base delay before the first retry (seconds).
            retry_backoff: Multiplier applied to the delay after each retry.
            sleep: Sleep function used between retries (primarily for testing).
            opener: Replacement for :func:`urllib.request.urlopen` (testing).
        """
        self.base_url = base_url.rstrip("/")
        self.work_centers = list(work_centers)
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_initial_delay = retry_initial_delay
        self.retry_backoff = retry_backoff
        self._sleep = sleep
        self._opener = opener or urllib.request.urlopen

    # ------------------------------------------------------------------
    def list_orders(self) -> List[WorkOrder]:
        payload = self._request("GET", "/orders")
        if not isinstance(payload, list):
            raise PersistenceError("Order listing did not return a JSON array.")
        orders: List[WorkOrder] = []
        for document in payload:
            try:
                orders.append(order_from_document(document))
            except DocumentError as exc:
                logger.warning("Skipping malformed work order from API: %s", exc)
        return orders

    def list_work_centers(self) -> List[WorkCenter]:
        return list(self.work_centers)

    def create_order(self, order: WorkOrder) -> WorkOrder:
        payload = self._request("POST", "/orders", order_to_document(order))
        try:
            return order_from_document(payload)
        except DocumentError:
            return order

    def update_order(self, order_id: str, data: WorkOrderData) -> None:
        self._request("PUT", _order_path(order_id), data_to_json(data), missing_ok=True)

    def delete_order(self, order_id: str) -> None:
        self._request("DELETE", _order_path(order_id), missing_ok=True)

    def get_settings(self) -> AppSettings:
        return AppSettings.from_json(self._request("GET", "/settings"))

    def save_settings(self, settings: AppSettings) -> AppSettings:
        return AppSettings.from_json(self._request("POST", "/settings", settings.to_json()))

    # ------------------------------------------------------------------
    def _request(self, method: str, path: str, body: Any = None, *, missing_ok: bool = False) -> Any:
        url = f"{self.base_url}{path}"
        data = json.dumps(body).encode("utf-8") if body is not None else None
        headers = {"Accept": "application/json"}
        if data is not None:
            headers["Content-Type"] = "application/json"

        def execute() -> Any:
            request = urllib.request.Request(url, data=data, method=method, headers=headers)
            with self._opener(request, timeout=self.timeout) as response:
                raw = response.read()
            if not raw:
                return None
            try:
                return json.loads(raw.decode("utf-8"))
            except (UnicodeDecodeError, json.JSONDecodeError):
                # PUT/DELETE answer with a plain "OK" body.
                return None

        return self._execute_with_backoff(execute, f"{method} {path}", missing_ok=missing_ok)

    def _execute_with_backoff(
        self, func: Callable[[], Any], description: str, *, missing_ok: bool = False
    ) -> Any:
        attempt = 0
        delay = self.retry_initial_delay
        while True:
            try:
                return func()
            except urllib.error.HTTPError as exc:
                if exc.code == 404 and missing_ok:
                    logger.debug("%s: target no longer exists", description)
                    return None
                if exc.code < 500:
                    raise PersistenceError(f"{description} failed with HTTP {exc.code}.") from exc
                error: Exception = exc
            except (urllib.error.URLError, TimeoutError, ConnectionError) as exc:
                error = exc

            attempt += 1
            if attempt > self.max_retries:
                raise PersistenceError(f"{description} failed after retries.") from error
            logger.warning(
                "API request %s failed (attempt %d/%d): %s", description, attempt, self.max_retries, error
            )
            self._sleep(delay)
            delay *= self.retry_backoff


def _order_path(order_id: str) -> str:
    return f"/orders/{urllib.parse.quote(order_id, safe='')}"


__all__ = ["DEFAULT_API_URL", "RestBackend"]
