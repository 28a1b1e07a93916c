"""Hand-off point between the client and the outbound transport."""

from __future__ import annotations

import logging
from typing import Protocol

from pyanalytics._redact import redact_for_log
from pyanalytics.models.payload import BasePayload

_logger = logging.getLogger(__name__)


class Dispatcher(Protocol):
    """Structural interface for whatever ships payloads to the backend.

    Batching, retries and the network transport all live behind this
    interface.  Having a protocol here makes it easy to pass test doubles
    while keeping the client free of transport concerns.
    """

    def dispatch(self, payload: BasePayload) -> None: ...


class LoggingDispatcher:
    """Dispatcher that only writes each payload to the DEBUG log."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or _logger

    def dispatch(self, payload: BasePayload) -> None:
        self._logger.debug("%s payload %s", payload.type, redact_for_log(payload.to_wire()))
