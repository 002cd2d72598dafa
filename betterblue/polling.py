"""Command transaction state machine and notification polling."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

import httpx

from .const import (
    DEFAULT_POLL_ATTEMPTS,
    DEFAULT_POLL_INTERVAL,
    POLL_RESULT_SUCCESS,
    POLL_RESULTS_FAILED,
)
from .errors import VehicleApiError
from .models import utcnow
from .parsing import extract_str

_LOGGER = logging.getLogger(__name__)

FetchRecords = Callable[[], Awaitable[Any]]


class TransactionState(StrEnum):
    """Lifecycle of a sent command."""

    SENT = "sent"
    POLLING = "polling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"

    @property
    def is_terminal(self) -> bool:
        return self in (
            TransactionState.SUCCEEDED,
            TransactionState.FAILED,
            TransactionState.TIMED_OUT,
        )


_ALLOWED_TRANSITIONS = {
    TransactionState.SENT: {
        TransactionState.POLLING,
        TransactionState.SUCCEEDED,
        TransactionState.FAILED,
        TransactionState.TIMED_OUT,
    },
    TransactionState.POLLING: {
        TransactionState.SUCCEEDED,
        TransactionState.FAILED,
        TransactionState.TIMED_OUT,
    },
}


@dataclass
class CommandTransaction:
    """A command accepted by the vendor and awaiting its final result.

    Attributes:
        transaction_id: Vendor ``msgId`` of the command.
        vin: Target vehicle.
        access_token: Primary token the transaction is polled with.
        state: Current lifecycle state.
        attempts: Poll attempts consumed so far.
        last_result: Last ``result`` string seen for this transaction.
        history: (timestamp, state) pairs, oldest first.

    """

    transaction_id: str
    vin: str
    access_token: str
    state: TransactionState = TransactionState.SENT
    attempts: int = 0
    last_result: str | None = None
    history: list[tuple[datetime, TransactionState]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.history:
            self.history.append((utcnow(), self.state))

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal

    def transition(self, new_state: TransactionState) -> None:
        """Move to a new state.

        Raises:
            ValueError: If the transition is not allowed from the current state.

        """
        if new_state == self.state and not self.is_terminal:
            return
        if new_state not in _ALLOWED_TRANSITIONS.get(self.state, set()):
            raise ValueError(
                f"Invalid transaction transition {self.state} -> {new_state}"
            )
        _LOGGER.debug(
            "Transaction %s: %s -> %s", self.transaction_id, self.state, new_state
        )
        self.state = new_state
        self.history.append((utcnow(), new_state))


def find_record_result(payload: Any, transaction_id: str) -> str | None:
    """Return the ``result`` of the matching notification record, if any.

    Raises:
        ValueError: If the payload does not carry a ``resMsg`` record list.

    """
    records = payload.get("resMsg") if isinstance(payload, dict) else None
    if not isinstance(records, list):
        raise ValueError("Notification feed has no record list")
    for record in records:
        if not isinstance(record, dict):
            continue
        if extract_str(record.get("recordId")) == transaction_id:
            result = extract_str(record.get("result"))
            if result is not None:
                return result
    return None


class CommandPoller:
    """Poll the notification feed until a transaction reaches a final state."""

    def __init__(
        self,
        fetch_records: FetchRecords,
        max_attempts: int = DEFAULT_POLL_ATTEMPTS,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        api_name: str | None = None,
    ) -> None:
        """Initialize the poller.

        Args:
            fetch_records: Coroutine function returning the decoded feed body.
            max_attempts: Poll budget; every attempt counts, failed or not.
            poll_interval: Seconds slept before each attempt.
            api_name: Name embedded in the errors raised on failure.

        """
        self._fetch_records = fetch_records
        self.max_attempts = max_attempts
        self.poll_interval = poll_interval
        self.api_name = api_name

    async def poll(self, transaction: CommandTransaction) -> CommandTransaction:
        """Drive a transaction to a terminal state.

        Returns:
            The transaction in state ``succeeded``.

        Raises:
            VehicleApiError: If the command failed or the budget ran out.

        """
        transaction.transition(TransactionState.POLLING)

        while transaction.attempts < self.max_attempts:
            transaction.attempts += 1
            _LOGGER.debug(
                "Poll attempt %d/%d for transaction %s",
                transaction.attempts,
                self.max_attempts,
                transaction.transaction_id,
            )
            await asyncio.sleep(self.poll_interval)

            try:
                payload = await self._fetch_records()
                result = find_record_result(payload, transaction.transaction_id)
            except (VehicleApiError, httpx.HTTPError, ValueError) as err:
                _LOGGER.warning("Poll attempt failed, will retry: %s", err)
                continue

            if result is None:
                continue
            transaction.last_result = result

            if result == POLL_RESULT_SUCCESS:
                transaction.transition(TransactionState.SUCCEEDED)
                _LOGGER.info(
                    "Command %s completed successfully", transaction.transaction_id
                )
                return transaction

            if result in POLL_RESULTS_FAILED:
                transaction.transition(TransactionState.FAILED)
                raise VehicleApiError.log_error(
                    f"Command failed with result: {result}", api_name=self.api_name
                )

            _LOGGER.debug("Command in progress: %s", result)

        transaction.transition(TransactionState.TIMED_OUT)
        raise VehicleApiError.log_error(
            f"Command polling timeout after {self.max_attempts} attempts",
            api_name=self.api_name,
        )
