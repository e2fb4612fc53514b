"""
Realtime change feeds as cancelable async streams.

Every subscription owns one Supabase channel. Subscribing again under the same
name cancels the previous subscription, so a user never holds two notification
channels at once.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

from supabase import AsyncClient, acreate_client

from app.config.settings import settings

logger = logging.getLogger(__name__)


class ChangeKind(str, Enum):
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


@dataclass
class ChangeEvent:
    kind: ChangeKind
    table: str
    record: Dict[str, Any] = field(default_factory=dict)
    old_record: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], table: str) -> "ChangeEvent":
        data = payload.get("data", payload)
        kind = (data.get("type") or data.get("eventType") or "").lower()
        return cls(
            kind=ChangeKind(kind),
            table=data.get("table") or table,
            record=data.get("record") or data.get("new") or {},
            old_record=data.get("old_record") or data.get("old") or {},
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.kind.value,
            "table": self.table,
            "record": self.record,
            "old_record": self.old_record,
        }


_CLOSED = object()


class Subscription:
    """Async iterator of ChangeEvent; stops once cancelled."""

    def __init__(self, name: str, table: str, on_cancel: Callable[["Subscription"], Awaitable[None]]):
        self.name = name
        self.table = table
        self._on_cancel = on_cancel
        self._queue: asyncio.Queue = asyncio.Queue()
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def push(self, payload: Dict[str, Any]) -> None:
        if self._cancelled:
            return
        try:
            event = ChangeEvent.from_payload(payload, self.table)
        except ValueError:
            logger.warning(f"Ignoring unrecognised realtime payload on {self.name}: {payload}")
            return
        self._queue.put_nowait(event)

    def __aiter__(self):
        return self

    async def __anext__(self) -> ChangeEvent:
        if self._cancelled and self._queue.empty():
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        return item

    async def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self._queue.put_nowait(_CLOSED)
        await self._on_cancel(self)


async def _default_client_factory() -> AsyncClient:
    return await acreate_client(settings.supabase_url, settings.supabase_key)


class RealtimeGateway:
    def __init__(self, client_factory: Optional[Callable[[], Awaitable[Any]]] = None):
        self._client_factory = client_factory or _default_client_factory
        self._client = None
        self._subscriptions: Dict[str, Subscription] = {}
        self._channels: Dict[str, Any] = {}

    async def get_client(self):
        if self._client is None:
            self._client = await self._client_factory()
        return self._client

    def active(self, name: str) -> Optional[Subscription]:
        return self._subscriptions.get(name)

    async def subscribe(self, name: str, table: str, filter: Optional[str] = None, event: str = "*") -> Subscription:
        existing = self._subscriptions.get(name)
        if existing is not None:
            logger.info(f"Replacing existing realtime subscription {name}")
            await existing.cancel()

        client = await self.get_client()
        subscription = Subscription(name, table, self._release)
        channel = client.channel(name)
        channel.on_postgres_changes(
            event,
            callback=subscription.push,
            table=table,
            schema="public",
            filter=filter,
        )

        def _on_status(status, error=None):
            if error:
                logger.error(f"Realtime subscription {name} error: {error}")
            else:
                logger.debug(f"Realtime subscription {name} status: {status}")

        await channel.subscribe(_on_status)
        self._subscriptions[name] = subscription
        self._channels[name] = channel
        logger.info(f"Subscribed to {table} changes on {name}")
        return subscription

    async def _release(self, subscription: Subscription) -> None:
        if self._subscriptions.get(subscription.name) is not subscription:
            return
        self._subscriptions.pop(subscription.name, None)
        channel = self._channels.pop(subscription.name, None)
        if channel is not None and self._client is not None:
            try:
                await self._client.remove_channel(channel)
            except Exception as e:
                logger.warning(f"Error removing realtime channel {subscription.name}: {e}")
        logger.info(f"Unsubscribed from {subscription.name}")

    async def close(self) -> None:
        for subscription in list(self._subscriptions.values()):
            await subscription.cancel()


realtime_gateway = RealtimeGateway()


def get_realtime() -> RealtimeGateway:
    return realtime_gateway
