from typing import Dict, Set, Optional, Any
from fastapi import WebSocket
import asyncio
import contextlib
import json
import logging

import redis.asyncio as aioredis

from daycare_api.events import MessageSent, MESSAGE_EVENTS_CHANNEL

logger = logging.getLogger(__name__)


class ConnectionManager:
    def __init__(self):
        # user_id (UUID string) -> set of WebSocket
        self.active_connections: Dict[str, Set[WebSocket]] = {}
        self.redis: Optional[Any] = None
        self.listener_task: Optional[asyncio.Task] = None
        # True while this instance is subscribed to the events channel
        self.listening = False
        self._lock = asyncio.Lock()

    async def connect(self, user_id: str, websocket: WebSocket) -> None:
        async with self._lock:
            conns = self.active_connections.setdefault(user_id, set())
            conns.add(websocket)

    async def disconnect(self, user_id: str, websocket: WebSocket) -> None:
        async with self._lock:
            conns = self.active_connections.get(user_id)
            if not conns:
                return
            conns.discard(websocket)
            if len(conns) == 0:
                self.active_connections.pop(user_id, None)

    async def send_json_to_user(self, user_id: str, data) -> None:
        conns = self.active_connections.get(user_id)
        if not conns:
            return
        to_remove = []
        for ws in list(conns):
            try:
                await ws.send_json(data)
            except Exception:
                logger.debug("Dropping dead socket for user %s", user_id)
                to_remove.append(ws)
        if to_remove:
            async with self._lock:
                for ws in to_remove:
                    conns.discard(ws)
                if len(conns) == 0:
                    self.active_connections.pop(user_id, None)

    async def send_json_to_all(self, data) -> None:
        for user_id in list(self.active_connections):
            await self.send_json_to_user(user_id, data)

    async def deliver(self, target_user_id: Optional[str], payload: dict) -> None:
        """Push to one user, or to everyone connected when there is no target."""
        if target_user_id:
            await self.send_json_to_user(target_user_id, payload)
        else:
            await self.send_json_to_all(payload)

    async def publish(self, channel: str, message: dict) -> None:
        """Publish message to Redis channel if configured."""
        if not self.redis:
            return
        await self.redis.publish(channel, json.dumps(message))


manager = ConnectionManager()

# Seconds to wait before resubscribing after the listener loses Redis
RESUBSCRIBE_DELAY = 1.0


async def notify_message_sent(event: MessageSent) -> None:
    """Fan a MessageSent event out to connected sockets.

    With Redis configured the event is published so every instance forwards
    it from its listener. While this instance's own listener is down it also
    delivers locally. Delivery is best effort: failures are logged and never
    reach the sender.
    """
    target = str(event.recipient_id) if event.recipient_id else None
    payload = event.to_payload()
    published = False
    if manager.redis:
        try:
            await manager.publish(MESSAGE_EVENTS_CHANNEL, {"target_user_id": target, "payload": payload})
            published = True
        except Exception:
            logger.exception("Failed to publish message %s to redis, delivering locally", event.id)
    if published and manager.listening:
        return
    try:
        await manager.deliver(target, payload)
    except Exception:
        logger.exception("Failed to deliver message %s to local sockets", event.id)


async def _forward(item) -> None:
    if item is None or item['type'] != 'message':
        return
    try:
        data = json.loads(item['data'])
        payload = data.get('payload')
        if payload:
            await manager.deliver(data.get('target_user_id'), payload)
    except Exception:
        logger.exception('Error processing pubsub message')


async def _redis_listener(redis_client, channel_name: str):
    """Forward pub/sub events to local sockets, resubscribing after failures."""
    while True:
        try:
            pubsub = redis_client.pubsub()
            await pubsub.subscribe(channel_name)
            manager.listening = True
            async for item in pubsub.listen():
                await _forward(item)
            logger.warning("Redis subscription to %s ended, resubscribing", channel_name)
        except Exception:
            logger.exception("Redis listener on %s failed, resubscribing", channel_name)
        finally:
            manager.listening = False
        await asyncio.sleep(RESUBSCRIBE_DELAY)


def start_listener(redis_client) -> asyncio.Task:
    manager.listener_task = asyncio.get_running_loop().create_task(
        _redis_listener(redis_client, MESSAGE_EVENTS_CHANNEL)
    )
    return manager.listener_task


def init_redis():
    """Initialize Redis client if REDIS_URL is configured."""
    if manager.redis is not None:
        return

    from daycare_api.config import get_settings
    redis_url = get_settings().redis_url
    if not redis_url:
        logger.info("REDIS_URL not configured, running without Redis pub/sub")
        return

    try:
        manager.redis = aioredis.from_url(redis_url)
        start_listener(manager.redis)
        logger.info("Redis initialized: %s", redis_url)
    except Exception:
        logger.exception("Failed to initialize Redis client")
        manager.redis = None


async def close_redis():
    task = manager.listener_task
    manager.listener_task = None
    if task is not None:
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
    if manager.redis is not None:
        await manager.redis.aclose()
        manager.redis = None
