import json
import asyncio
from aio_pika import connect_robust, Message, ExchangeType, DeliveryMode
from app.core.config import settings

EXCHANGE_NAME = "festival.events"

_connection = None
_channel = None
_lock = asyncio.Lock()


async def get_rabbit_connection():
    global _connection, _channel
    async with _lock:
        if _connection and not _connection.is_closed:
            return _connection, _channel
        _connection = await connect_robust(settings.RABBITMQ_URL)
        _channel = await _connection.channel()
        return _connection, _channel


async def publish_event(routing_key: str, payload: dict):
    _, channel = await get_rabbit_connection()
    exchange = await channel.declare_exchange(EXCHANGE_NAME, ExchangeType.TOPIC, durable=True)
    body = json.dumps(payload, default=str).encode()
    message = Message(
        body,
        content_type="application/json",
        delivery_mode=DeliveryMode.PERSISTENT,
        message_id=payload.get("notification_id"),
    )
    await exchange.publish(message, routing_key=routing_key)


async def close_connection():
    global _connection, _channel
    if _connection and not _connection.is_closed:
        await _connection.close()
    _connection, _channel = None, None
