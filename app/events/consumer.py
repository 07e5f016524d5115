import asyncio, json
from aio_pika import connect_robust, ExchangeType
from app.cache.redis_client import cache
from app.core.config import settings
from app.core.errors import EmailDeliveryError
from app.core.logging import logger
from app.events.publisher import EXCHANGE_NAME
from app.notifications.email import EmailSender, get_email_sender
from app.services.notification_service import build_rsvp_message

QUEUE_NAME = "festival.notifications"
SENT_KEY_TTL = 7 * 24 * 3600


def _sent_key(notification_id: str) -> str:
    return f"notification:sent:{notification_id}"


async def deliver_with_retry(sender: EmailSender, message, attempts: int = None, delay: float = None) -> bool:
    """
    Send one email, retrying transient failures with linear backoff.

    Returns:
        True once delivered, False if every attempt failed or the failure was permanent
    """
    attempts = attempts or settings.NOTIFICATION_MAX_ATTEMPTS
    delay = settings.NOTIFICATION_RETRY_DELAY_SECONDS if delay is None else delay
    for attempt in range(1, attempts + 1):
        try:
            await asyncio.wait_for(sender.send(message), timeout=settings.NOTIFICATION_TIMEOUT_SECONDS)
            return True
        except asyncio.TimeoutError:
            logger.warning(f"Email to {message.to_address} timed out (attempt {attempt}/{attempts})")
        except EmailDeliveryError as e:
            if not e.transient:
                logger.error(f"Permanent email failure for {message.to_address}: {e.message}")
                return False
            logger.warning(f"Email to {message.to_address} failed (attempt {attempt}/{attempts}): {e.message}")
        if attempt < attempts:
            await asyncio.sleep(delay * attempt)
    logger.error(f"Giving up on email '{message.subject}' to {message.to_address} after {attempts} attempts")
    return False


async def handle_message(body: bytes, sender: EmailSender = None) -> bool:
    data = json.loads(body.decode())
    notification_id = data.get("notification_id")
    message = build_rsvp_message(data)
    if message is None:
        logger.warning(f"Ignoring notification of unknown type {data.get('type')!r}")
        return False

    # Redelivered messages carry the same id; skip ones already sent
    if notification_id and await cache.exists(_sent_key(notification_id)):
        logger.info(f"Notification {notification_id} already delivered, skipping")
        return True

    delivered = await deliver_with_retry(sender or get_email_sender(), message)
    if delivered and notification_id:
        await cache.set(_sent_key(notification_id), True, expire=SENT_KEY_TTL)
    return delivered


async def run_worker():
    max_retries = 10
    delay = 5  # seconds
    for attempt in range(1, max_retries + 1):
        try:
            connection = await connect_robust(settings.RABBITMQ_URL)
            logger.info("Successfully connected to RabbitMQ")
            break
        except Exception as e:
            logger.error(f"RabbitMQ connection failed (attempt {attempt}/{max_retries}): {e}")
            if attempt == max_retries:
                raise
            await asyncio.sleep(delay)
    sender = get_email_sender()
    channel = await connection.channel()
    await channel.set_qos(prefetch_count=10)
    exchange = await channel.declare_exchange(EXCHANGE_NAME, ExchangeType.TOPIC, durable=True)
    queue = await channel.declare_queue(QUEUE_NAME, durable=True)
    await queue.bind(exchange, routing_key="rsvp.*")
    async with queue.iterator() as queue_iter:
        async for message in queue_iter:
            async with message.process():
                try:
                    await handle_message(message.body, sender)
                except Exception as e:
                    logger.exception(f"Error handling message: {e}")


if __name__ == "__main__":
    asyncio.run(run_worker())
