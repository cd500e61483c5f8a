"""Example usage of an observepy logger.

Run with:
    python examples/basic_usage.py

Set BETTER_STACK_SOURCE_TOKEN to also ship records to Better Stack, or
LOG_FILE to append them to an NDJSON file. Without either, records only
go to the console.
"""

import asyncio
import logging

from observepy import ObservepyHandler, create_logger

logger = create_logger()


async def process_order(order_id: str) -> None:
    order_logger = logger.bind(orderId=order_id)
    order_logger.info("Processing order")
    try:
        # Simulate some async work
        await asyncio.sleep(0.1)
        order_logger.info("Order processed successfully")
    except Exception as exc:
        order_logger.error("Order processing failed", {"error": exc})
    await logger.aflush()


def main() -> None:
    logger.info("Application started")

    # Structured data
    logger.info("User action performed", {"userId": 123, "action": "login"})
    logger.error(
        "Database connection failed",
        {"error": TimeoutError("Connection timeout"), "dbHost": "db.example.com"},
    )
    logger.warn("API rate limit approaching", currentUsage=980, limit=1000)
    logger.debug("Processing request", {"requestId": "req-123", "params": {"id": 456}})

    # A logger with its own configuration
    payment_logger = create_logger(
        min_level="debug",
        service="payment-service",
        environment="production",
        version="1.2.0",
    )
    payment_logger.info(
        "Payment processing started",
        {"paymentId": "pay_123456", "amount": 99.99, "currency": "USD"},
    )
    payment_logger.close()

    # Bound context, including an identity override
    user_logger = logger.bind(service="user-service", userId="user_123", requestId="req_456")
    user_logger.info("User profile updated")
    user_logger.debug("User details", {"email": "user@example.com"})

    # Standard library logging routed through the same pipeline
    logging.getLogger("thirdparty").addHandler(ObservepyHandler(logger))
    logging.getLogger("thirdparty").warning("Retrying upstream call", extra={"attempt": 2})

    asyncio.run(process_order("order_789"))
    logger.close()


if __name__ == "__main__":
    main()
