import sys
import os

# Ensure we can import config
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "../src")))

from sentrybridge.config import settings
from sentrybridge.logging import configure_logging
from sentrybridge.sentry import ConfigurationError


def _load_config():
    raise FileNotFoundError("config.yaml")


def send_test_event():
    print(f"Sending test event to: {settings.sentry.dsn}")
    runtime = configure_logging(
        level=settings.logging.level.value,
        sinks="stdio,sentry",
        fmt=settings.logging.format.value,
        sentry=settings.sentry,
    )
    logger = runtime.get_logger("scripts.send_test_event", source="send_test_event")

    try:
        try:
            _load_config()
        except FileNotFoundError as exc:
            raise RuntimeError("test event from sentrybridge") from exc
    except RuntimeError as err:
        logger.error("Sentry test event", exc_info=err)

    print("Flushing pending events...")
    runtime.close()
    print("Done.")


if __name__ == "__main__":
    try:
        send_test_event()
    except ConfigurationError as e:
        print(f"Configuration error: {e}")
        sys.exit(1)
