"""Dev receiver entry point — accepts batches on the diagnostics ingest path."""

import logging
import os

from diagnostics_transport.receiver import create_app


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger = logging.getLogger(__name__)

    host = os.environ.get("RECEIVER_HOST", "0.0.0.0")
    port = int(os.environ.get("RECEIVER_PORT", "8080"))
    max_items = int(os.environ.get("RECEIVER_MAX_ITEMS", "1000"))

    app = create_app(max_items=max_items)
    logger.info("Starting diagnostics receiver on %s:%d", host, port)
    app.run(host=host, port=port)


if __name__ == "__main__":
    main()
