"""Development receiver — a local stand-in for the diagnostics ingest endpoint."""

import json
import logging
import zlib
from collections import deque

from flask import Flask, jsonify, request

from diagnostics_transport.config import INGEST_PATH
from diagnostics_transport.serializer import deserialize_batch

logger = logging.getLogger(__name__)


class ItemStore:
    """Keeps the most recent received items in memory."""

    def __init__(self, max_items: int = 1000):
        self._items: deque = deque(maxlen=max_items)
        self.batch_count = 0
        self.total_count = 0

    def add_batch(self, items: list[dict]):
        self._items.extend(items)
        self.batch_count += 1
        self.total_count += len(items)

    def get_recent(self, n: int = 20) -> list[dict]:
        return list(self._items)[-n:]

    @property
    def current_size(self) -> int:
        return len(self._items)


def create_app(max_items: int = 1000):
    """Flask application factory."""
    app = Flask(__name__)
    store = ItemStore(max_items=max_items)
    app.config["store"] = store

    @app.route("/health")
    def health():
        return jsonify({
            "status": "healthy",
            "batches": store.batch_count,
            "total_items": store.total_count,
            "current_stored": store.current_size,
        })

    @app.route(INGEST_PATH, methods=["POST"])
    def ingest():
        try:
            items = deserialize_batch(request.get_data())
        except (OSError, EOFError, zlib.error, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning("Invalid ingest body from %s: %s", request.remote_addr, exc)
            return jsonify({"status": "invalid", "error": str(exc)}), 400

        if not isinstance(items, list):
            return jsonify({"status": "invalid", "error": "expected a JSON array"}), 400

        store.add_batch(items)
        logger.info("Received batch of %d items from %s", len(items), request.remote_addr)
        return jsonify({"status": "accepted", "count": len(items)}), 202

    @app.route("/api/diagnostics/recent")
    def recent():
        n = request.args.get("n", 20, type=int)
        return jsonify(store.get_recent(n))

    return app

