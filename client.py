"""Client entry point — emits sample logs through the diagnostics sink."""

import argparse
import asyncio
import logging
import random
import signal

from diagnostics_transport import DiagnosticsHandler, DiagnosticsSink, load_config

SAMPLE_MESSAGES = [
    "User logged in",
    "Request processed successfully",
    "Database query completed",
    "Cache miss for key",
    '{"event": "config_reloaded", "version": 3}',
    "Render failed <div class=\"card\"><span>empty</span></div>",
    "Connection timeout to upstream",
]

SAMPLE_LEVELS = [logging.DEBUG, logging.INFO, logging.INFO, logging.WARNING, logging.ERROR]


async def run(logs_per_second: int, run_time: int, config_path):
    logger = logging.getLogger("demo")
    config = load_config(config_path)
    shutdown = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, shutdown.set)

    async with DiagnosticsSink(config) as sink:
        handler = DiagnosticsHandler(sink)
        logger.addHandler(handler)
        try:
            for _ in range(run_time):
                if shutdown.is_set():
                    break
                for _ in range(logs_per_second):
                    logger.log(
                        random.choice(SAMPLE_LEVELS),
                        random.choice(SAMPLE_MESSAGES),
                        extra={"durationMs": random.randint(1, 500), "requestId": random.randint(1000, 9999)},
                    )
                try:
                    await asyncio.wait_for(shutdown.wait(), timeout=1.0)
                except asyncio.TimeoutError:
                    pass

            try:
                raise RuntimeError("Simulated failure at shutdown")
            except RuntimeError as exc:
                sink.report_exception(exc, group="demo")
        finally:
            logger.removeHandler(handler)


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    parser = argparse.ArgumentParser(description="Diagnostics transport demo client")
    parser.add_argument("--config", type=str, default=None)
    parser.add_argument("--logs-per-second", type=int, default=5)
    parser.add_argument("--run-time", type=int, default=10)
    args = parser.parse_args()

    asyncio.run(run(args.logs_per_second, args.run_time, args.config))


if __name__ == "__main__":
    main()
