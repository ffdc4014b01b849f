#!/usr/bin/env python3
"""Walk through the store operations against a live background sweep.

Usage:
    python scripts/demo_store.py

Env:
    TTLKV_SWEEP_INTERVAL_SECONDS  sweep cadence (default 1.0)
"""

from __future__ import annotations

import logging
import time

from ttlkv import InMemoryKVStore, StoreConfig, TypeMismatchError

logger = logging.getLogger("ttlkv.demo")


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    config = StoreConfig.from_env()

    with InMemoryKVStore(config) as store:
        store.set("name", "John Doe")
        logger.info("get name -> %r", store.get("name"))

        store.set("counter", 10)
        logger.info("incr counter -> %r", store.incr("counter"))
        logger.info("decr counter -> %r", store.decr("counter"))

        logger.info("exists name -> %r", store.exists("name"))
        logger.info("exists unknownKey -> %r", store.exists("unknownKey"))

        try:
            store.incr("name")
        except TypeMismatchError as exc:
            logger.info("incr name -> %s (%s)", exc.code, exc)

        store.set("expiringKey", "expiringValue")
        store.expire("expiringKey", 2)
        store.set("expiringKey2", "expiringValue2")
        store.expire("expiringKey2", 1)
        logger.info("expiringKey ttl -> %.2fs", store.ttl("expiringKey") or 0.0)

        wait = 2 + config.sweep_interval_seconds + 0.1
        logger.info("waiting %.1fs for the sweep", wait)
        time.sleep(wait)
        logger.info("get expiringKey -> %r", store.get("expiringKey"))
        logger.info("get expiringKey2 -> %r", store.get("expiringKey2"))

        store.flush_all()
        logger.info("after flush_all: %d keys", len(store))


if __name__ == "__main__":
    main()
