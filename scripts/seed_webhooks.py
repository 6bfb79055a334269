#!/usr/bin/env python
"""Write sample webhook request records into a blob backend.

Records are stored as ``yyyy-MM-dd/<uuid>.json``. Roughly half use the
capitalized field names (``ReceivedAt``) older writers produce, the rest the
canonical camel case ones, so both code paths of the reader get exercised.

    python scripts/seed_webhooks.py --backend local --count 50 --days 5
"""

from __future__ import annotations

import argparse
import json
import logging
import random
import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

from hookview.core.storage import BlobStorage, get_blob_backend

logger = logging.getLogger(__name__)

METHODS = ["POST", "POST", "POST", "GET", "PUT", "PATCH", "DELETE"]
PATHS = ["/api/webhook", "/api/messages", "/hooks/github", "/hooks/stripe", "/events"]
SOURCE_IPS = ["10.0.0.4", "10.0.0.7", "172.16.2.15", "192.168.1.20"]
CONVERSATION_IDS = ["19:abc123@thread.v2", "19:def456@thread.v2", "a:1f2e3d"]


def make_record(received_at: datetime, legacy_casing: bool) -> dict[str, Any]:
    method = random.choice(METHODS)
    body: dict[str, Any] = {"type": "message", "text": f"sample {random.randint(1, 9999)}"}
    if random.random() < 0.6:
        body["conversation"] = {"id": random.choice(CONVERSATION_IDS)}

    record = {
        "id": str(uuid.uuid4()),
        "receivedAt": received_at.isoformat(),
        "method": method,
        "path": random.choice(PATHS),
        "headers": {
            "Content-Type": "application/json",
            "User-Agent": "hookview-seed/1.0",
        },
        "queryParameters": {"source": "seed"} if random.random() < 0.3 else {},
        "rawBody": json.dumps(body) if method != "GET" else "",
        "contentType": "application/json",
        "sourceIp": random.choice(SOURCE_IPS),
    }
    if legacy_casing:
        return {key[0].upper() + key[1:]: value for key, value in record.items()}
    return record


def main() -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    parser = argparse.ArgumentParser(description="Seed sample webhook records")
    parser.add_argument("--backend", default="local", help="Registry backend name")
    parser.add_argument("--count", type=int, default=25, help="Records to write")
    parser.add_argument("--days", type=int, default=3, help="Spread records over this many days")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    args = parser.parse_args()

    if args.seed is not None:
        random.seed(args.seed)

    storage = BlobStorage(get_blob_backend(args.backend))
    now = datetime.now(UTC)

    for i in range(args.count):
        received_at = now - timedelta(
            days=random.randrange(max(args.days, 1)), seconds=random.randrange(86400)
        )
        record = make_record(received_at, legacy_casing=i % 2 == 1)
        key = f"{received_at:%Y-%m-%d}/{uuid.uuid4()}.json"
        storage.put(key, json.dumps(record).encode("utf-8"), content_type="application/json")
        logger.debug(f"Wrote {key}")

    logger.info(f"Wrote {args.count} webhook records to backend '{args.backend}'")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
