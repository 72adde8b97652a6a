"""
Run one competitor price scrape pass from the CLI.
"""

from __future__ import annotations

import argparse
import json
import logging
import os

from db.session import session_scope
from pricewatch.services.price_scraping_service import PriceScrapingService


def main() -> int:
    parser = argparse.ArgumentParser(description="Scrape competitor prices once.")
    parser.add_argument(
        "--competitor-url-id",
        dest="competitor_url_ids",
        action="append",
        default=None,
        help="Limit the run to this competitor URL id (repeatable).",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").strip().upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    service = PriceScrapingService()
    with session_scope() as db:
        summary = service.run(db=db, competitor_url_ids=args.competitor_url_ids)

    payload = {
        "total": summary.total,
        "succeeded": summary.succeeded,
        "failed": summary.failed,
        "rate_limited": summary.rate_limited,
        "started_at": summary.started_at.isoformat(),
        "finished_at": summary.finished_at.isoformat(),
        "errors": summary.errors,
    }
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
