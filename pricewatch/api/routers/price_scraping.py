"""
pricewatch/api/routers/price_scraping.py

Price scraping trigger and extraction preview endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from db.session import get_db
from pricewatch.api.dependencies import require_scrape_secret
from pricewatch.schemas.price_scraping import (
    PriceExtractionRequest,
    PriceExtractionResponse,
    ScrapeRunSummaryResponse,
)
from pricewatch.scraping.errors import StorageError
from pricewatch.scraping.page_scanner import scan_page
from pricewatch.services.price_scraping_service import (
    PriceScrapingService,
    get_price_scraping_service,
)

router = APIRouter(tags=["price-scraping"])


@router.post(
    "/scrape-prices",
    response_model=ScrapeRunSummaryResponse,
    dependencies=[Depends(require_scrape_secret)],
)
def scrape_prices(
    competitor_url_id: list[str] | None = Query(
        default=None,
        description="Optional competitor URL ids to limit the run to",
    ),
    db: Session = Depends(get_db),
    scraping_service: PriceScrapingService = Depends(get_price_scraping_service),
) -> ScrapeRunSummaryResponse:
    """
    Run one scrape pass over active competitor URLs.
    """

    try:
        summary = scraping_service.run(db=db, competitor_url_ids=competitor_url_id)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except StorageError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc

    return ScrapeRunSummaryResponse.from_summary(summary)


@router.post("/extract-price", response_model=PriceExtractionResponse)
def extract_price_preview(payload: PriceExtractionRequest) -> PriceExtractionResponse:
    """
    Run price discovery on supplied HTML without fetching or persisting anything.
    """

    return PriceExtractionResponse.from_result(scan_page(payload.html, payload.selector))
