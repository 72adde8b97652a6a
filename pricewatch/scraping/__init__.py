"""
Price discovery engine and scrape worker.
"""

from pricewatch.scraping.number_parser import parse_generic_number, parse_hungarian_number
from pricewatch.scraping.page_scanner import scan_page
from pricewatch.scraping.price_extractor import extract_price, match_price
from pricewatch.scraping.types import CandidateRank, ScrapeResult

__all__ = [
    "CandidateRank",
    "ScrapeResult",
    "extract_price",
    "match_price",
    "parse_generic_number",
    "parse_hungarian_number",
    "scan_page",
]
