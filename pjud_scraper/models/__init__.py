from pjud_scraper.models.case_query import CaseQuery
from pjud_scraper.models.history_entry import HistoryEntry
from pjud_scraper.models.scrape_result import ScrapeResult, UnresolvedWriting

__all__ = ["CaseQuery", "HistoryEntry", "ScrapeResult", "UnresolvedWriting"]
