"""Result models returned by a scrape."""

from dataclasses import dataclass, field

from pjud_scraper.models.history_entry import HistoryEntry


@dataclass
class UnresolvedWriting:
    """A filing awaiting judicial action. Content is not guaranteed unique."""

    content: str

    def to_dict(self) -> dict:
        return {"content": self.content}


@dataclass
class ScrapeResult:
    """Everything read for one query.

    `history` keeps the table's rendered order (oldest of the kept rows first).
    """

    history: list[HistoryEntry] = field(default_factory=list)
    unresolved_writings: list[UnresolvedWriting] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "ScrapeResult":
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.history and not self.unresolved_writings

    def to_dict(self) -> dict:
        return {
            "history": [e.to_dict() for e in self.history],
            "unresolved_writings": [w.to_dict() for w in self.unresolved_writings],
        }
