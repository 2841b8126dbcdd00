"""HistoryEntry data model for the PJUD case scraper."""

from dataclasses import dataclass


@dataclass
class HistoryEntry:
    """One row of the case history table.

    Attributes:
        folio: Row identifier within the case file
        stage: Procedural stage label (Etapa)
        step: Procedural step label (Trámite)
        description: Step description (Desc. Trámite)
        date: Step date exactly as displayed
        page: Page/folio number within the file (Foja)
        document_url: Link to the step's PDF, empty when the row has none
    """

    folio: str
    stage: str
    step: str
    description: str
    date: str
    page: str
    document_url: str = ""

    def to_dict(self) -> dict:
        return {
            "folio": self.folio,
            "stage": self.stage,
            "step": self.step,
            "description": self.description,
            "date": self.date,
            "page": self.page,
            "document_url": self.document_url,
        }

    def summary(self) -> str:
        return ", ".join(
            [self.folio, self.stage, self.step, self.description, self.date, self.page, self.document_url]
        )
