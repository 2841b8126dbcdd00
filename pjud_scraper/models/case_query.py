"""CaseQuery data model for the PJUD case scraper."""

from dataclasses import dataclass, fields


@dataclass(frozen=True)
class CaseQuery:
    """Search parameters for one case lookup.

    Every field is matched against an option list owned by the portal, so the
    only local check is that nothing is blank.

    Attributes:
        competencia: Jurisdiction category (e.g. "Civil")
        corte: Court of appeals name
        tribunal: Lower court name
        libro_tipo: Docket book/type code (e.g. "C")
        rol: Docket number
        ano: Filing year
    """

    competencia: str
    corte: str
    tribunal: str
    libro_tipo: str
    rol: str
    ano: str

    def __post_init__(self) -> None:
        """Validate the query after initialization."""
        self._validate()

    def _validate(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, str):
                raise ValueError(f"{f.name} must be a string, got: {type(value).__name__}")
            if not value.strip():
                raise ValueError(f"{f.name} cannot be empty")

    @property
    def label(self) -> str:
        """Short docket label such as `C-2011-2022`."""
        return f"{self.libro_tipo}-{self.rol}-{self.ano}"

    @classmethod
    def from_dict(cls, data: dict) -> "CaseQuery":
        """Create a CaseQuery from a mapping.

        Accepts snake_case keys and the portal's camelCase `libroTipo`. Numbers
        are converted to strings so JSON batch files may use bare integers.
        """
        libro = data.get("libro_tipo", data.get("libroTipo"))
        values = {
            "competencia": data.get("competencia"),
            "corte": data.get("corte"),
            "tribunal": data.get("tribunal"),
            "libro_tipo": libro,
            "rol": data.get("rol"),
            "ano": data.get("ano"),
        }
        missing = [k for k, v in values.items() if v is None]
        if missing:
            raise ValueError(f"Missing query fields: {', '.join(missing)}")
        return cls(**{k: str(v) for k, v in values.items()})

    def to_dict(self) -> dict:
        return {
            "competencia": self.competencia,
            "corte": self.corte,
            "tribunal": self.tribunal,
            "libro_tipo": self.libro_tipo,
            "rol": self.rol,
            "ano": self.ano,
        }
