"""
Per-record diagnostics.

Data-quality problems never raise. They are collected as ``ParseError``
(record dropped) or ``ParseWarning`` (record kept, but suspicious) and
returned alongside the output.
"""

from enum import Enum
from typing import ClassVar, Literal, Optional

from pydantic import Field

from showlist.schemas.event import CamelModel


class SourceFile(str, Enum):
    EVENTS = "events"
    VENUES = "venues"


ErrorType = Literal["parse", "validation", "format"]
WarningType = Literal["ambiguous", "incomplete", "unusual", "format", "data-quality"]


class Diagnostic(CamelModel):
    line: int = Field(ge=0, description="1-based physical line in the source file")
    message: str
    raw_text: str = ""
    source_file: Optional[SourceFile] = None

    severity: ClassVar[str]

    def to_row(self) -> dict:
        """Flat row for the diagnostics CSV report."""
        data = self.model_dump(mode="json")
        data["severity"] = self.severity
        return data


class ParseError(Diagnostic):
    """The record could not be interpreted and was dropped."""

    type: ErrorType
    severity: ClassVar[str] = "error"


class ParseWarning(Diagnostic):
    """The record was used, but something about it looks off."""

    type: WarningType
    severity: ClassVar[str] = "warning"
