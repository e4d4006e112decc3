"""
Data models for civil timestamps and the unsaved-changes prompt.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass(frozen=True)
class CivilTimestamp:
    """An instant whose calendar and clock fields belong to the civil timezone.

    Field accessors read the civil wall clock; ``instant`` keeps the absolute
    moment, so comparisons and arithmetic stay correct.
    """

    instant: datetime

    def __post_init__(self):
        if self.instant.tzinfo is None or self.instant.utcoffset() is None:
            raise ValueError("CivilTimestamp requires a timezone-aware datetime")

    @property
    def year(self) -> int:
        return self.instant.year

    @property
    def month(self) -> int:
        return self.instant.month

    @property
    def day(self) -> int:
        return self.instant.day

    @property
    def hour(self) -> int:
        return self.instant.hour

    @property
    def minute(self) -> int:
        return self.instant.minute

    @property
    def second(self) -> int:
        return self.instant.second

    @property
    def day_of_week(self) -> int:
        """Day index with Sunday=0 through Saturday=6."""
        return (self.instant.weekday() + 1) % 7

    @property
    def date_str(self) -> str:
        return self.instant.date().isoformat()

    @property
    def time_str(self) -> str:
        return self.instant.strftime('%H:%M:%S')

    @property
    def timestamp(self) -> float:
        return self.instant.timestamp()

    def plus_days(self, days: int) -> 'CivilTimestamp':
        """Return a new value ``days`` civil calendar days away (wall clock kept)."""
        return CivilTimestamp(self.instant + timedelta(days=days))

    def __str__(self) -> str:
        return f"{self.date_str} {self.time_str}"


@dataclass(frozen=True)
class PromptContent:
    """Copy shown by the unsaved-changes confirmation prompt."""

    title: str = 'Alterações não salvas'
    message: str = 'Você tem alterações não salvas. Deseja realmente sair?'
    confirm_label: str = 'Sair sem salvar'
    cancel_label: str = 'Cancelar'

    def as_dict(self) -> dict[str, str]:
        """Get the prompt copy as a plain dictionary for templates and JSON."""
        return {
            'title': self.title,
            'message': self.message,
            'confirm_label': self.confirm_label,
            'cancel_label': self.cancel_label,
        }
