from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class ResultLine:
    label: str
    status: str
    detail: Optional[str] = None

    def render(self) -> str:
        if self.detail:
            return f"{self.label}: {self.status} ({self.detail})"
        return f"{self.label}: {self.status}"


def line(label: str, status: str, detail: Optional[str] = None) -> str:
    return ResultLine(label, status, detail).render()


def failed(label: str, detail: Optional[str] = None) -> str:
    return ResultLine(label, "FAILED", detail).render()
