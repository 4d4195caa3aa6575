"""Export port — renders a plan and its progress into a document.

Exporters consume exactly the Plan / PlanProgress contract; they never
re-derive the plan from the office.
"""

from __future__ import annotations

from datetime import date
from typing import Protocol

from decide_to_run.data.models import Office, Plan


class PlanExporter(Protocol):
    """Abstract checklist document renderer."""

    def render(
        self,
        office: Office,
        plan: Plan,
        progress: dict[str, bool] | None = None,
        today: date | None = None,
    ) -> str: ...
