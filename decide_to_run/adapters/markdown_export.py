"""Markdown exporter — implements PlanExporter.

Renders a plan as a checklist document: a header with the office's
deadline and budget, one section per non-empty group with [x] / [ ] boxes,
then the budget breakdown.
"""

from __future__ import annotations

from datetime import date

from decide_to_run.core.plan_templates import format_deadline
from decide_to_run.core.progress import is_done
from decide_to_run.data.models import PLAN_GROUPS, Office, Plan

_SITE_URL = "https://www.decidetorun.com"


def _days_until(deadline: str | None, today: date) -> int | None:
    if not deadline:
        return None
    try:
        return (date.fromisoformat(deadline[:10]) - today).days
    except ValueError:
        return None


class MarkdownPlanExporter:
    """Markdown implementation of PlanExporter."""

    def render(
        self,
        office: Office,
        plan: Plan,
        progress: dict[str, bool] | None = None,
        today: date | None = None,
    ) -> str:
        today = today or date.today()
        lines = [
            f"# YOUR CAMPAIGN PLAN: {office.title}",
            "",
            f"**{office.state} - District {office.district}**",
            "",
        ]

        deadline_line = f"**Filing Deadline:** {format_deadline(office.filing_deadline)}"
        days = _days_until(office.filing_deadline, today)
        if days is not None:
            deadline_line += f" - **{days} days remaining**"
        lines += [deadline_line, ""]
        lines += [f"**Estimated Budget:** {office.estimated_cost or ''}", "", "---", ""]

        for name, heading in PLAN_GROUPS:
            items = getattr(plan, name)
            if not items:
                continue
            lines += [f"## {heading}", ""]
            for item in items:
                box = "x" if is_done(progress, item.id) else " "
                lines.append(f"- [{box}] {item.task}")
            lines.append("")

        if plan.budget:
            lines += ["## BUDGET BREAKDOWN", ""]
            for category, percentage in plan.budget.items():
                lines.append(f"- **{category}:** {percentage}")
            lines.append("")

        lines += [
            "---",
            "",
            f"*Generated by Decide to Run - {_SITE_URL}*",
            f"*Data sourced from FEC and verified {today.month}/{today.day}/{today.year}*",
        ]
        return "\n".join(lines) + "\n"
