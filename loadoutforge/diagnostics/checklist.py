"""Automated checks that highlight catalog gaps."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass

from ..app import LoadoutApp
from ..domain.constraints import CONFIGURED_CATEGORIES, LOADOUT_SIZE, RULES


@dataclass(slots=True)
class ChecklistIssue:
    severity: str
    message: str


def run_checklist(app: LoadoutApp) -> list[ChecklistIssue]:
    issues: list[ChecklistIssue] = []
    items = list(app.catalog.iter_items())
    if not items:
        issues.append(ChecklistIssue("error", "No items registered."))
        return issues

    per_category = Counter(item.category for item in items)
    for category in CONFIGURED_CATEGORIES:
        available = per_category.get(category, 0)
        if available == 0:
            issues.append(
                ChecklistIssue("warning", f"Category '{category}' has no items; pinning it always falls short.")
            )
        elif available < LOADOUT_SIZE:
            issues.append(
                ChecklistIssue(
                    "info",
                    f"Category '{category}' has only {available} item(s); larger pins fall short.",
                )
            )

    for rule in RULES:
        if rule.category not in per_category:
            issues.append(
                ChecklistIssue("info", f"Rule '{rule.key}' binds '{rule.category}', which has no items.")
            )

    baseline = [item for item in items if item.is_baseline]
    if not baseline:
        issues.append(ChecklistIssue("warning", "No baseline items; every roll depends on source packs."))
    elif len(baseline) < LOADOUT_SIZE:
        issues.append(
            ChecklistIssue(
                "warning",
                f"Only {len(baseline)} baseline item(s); baseline-only rolls come up short.",
            )
        )

    used_packs = {item.source_pack for item in items if item.source_pack}
    for pack in app.catalog.iter_packs():
        if pack.pack_id not in used_packs:
            issues.append(ChecklistIssue("warning", f"Source pack '{pack.pack_id}' has no items."))

    return issues
