"""Audit result aggregation functions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ticket_audit.models.analysis import AnalysisResult


def summarize_results(results: Iterable[AnalysisResult]) -> dict[str, Any]:
    """Aggregate analysis results into audit statistics.

    Synthetic failure results are counted separately and excluded from the
    average score and the RCA percentage.
    """
    analyzed = 0
    failed = 0
    total_score = 0.0
    rca_count = 0
    errors: list[str] = []

    for result in results:
        if result.is_failure:
            failed += 1
            errors.append(f"Ticket {result.ticket_id}: {result.error}")
            continue
        analyzed += 1
        total_score += result.score
        if result.rca_detected:
            rca_count += 1

    return {
        "analyzed": analyzed,
        "failed": failed,
        "average_score": round(total_score / analyzed, 1) if analyzed else None,
        "rca_percentage": round(rca_count / analyzed * 100) if analyzed else None,
        "errors": errors,
    }


def format_audit_summary(stats: dict[str, Any]) -> str:
    """Format audit statistics as a human-readable summary string."""
    average = stats.get("average_score")
    rca = stats.get("rca_percentage")
    lines = [
        f"[SUMMARY] Analyzed: {stats.get('analyzed', 0)}",
        f"  Failed: {stats.get('failed', 0)}",
        f"  Average score: {average if average is not None else 'n/a'}",
        f"  RCA detected: {f'{rca}%' if rca is not None else 'n/a'}",
    ]

    errors = stats.get("errors", [])
    if errors:
        lines.append(f"  Errors ({len(errors)}):")
        for error in errors[:10]:
            lines.append(f"    - {error}")
        if len(errors) > 10:
            lines.append(f"    ... and {len(errors) - 10} more")

    return "\n".join(lines)
