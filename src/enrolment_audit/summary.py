from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol

from enrolment_audit.results import AnomalyFinding, DatasetStatistics


class Summarizer(Protocol):
    """Opaque narrative-summary collaborator (for example a hosted text model)."""

    def summarize(self, payload: dict[str, Any]) -> Any: ...


def findings_payload(
    findings: Sequence[AnomalyFinding],
    stats: DatasetStatistics | None = None,
    *,
    max_findings: int = 50,
) -> dict[str, Any]:
    """JSON-ready hand-off: the highest-scoring findings plus headline counts."""
    ranked = sorted(findings, key=lambda finding: (-finding.score, finding.index))
    payload: dict[str, Any] = {
        "n_findings": len(findings),
        "n_included": min(len(findings), max_findings),
        "findings": [finding.to_dict() for finding in ranked[:max_findings]],
    }
    if stats is not None:
        payload["dataset"] = {
            "total_rows": stats.total_rows,
            "anomaly_count": stats.anomaly_count,
            "anomaly_rate": stats.anomaly_rate,
            "top_states": [{"name": row.name, "value": row.value} for row in stats.top_states],
        }
    return payload
