# File: domain/analytics/services/analytics_service.py
from collections import Counter
from typing import Any, Dict, List

from civiclens.common.exceptions.base_exception import ServiceUnavailableException
from civiclens.common.exceptions.workflow_errors import LLMUnavailableError
from civiclens.common.logging.logger import log_info, log_warning
from civiclens.common.translations.messages import get_message
from civiclens.common.utils.date_utils import utc_now_iso
from civiclens.domain.reports.entities.report_entity import ReportStatus, normalize_issue_category
from civiclens.infrastructure.database.mongodb.repository import MongoRepository
from civiclens.infrastructure.external.llm.llm_client import LLMClient

# Upper bound on the report lines placed in one analyst prompt.
MAX_PROMPT_REPORTS = 200

ANALYST_PROMPT = """You are a helpful civic analyst AI. Your task is to answer questions and provide summaries based on a list of civic issue reports.

Analyze the user's query and the provided report data to give a concise and accurate response.

Current Date: {now}

User Query: {query}

Report Data:
{reports}

If the query is a greeting or not a question, respond politely. If asked for specific reports, list them clearly. If asked for a summary, provide a high-level overview."""

PENDING_STATUSES = {ReportStatus.SUBMITTED.value, ReportStatus.IN_PROGRESS.value}


def summarize_reports(reports: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Dashboard counters over a list of report documents."""
    categories = Counter(
        normalize_issue_category(r.get("issue_category") or r.get("issue_type")).value for r in reports
    )
    return {
        "total_reports": len(reports),
        "pending_reports": sum(1 for r in reports if r.get("status") in PENDING_STATUSES),
        "resolved_reports": sum(1 for r in reports if r.get("status") == ReportStatus.RESOLVED.value),
        "total_corroborations": sum(int(r.get("upvote_count", 0)) for r in reports),
        "issues_by_category": [{"name": name, "count": count} for name, count in categories.most_common()],
    }


def format_report_line(report: Dict[str, Any]) -> str:
    location = report.get("location") or {}
    return (
        f"- Issue Type: {report.get('issue_type')}, Severity: {report.get('severity')}, "
        f"Status: {report.get('status')}, Description: {report.get('ai_description')}, "
        f"Location: (Lat: {location.get('lat')}, Lng: {location.get('lng')}), "
        f"Created: {report.get('created_at')}"
    )


class AnalyticsService:
    def __init__(self, reports_repo: MongoRepository, llm: LLMClient):
        self.reports_repo = reports_repo
        self.llm = llm

    async def summary(self) -> Dict[str, Any]:
        reports = await self.reports_repo.find({})
        result = summarize_reports(reports)
        log_info("Analytics summary computed", extra={"total": result["total_reports"]})
        return result

    async def ask(self, query: str) -> str:
        reports = await self.reports_repo.find({}, sort=[("created_at", -1)], limit=MAX_PROMPT_REPORTS)
        prompt = ANALYST_PROMPT.format(
            now=utc_now_iso(),
            query=query,
            reports="\n".join(format_report_line(r) for r in reports) or "(no reports)",
        )
        try:
            answer = await self.llm.complete([{"role": "user", "content": prompt}], temperature=0.3)
        except LLMUnavailableError as e:
            log_warning("Analytics assistant unavailable", extra={"error": e.message})
            raise ServiceUnavailableException(get_message("analytics.failed"))

        log_info("Analytics question answered", extra={"reports": len(reports), "chars": len(answer)})
        return answer.strip()
