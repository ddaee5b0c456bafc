"""LLM prompt templates for ticket quality audits."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ticket_audit.core.transformers import render_history

if TYPE_CHECKING:
    from ticket_audit.models.ticket import HistoryItem, Ticket

TICKET_AUDIT_SYSTEM_PROMPT = (
    "You are a QA Auditor for IT Support Tickets.\n"
    "Analyze the ticket and its full history log and evaluate based on:\n"
    "1. Timeliness (response time, resolution time vs priority).\n"
    "2. Transparency (clear updates to the client).\n"
    "3. Detail (technical depth suitable for the issue).\n"
    "4. Root Cause Analysis (was the root cause identified?).\n"
    "5. Follow-up (was confirmation requested before closing?).\n\n"
    "Respond with a JSON object containing:\n"
    "- score: number from 1 to 10 based on handling best practices\n"
    "- summary: concise 1-sentence summary of the ticket handling quality\n"
    "- strengths: list of positive aspects (e.g. fast response, clear communication)\n"
    "- weaknesses: list of negative aspects (e.g. missed SLA, vague updates)\n"
    "- rcaDetected: boolean, true if a Root Cause Analysis was provided or discussed"
)

TICKET_AUDIT_USER_TEMPLATE = (
    "TICKET METADATA:\n"
    "ID: {ticket_id}\n"
    "Subject: {subject}\n"
    "Priority: {priority}\n"
    "Status: {status}\n"
    "Client: {client_name}\n\n"
    "FULL HISTORY LOG:\n"
    "{history}\n\n"
    "Respond with JSON only."
)

MAX_HISTORY_CHARS = 30000


def build_ticket_audit_prompt(
    ticket: Ticket,
    history: list[HistoryItem],
) -> tuple[str, str]:
    """Build system and user prompts for a ticket quality audit.

    Returns (system_prompt, user_prompt).
    """
    history_text = render_history(history)
    if len(history_text) > MAX_HISTORY_CHARS:
        history_text = history_text[-MAX_HISTORY_CHARS:]

    user_prompt = TICKET_AUDIT_USER_TEMPLATE.format(
        ticket_id=ticket.ticket_id,
        subject=ticket.subject,
        priority=ticket.priority,
        status=ticket.status,
        client_name=ticket.client_name,
        history=history_text or "(no history entries)",
    )
    return TICKET_AUDIT_SYSTEM_PROMPT, user_prompt
