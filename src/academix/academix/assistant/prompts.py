from __future__ import annotations

import json
from typing import Sequence

from ..attendance.model import AttendanceRecord
from ..common.serialization import to_dict
from ..leads.model import Lead
from ..students.model import Student


def _dump(items) -> str:
    return json.dumps([to_dict(i) for i in items], default=str)


def assistant_prompt(
    query: str,
    *,
    students: Sequence[Student],
    records: Sequence[AttendanceRecord],
    current_date: str,
) -> str:
    return f"""You are an academic assistant for Academix.
Current Date: {current_date}

Campus Data:
- Student List: {_dump(students)}
- Attendance Logs: {_dump(records)}

STRICT RULES:
1. Do NOT use markdown symbols like asterisks (*) for bolding or list markers.
2. Provide clean, professional plain text output.
3. Filter logs for Date: {current_date} when asked for "today".
4. Include Department in all student mentions.

User Query: {query}"""


def attendance_summary_prompt(*, students: Sequence[Student], records: Sequence[AttendanceRecord]) -> str:
    return f"""Analyze this attendance data and provide a concise human-readable summary.
Data: {_dump(records)}
Students: {_dump(students)}
Focus on trends, low attendance alerts, and key absentees."""


def lead_followup_prompt(lead: Lead) -> str:
    return f"""You are an admissions assistant for Academix.
Generate a concise, friendly, and professional follow-up message for a prospective student.

Lead Details:
- Name: {lead.name}
- Course of Interest: {lead.course}
- Last Note: {lead.last_note or 'No notes available.'}

RULES:
- Keep the message under 40 words.
- The tone should be encouraging and helpful.
- Do NOT use markdown.
- End with a question to encourage a reply."""
