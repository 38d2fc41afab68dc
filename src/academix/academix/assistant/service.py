from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..common.validators import require_non_empty
from ..leads.model import Lead
from ..students.model import Student
from .generator import SamplingConfig, TextGenerator
from .prompts import assistant_prompt, attendance_summary_prompt, lead_followup_prompt

logger = logging.getLogger(__name__)

CONNECTION_FALLBACK = (
    "I'm having trouble connecting to the intelligence engine right now. Please verify your connection."
)
EMPTY_FALLBACK = "I processed your request but couldn't generate a clear response. Please try again."
SUMMARY_FALLBACK = "Attendance summary is unavailable right now."
LEAD_CONNECTION_FALLBACK = "Hi {name}, following up on your {course} interest. How can we help?"
LEAD_EMPTY_FALLBACK = (
    "Hi {name}, thank you for inquiring about our {course} program. "
    "We'd love to schedule a quick call to discuss your career goals. Let us know when you're free!"
)

CHAT_SAMPLING = SamplingConfig(temperature=0.7, top_k=40, top_p=0.95)


class AssistantService:
    """Prompt-templated pass-through to the text generator.

    Output is opaque text. Generator failures never propagate: they are logged
    and replaced by a fixed message.
    """

    def __init__(self, generator: Optional[TextGenerator], *, chat_model: str, fast_model: str):
        self._generator = generator
        self._chat_model = chat_model
        self._fast_model = fast_model

    def _generate(
        self,
        *,
        model: str,
        prompt: str,
        on_error: str,
        on_empty: str,
        sampling: Optional[SamplingConfig] = None,
    ) -> str:
        """Generated text, ``on_error`` when the generator is missing or fails, ``on_empty`` for a blank reply."""

        if self._generator is None:
            logger.warning("No text generator configured")
            return on_error
        try:
            text = self._generator.generate(model=model, prompt=prompt, sampling=sampling)
        except Exception as exc:
            logger.warning("Text generation failed (%s): %s", model, exc)
            return on_error
        return (text or "").strip() or on_empty

    def ask(
        self,
        query: str,
        *,
        students: Sequence[Student],
        records: Sequence[AttendanceRecord],
        current_date: str,
    ) -> str:
        query = require_non_empty(query, "Question")
        return self._generate(
            model=self._chat_model,
            prompt=assistant_prompt(query, students=students, records=records, current_date=current_date),
            sampling=CHAT_SAMPLING,
            on_error=CONNECTION_FALLBACK,
            on_empty=EMPTY_FALLBACK,
        )

    def summarize_attendance(self, *, students: Sequence[Student], records: Sequence[AttendanceRecord]) -> str:
        return self._generate(
            model=self._fast_model,
            prompt=attendance_summary_prompt(students=students, records=records),
            on_error=SUMMARY_FALLBACK,
            on_empty=SUMMARY_FALLBACK,
        )

    def lead_followup(self, lead: Lead) -> str:
        return self._generate(
            model=self._fast_model,
            prompt=lead_followup_prompt(lead),
            on_error=LEAD_CONNECTION_FALLBACK.format(name=lead.name, course=lead.course),
            on_empty=LEAD_EMPTY_FALLBACK.format(name=lead.name, course=lead.course),
        )
