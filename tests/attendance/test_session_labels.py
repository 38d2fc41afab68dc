from __future__ import annotations

import pytest

from src.academix.academix.attendance.model import (
    AttendanceRecord,
    SessionMetadata,
    format_session_label,
    join_session_note,
    normalize_periods,
    parse_session_label,
    split_session_note,
)
from src.academix.academix.core.enums import AttendanceStatus
from src.academix.academix.core.exceptions import ValidationError


def test_format_label_sorts_and_dedupes_periods():
    assert format_session_label([3, 1, 2, 1], "09:15") == "P1,2,3 - 09:15"


@pytest.mark.parametrize("periods", [[], [0], [8]])
def test_normalize_periods_rejects_empty_or_out_of_range(periods):
    with pytest.raises(ValidationError):
        normalize_periods(periods)


def test_parse_label_reads_periods_and_pads_clock():
    assert parse_session_label("P2,4 - 9:05") == ((2, 4), "09:05")
    assert parse_session_label("Unknown Time") == ((), None)
    assert parse_session_label(None) == ((), None)


def test_session_note_tag_is_split_from_remark():
    assert split_session_note("[NOTE: Lab day] left early") == ("Lab day", "left early")
    assert split_session_note("[NOTE: Lab day]") == ("Lab day", None)
    assert split_session_note("plain remark") == (None, "plain remark")
    assert split_session_note(None) == (None, None)


def test_join_session_note_rejects_closing_bracket():
    with pytest.raises(ValidationError):
        join_session_note("bad ] note", None)


def test_join_then_split_keeps_note_and_remark():
    stored = join_session_note("Lab day", "left early")
    assert stored == "[NOTE: Lab day] left early"
    assert split_session_note(stored) == ("Lab day", "left early")


def test_record_decoding_promotes_note_and_maps_class_column():
    record = AttendanceRecord.from_row(
        {
            "id": 7,
            "date": "2024-01-10",
            "timestamp": "P1 - 09:00",
            "student_id": 3,
            "status": "OD",
            "subject": "Maths",
            "class": "II-A",
            "remark": "[NOTE: Sports meet] on duty",
            "session_id": "abc",
        }
    )

    assert record.status is AttendanceStatus.OD
    assert record.class_name == "II-A"
    assert record.session_note == "Sports meet"
    assert record.remark == "on duty"
    assert SessionMetadata.from_records([record]).global_note == "Sports meet"


def test_record_decoding_rejects_unknown_status():
    with pytest.raises(ValidationError):
        AttendanceRecord.from_row({"id": 1, "student_id": 1, "status": "Late"})


def test_record_with_missing_keys_decodes_to_none():
    record = AttendanceRecord.from_row({"id": 1, "student_id": 1, "status": "Present", "date": "", "timestamp": None})
    assert record.date is None
    assert record.timestamp is None
