from __future__ import annotations

from typing import Optional

from flask import Flask, request, session

from ..common.serialization import to_dict
from ..common.validators import require_enum, require_int
from ..common.web import current_auth, json_body, login_required, ok
from ..container import Container
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from ..workspace.reconciler import EditTarget
from .grouping import folder_session_count, key_from_labels
from .model import SessionDraft, SessionKey, SessionMetadata

# Per-client record of the session open in the editor.
EDIT_SESSION_KEY = "attendance_edit"


def _draft_from_json(data: dict) -> SessionDraft:
    marks = data.get("marks") or {}
    remarks = data.get("remarks") or {}
    if not isinstance(marks, dict) or not isinstance(remarks, dict):
        raise ValidationError("marks and remarks must be objects keyed by student id")
    periods = data.get("periods") or []
    if not isinstance(periods, list):
        raise ValidationError("periods must be a list")

    return SessionDraft(
        subject=data.get("subject", ""),
        class_name=data.get("class_name", data.get("class", "")),
        date=data.get("date") or None,
        periods=tuple(require_int(p, "Period") for p in periods),
        marks={require_int(k, "Student id"): require_enum(AttendanceStatus, v, "Status") for k, v in marks.items()},
        remarks={require_int(k, "Student id"): str(v) for k, v in remarks.items() if v},
        global_note=data.get("global_note") or None,
    )


def _edit_target_from_json(data: dict, remembered: Optional[dict]) -> Optional[EditTarget]:
    """The session a save replaces, or ``None`` for a new session.

    Only the request body decides; the target remembered for this client
    merely supplies the session id when the body omits it.
    """

    editing = data.get("editing")
    if not editing:
        return None
    if not isinstance(editing, dict) or not editing.get("folder") or not editing.get("session"):
        raise ValidationError("editing must name the folder and session being edited")
    key = key_from_labels(editing["folder"], editing["session"])
    session_id = editing.get("session_id") or None
    if session_id is None and remembered and _target_matches(remembered, key):
        session_id = remembered.get("session_id")
    return EditTarget(key=key, session_id=session_id)


def _target_mapping(target: EditTarget) -> dict:
    return {"folder": target.key.date, "session": target.key.timestamp, "session_id": target.session_id}


def _target_matches(mapping: dict, key: SessionKey) -> bool:
    return mapping.get("folder") == key.date and mapping.get("session") == key.timestamp


def _session_key_from_args():
    folder = request.args.get("folder", "")
    label = request.args.get("session", "")
    if not folder or not label:
        raise ValidationError("folder and session are required")
    return key_from_labels(folder, label)


def register(app: Flask, container: Container) -> None:
    def workspace():
        return container.workspaces.open(current_auth().require_user())

    @app.route("/api/attendance/folders", methods=["GET"], endpoint="attendance_folders")
    @login_required
    def folders():
        ws = workspace()
        items = [
            {"folder": name, "sessions": folder_session_count(records), "records": len(records)}
            for name, records in ws.folders().items()
        ]
        return ok(folders=items)

    @app.route("/api/attendance/folders/<path:folder>/sessions", methods=["GET"], endpoint="attendance_sessions")
    @login_required
    def sessions(folder: str):
        ws = workspace()
        items = []
        for label, records in ws.sessions(folder).items():
            first = records[0]
            items.append(
                {
                    "session": label,
                    "metadata": SessionMetadata.from_records(records),
                    "subject": first.subject,
                    "class_name": first.class_name,
                    "records": len(records),
                }
            )
        return ok(folder=folder, sessions=items)

    @app.route("/api/attendance/session", methods=["GET"], endpoint="attendance_session_detail")
    @login_required
    def session_detail():
        breakdown = workspace().session_detail(_session_key_from_args())
        return ok(session=to_dict(breakdown))

    @app.route("/api/attendance/session", methods=["DELETE"], endpoint="attendance_delete_session")
    @login_required
    def delete_session():
        removed = workspace().delete_session(_session_key_from_args())
        return ok("Session deleted", removed=removed)

    @app.route("/api/attendance/folders/<path:folder>", methods=["DELETE"], endpoint="attendance_delete_folder")
    @login_required
    def delete_folder(folder: str):
        removed = workspace().delete_folder(key_from_labels(folder).date)
        return ok("Folder deleted", removed=removed)

    @app.route("/api/attendance/edit", methods=["POST"], endpoint="attendance_begin_edit")
    @login_required
    def begin_edit():
        data = json_body()
        key = key_from_labels(data.get("folder", ""), data.get("session") or None)
        target, draft = workspace().begin_edit(key)
        editing = _target_mapping(target)
        session[EDIT_SESSION_KEY] = editing
        return ok(editing=editing, draft=draft)

    @app.route("/api/attendance/edit", methods=["DELETE"], endpoint="attendance_cancel_edit")
    @login_required
    def cancel_edit():
        session.pop(EDIT_SESSION_KEY, None)
        return ok("Edit cancelled")

    @app.route("/api/attendance/sessions", methods=["POST"], endpoint="attendance_save_session")
    @login_required
    def save_session():
        data = json_body()
        remembered = session.get(EDIT_SESSION_KEY)
        target = _edit_target_from_json(data, remembered)
        key = workspace().save_session(_draft_from_json(data), edit=target)
        if target is None:
            return ok("Session saved", 201, date=key.date, timestamp=key.timestamp)

        if remembered and _target_matches(remembered, key):
            session.pop(EDIT_SESSION_KEY, None)
        return ok("Session updated", date=key.date, timestamp=key.timestamp)

    @app.route("/api/dashboard", methods=["GET"], endpoint="dashboard")
    @login_required
    def dashboard():
        board = workspace().dashboard(request.args.get("date") or None)
        return ok(dashboard=to_dict(board))

    @app.route("/api/attendance/summary", methods=["GET"], endpoint="attendance_summary")
    @login_required
    def summary():
        return ok(summary=workspace().attendance_summary())
