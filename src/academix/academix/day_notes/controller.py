from __future__ import annotations

from flask import Flask

from ..common.web import current_auth, json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def workspace():
        return container.workspaces.open(current_auth().require_user())

    @app.route("/api/day-notes", methods=["GET"], endpoint="day_notes")
    @login_required
    def list_notes():
        return ok(notes=list(workspace().day_notes))

    @app.route("/api/day-notes", methods=["POST"], endpoint="add_day_note")
    @login_required
    def add_note():
        data = json_body()
        note = workspace().add_day_note(date=data.get("date", ""), reason=data.get("reason", ""))
        return ok("Note saved", 201, note=note)

    @app.route("/api/day-notes/<int:note_id>", methods=["DELETE"], endpoint="delete_day_note")
    @login_required
    def delete_note(note_id: int):
        workspace().delete_day_note(note_id)
        return ok("Note deleted")
