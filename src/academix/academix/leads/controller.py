from __future__ import annotations

from flask import Flask

from ..common.web import current_auth, json_body, login_required, ok
from ..container import Container

_FIELDS = ("name", "phone", "course", "status", "next_follow_up", "notes")


def register(app: Flask, container: Container) -> None:
    def workspace():
        return container.workspaces.open(current_auth().require_user())

    @app.route("/api/leads", methods=["GET"], endpoint="leads")
    @login_required
    def list_leads():
        return ok(leads=list(workspace().leads))

    @app.route("/api/leads", methods=["POST"], endpoint="add_lead")
    @login_required
    def add_lead():
        data = json_body()
        extra = {k: data[k] for k in ("status", "next_follow_up", "notes") if data.get(k)}
        lead = workspace().add_lead(
            name=data.get("name", ""),
            phone=data.get("phone", ""),
            course=data.get("course", ""),
            **extra,
        )
        return ok("Lead added", 201, lead=lead)

    @app.route("/api/leads/<int:lead_id>", methods=["PATCH"], endpoint="update_lead")
    @login_required
    def update_lead(lead_id: int):
        data = json_body()
        lead = workspace().update_lead(lead_id, {k: data[k] for k in _FIELDS if k in data})
        return ok("Lead updated", lead=lead)

    @app.route("/api/leads/<int:lead_id>", methods=["DELETE"], endpoint="delete_lead")
    @login_required
    def delete_lead(lead_id: int):
        workspace().delete_lead(lead_id)
        return ok("Lead deleted")

    @app.route("/api/leads/<int:lead_id>/notes", methods=["POST"], endpoint="log_lead_note")
    @login_required
    def log_note(lead_id: int):
        lead = workspace().log_lead_note(lead_id, json_body().get("note", ""))
        return ok("Note logged", lead=lead)

    @app.route("/api/leads/<int:lead_id>/followup", methods=["POST"], endpoint="lead_followup")
    @login_required
    def followup(lead_id: int):
        return ok(message_text=workspace().lead_followup(lead_id))
