from __future__ import annotations

from flask import Flask

from ..common.web import current_auth, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/refresh", methods=["GET"], endpoint="workspace_refresh")
    @login_required
    def refresh():
        # Called by the client on every page load.
        ws = container.workspaces.refresh(current_auth().require_user())
        return ok(
            students=len(ws.students),
            records=len(ws.records),
            day_notes=len(ws.day_notes),
            leads=len(ws.leads),
        )
