from __future__ import annotations

from flask import Flask

from ..common.web import current_auth, json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/assistant/ask", methods=["POST"], endpoint="assistant_ask")
    @login_required
    def ask():
        data = json_body()
        ws = container.workspaces.open(current_auth().require_user())
        answer = ws.ask(data.get("query", ""), current_date=data.get("date") or None)
        return ok(answer=answer)
