from __future__ import annotations

from flask import Flask, request

from ..common.serialization import to_dict
from ..common.web import current_auth, json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def workspace():
        return container.workspaces.open(current_auth().require_user())

    @app.route("/api/students", methods=["GET"], endpoint="students")
    @login_required
    def list_students():
        rows = workspace().student_percentages(request.args.get("q", ""))
        students = [{**to_dict(s), "attendance_percentage": pct} for s, pct in rows]
        return ok(students=students)

    @app.route("/api/students", methods=["POST"], endpoint="add_student")
    @login_required
    def add_student():
        data = json_body()
        fields = {k: data[k] for k in ("name", "roll_no", "department", "year", "status") if k in data}
        student = workspace().add_student(
            name=fields.pop("name", ""),
            roll_no=fields.pop("roll_no", ""),
            department=fields.pop("department", ""),
            **fields,
        )
        return ok("Student added", 201, student=student)

    @app.route("/api/students/<int:student_id>", methods=["PATCH"], endpoint="update_student")
    @login_required
    def update_student(student_id: int):
        student = workspace().update_student(student_id, json_body())
        return ok("Student updated", student=student)

    @app.route("/api/students/<int:student_id>", methods=["DELETE"], endpoint="delete_student")
    @login_required
    def delete_student(student_id: int):
        workspace().delete_student(student_id)
        return ok("Student and their attendance deleted")

    @app.route("/api/students/import", methods=["POST"], endpoint="import_students")
    @login_required
    def import_students():
        if request.is_json:
            data = json_body()
            text = data.get("csv", "")
            department = data.get("department") or None
        else:
            upload = request.files.get("file")
            text = upload.read().decode("utf-8-sig") if upload else request.get_data(as_text=True)
            department = request.args.get("department") or None

        result = workspace().import_students(text, default_department=department)
        return ok(
            f"Imported {len(result.students)} students",
            imported=len(result.students),
            skipped=result.skipped,
        )
