from __future__ import annotations

from flask import Flask, session

from ..common.web import current_auth, fail, json_body, login_required, ok, save_auth
from ..container import Container
from ..core.enums import AuthState
from ..core.exceptions import AuthenticationError, InvalidTransitionError


def register(app: Flask, container: Container) -> None:
    def _store_user(s_user) -> None:
        session["name"] = s_user.full_name
        session["email"] = s_user.email

    @app.route("/auth/signup", methods=["POST"], endpoint="signup")
    def signup():
        data = json_body()
        auth = current_auth()
        if auth.state != AuthState.UNAUTHENTICATED:
            return fail("Sign out before creating another account", 400)

        s_user = container.auth_service.sign_up(
            full_name=data.get("full_name", ""),
            email=data.get("email", ""),
            password=data.get("password", ""),
        )
        auth.begin_sign_in()
        auth.sign_in_succeeded(s_user.user_id)
        save_auth(auth)
        _store_user(s_user)
        return ok("Account created", 201, user=s_user)

    @app.route("/auth/login", methods=["POST"], endpoint="login")
    def login():
        data = json_body()
        auth = current_auth()
        if auth.can_fetch:
            return ok("Already signed in", user_id=auth.user_id)

        try:
            auth.begin_sign_in()
        except InvalidTransitionError:
            # A pending recovery is abandoned by a normal sign in.
            auth.sign_out()
            auth.begin_sign_in()

        try:
            s_user = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))
        except AuthenticationError:
            auth.sign_in_failed()
            save_auth(auth)
            raise

        auth.sign_in_succeeded(s_user.user_id)
        session.permanent = bool(data.get("remember_me"))
        save_auth(auth)
        _store_user(s_user)
        container.workspaces.refresh(s_user.user_id)
        return ok("Signed in", user=s_user)

    @app.route("/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        auth = current_auth()
        if auth.user_id is not None:
            container.workspaces.close(auth.user_id)
        session.clear()
        return ok("Signed out")

    @app.route("/auth/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        auth = current_auth()
        return ok(user_id=auth.user_id, name=session.get("name"), email=session.get("email"))

    @app.route("/auth/recovery", methods=["POST"], endpoint="begin_recovery")
    def begin_recovery():
        data = json_body()
        token = container.auth_service.begin_password_recovery(data.get("email", ""))
        payload = {}
        if token is not None:
            app.logger.info("Password recovery requested")
            # No mailer is wired in; the link token is only echoed outside production.
            if app.config.get("DEBUG") or app.config.get("TESTING"):
                payload["recovery_token"] = token
        return ok("If the email is registered, a recovery link has been issued", **payload)

    @app.route("/auth/recovery/verify", methods=["POST"], endpoint="verify_recovery")
    def verify_recovery():
        data = json_body()
        s_user = container.auth_service.verify_recovery_token(data.get("email", ""), data.get("token", ""))
        auth = current_auth()
        auth.enter_password_recovery(s_user.user_id)
        save_auth(auth)
        _store_user(s_user)
        return ok("Choose a new password", state=auth.state)

    @app.route("/auth/password", methods=["POST"], endpoint="update_password")
    def update_password():
        data = json_body()
        auth = current_auth()
        if auth.state not in (AuthState.AUTHENTICATED, AuthState.PASSWORD_RECOVERY):
            return fail("Please sign in to continue", 401)

        container.auth_service.update_password(auth.user_id, data.get("password", ""))
        if auth.state == AuthState.PASSWORD_RECOVERY:
            auth.recovery_completed()
            save_auth(auth)
            container.workspaces.refresh(auth.user_id)
        return ok("Password updated", state=auth.state)
