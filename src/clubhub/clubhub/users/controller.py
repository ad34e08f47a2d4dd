from __future__ import annotations

from flask import Flask
from pydantic import BaseModel, ConfigDict, Field

from ..auth.decorators import build_auth_decorators, current_user
from ..common.http import ok, parse_body
from ..container import Container


class LoginBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1)


def register(app: Flask, container: Container) -> None:
    bearer_required, _ = build_auth_decorators(container.auth_service)

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return ok({"status": "ok"})

    @app.route("/auth/login", methods=["POST"], endpoint="login")
    def login():
        body = parse_body(LoginBody)
        result = container.auth_service.authenticate(body.email, body.password)
        return ok(
            {"access_token": result.access_token, "token_type": "bearer", "user": result.user.to_public_dict()},
            "Login successful",
        )

    @app.route("/auth/me", methods=["GET"], endpoint="me")
    @bearer_required
    def me():
        return ok(current_user().to_public_dict())
