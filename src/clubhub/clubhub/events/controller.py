from __future__ import annotations

from flask import Flask

from ..auth.decorators import build_auth_decorators, current_user
from ..common.http import ok
from ..common.validators import require_uuid
from ..container import Container


def register(app: Flask, container: Container) -> None:
    bearer_required, _ = build_auth_decorators(container.auth_service)

    @app.route("/events/<event_id>/register", methods=["POST"], endpoint="event_register")
    @bearer_required
    def event_register(event_id: str):
        event_id = require_uuid(event_id, "event_id")
        registration = container.registration_service.register(event_id, current_user().user_id)
        return ok(registration.to_dict(), "Registered for event", 201)

    @app.route("/events/<event_id>/register", methods=["DELETE"], endpoint="event_unregister")
    @bearer_required
    def event_unregister(event_id: str):
        event_id = require_uuid(event_id, "event_id")
        container.registration_service.unregister(event_id, current_user().user_id)
        return ok(None, "Registration cancelled")
