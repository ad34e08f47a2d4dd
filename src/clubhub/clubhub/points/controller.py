from __future__ import annotations

from typing import Optional

from flask import Flask, request
from pydantic import BaseModel, ConfigDict, Field

from ..auth.decorators import build_auth_decorators, current_user
from ..common.http import ok, paginated, parse_body
from ..common.validators import parse_page, require_uuid
from ..container import Container
from ..core.enums import Role


class AdjustPointsBody(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    points: int = 0
    volunteer_hours: Optional[float] = Field(default=0.0, alias="volunteerHours")
    reason: str = Field(min_length=1, max_length=500)


def register(app: Flask, container: Container) -> None:
    bearer_required, role_required = build_auth_decorators(container.auth_service)

    @app.route("/users/<user_id>/points/history", methods=["GET"], endpoint="points_history")
    @bearer_required
    def points_history(user_id: str):
        user_id = require_uuid(user_id, "user_id")
        page, limit = parse_page(request.args.get("page"), request.args.get("limit"))
        entries, total = container.points_service.get_history(
            user_id, page=page, limit=limit, requester=current_user()
        )
        return paginated([e.to_dict() for e in entries], page=page, limit=limit, total=total)

    @app.route("/admin/users/<user_id>/points", methods=["POST"], endpoint="admin_adjust_points")
    @role_required(Role.SUPER_ADMIN)
    def admin_adjust_points(user_id: str):
        user_id = require_uuid(user_id, "user_id")
        body = parse_body(AdjustPointsBody)
        actor = current_user()
        entry = container.points_service.adjust_points(
            user_id=user_id,
            points=body.points,
            volunteer_hours=body.volunteer_hours or 0.0,
            reason=body.reason,
            adjusted_by=actor.user_id,
            actor_role=actor.role,
        )
        return ok(entry.to_dict(), "Points adjusted", 201)
