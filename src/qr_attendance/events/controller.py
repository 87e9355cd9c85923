from __future__ import annotations

import json

from flask import Flask, Response

from ..common.web import current_role, current_user_id, error_response, role_required
from ..container import Container
from ..core.constants import DEFAULT_SSE_KEEPALIVE_SECONDS
from ..core.enums import Role
from ..core.exceptions import ForbiddenError
from .broadcaster import channel_for_session


def format_sse(event_name: str, payload: dict) -> str:
    return f"event: {event_name}\ndata: {json.dumps(payload, ensure_ascii=False)}\n\n"


def register(app: Flask, container: Container) -> None:
    @app.route("/api/sessions/<int:session_id>/events", methods=["GET"], endpoint="session_events")
    @role_required(Role.TEACHER, Role.ADMIN)
    def session_events(session_id: int):
        """Server-Sent Events stream of one class session channel (advisory refresh hints)."""
        try:
            found = container.session_registry.get_session(session_id)
            # credential-issued events carry the QR code itself.
            if current_role() == Role.TEACHER and found.teacher_id != current_user_id():
                raise ForbiddenError("Bạn không phụ trách buổi học này")
        except Exception as e:
            return error_response(e)

        keepalive = float(app.config.get("SSE_KEEPALIVE_SECONDS", DEFAULT_SSE_KEEPALIVE_SECONDS))

        def generate():
            # Flask closes the generator when the client disconnects, which runs the
            # with-block exit and detaches the observer.
            with container.events.subscribe(channel_for_session(session_id)) as sub:
                yield ": connected\n\n"
                for event in sub.stream(timeout=keepalive):
                    if event is None:
                        yield ": keepalive\n\n"
                        continue
                    yield format_sse(event.name.value, event.payload)

        return Response(
            generate(),
            mimetype="text/event-stream",
            headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
        )
