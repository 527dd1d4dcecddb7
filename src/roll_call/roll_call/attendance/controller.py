from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import SubmitOutcome
from ..core.exceptions import RemoteReadFailed, RemoteWriteFailed, ValidationError
from ..container import Container

logger = logging.getLogger(__name__)

_SUBMIT_STATUS = {
    SubmitOutcome.COMMITTED: 201,
    SubmitOutcome.QUEUED: 202,
    SubmitOutcome.FAILED: 503,
}


def register(app: Flask, container: Container) -> None:
    service = container.roll_call_service

    def _fail(message: str, status: int):
        return jsonify({"success": False, "message": message}), status

    @app.errorhandler(ValidationError)
    def _validation_error(e: ValidationError):
        return _fail(str(e), 400)

    @app.route("/api/chamada/<class_id>/<day>", methods=["GET"], endpoint="roll_call_open")
    def roll_call_open(class_id: str, day: str):
        screen = service.open_screen(class_id, parse_iso_date(day))
        return jsonify({"success": True, **screen.to_dict()})

    @app.route("/api/chamada/<class_id>/<day>/marcacoes", methods=["PUT"], endpoint="roll_call_mark")
    def roll_call_mark(class_id: str, day: str):
        data = request.get_json(silent=True) or {}
        marks = service.set_mark(class_id, parse_iso_date(day), data.get("student_id", ""), data.get("status"))
        return jsonify({"success": True, "marks": {sid: (st.value if st else None) for sid, st in marks.items()}})

    @app.route("/api/chamada/<class_id>/<day>/rascunho", methods=["DELETE"], endpoint="roll_call_discard")
    def roll_call_discard(class_id: str, day: str):
        discarded = service.discard(class_id, parse_iso_date(day))
        return jsonify({"success": True, "discarded": discarded})

    @app.route("/api/chamada/<class_id>/<day>", methods=["POST"], endpoint="roll_call_submit")
    def roll_call_submit(class_id: str, day: str):
        result = service.submit(class_id, parse_iso_date(day))
        return jsonify(result.to_dict()), _SUBMIT_STATUS[result.outcome]

    @app.route("/api/chamada/<class_id>/<day>/registros", methods=["GET"], endpoint="roll_call_records")
    def roll_call_records(class_id: str, day: str):
        roll_date = parse_iso_date(day)
        try:
            marks = container.attendance_repo.get_marks(class_id, roll_date)
        except RemoteReadFailed:
            logger.warning("Could not read roll call %s %s", class_id, roll_date, exc_info=True)
            return _fail("Não foi possível carregar a chamada. Verifique a conexão.", 503)
        return jsonify({"success": True, "marks": [m.to_dict() for m in marks]})

    @app.route("/api/chamada/<class_id>/<day>/registros", methods=["DELETE"], endpoint="roll_call_delete")
    def roll_call_delete(class_id: str, day: str):
        roll_date = parse_iso_date(day)
        # a queued copy would bring the deleted roll call back on the next sync
        discarded = container.synchronizer.discard_pending(class_id, roll_date)
        try:
            deleted = container.attendance_repo.delete_batch(class_id, roll_date)
        except RemoteWriteFailed:
            logger.warning("Could not delete roll call %s %s", class_id, roll_date, exc_info=True)
            return _fail("Ocorreu um erro ao excluir a chamada.", 503)
        return jsonify(
            {"success": True, "deleted": deleted, "discarded_pending": discarded, "message": "Chamada excluída"}
        )

    @app.route("/api/turmas/<class_id>/historico", methods=["GET"], endpoint="roll_call_history")
    def roll_call_history(class_id: str):
        limit = request.args.get("limit", type=int) or DEFAULT_HISTORY_LIMIT
        try:
            rows = container.attendance_repo.get_history(class_id, limit=limit)
        except RemoteReadFailed:
            logger.warning("Could not read history for %s", class_id, exc_info=True)
            return _fail("Ocorreu um erro ao carregar os dados da chamada.", 503)
        return jsonify({"success": True, "rows": [r.to_dict() for r in rows]})
