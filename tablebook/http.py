from flask import jsonify
from werkzeug.exceptions import HTTPException


class ApiError(Exception):
    status = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: str | list | None = None, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details
        if code:
            self.code = code


class BadRequest(ApiError):
    status = 400
    code = "BAD_REQUEST"


class Conflict(ApiError):
    # Clients of the booking API have always seen a taken slot as a 400.
    status = 400
    code = "SLOT_TAKEN"


class Unauthorized(ApiError):
    status = 401
    code = "UNAUTHORIZED"


class Forbidden(ApiError):
    status = 403
    code = "FORBIDDEN"


class NotFound(ApiError):
    status = 404
    code = "NOT_FOUND"


class ValidationFailed(ApiError):
    status = 422
    code = "VALIDATION_ERROR"


def jerror(status: int, code: str, message: str, details: str | list | None = None):
    payload = {"status": "error", "code": code, "message": message}
    if details:
        payload["details"] = details
    return jsonify(payload), status


def ok(message: str, status: int = 200, **payload):
    return jsonify(status="success", message=message, **payload), status


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(e: ApiError):
        return jerror(e.status, e.code, e.message, e.details)

    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        if e.code is not None and e.code < 400:
            return e
        code = (e.name or "error").upper().replace(" ", "_")
        return jerror(e.code or 500, code, e.description or e.name)
