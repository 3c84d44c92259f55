"""Swagger/OpenAPI configuration for the application."""
from flask_swagger_ui import get_swaggerui_blueprint

from classroll import __version__

# Swagger UI configuration
SWAGGER_URL = '/api/docs'
API_URL = '/api/swagger.json'

def get_swagger_blueprint():
    """Create and return swagger UI blueprint."""
    return get_swaggerui_blueprint(
        SWAGGER_URL,
        API_URL,
        config={
            'app_name': "ClassRoll API",
            'defaultModelsExpandDepth': -1,
            'docExpansion': 'list',
            'filter': True,
            'validatorUrl': None,
        }
    )

def _envelope(schema_ref: str = None, is_list: bool = False) -> dict:
    data = {"$ref": schema_ref} if schema_ref else {"type": "object"}
    if is_list:
        data = {"type": "array", "items": data}
    return {
        "description": "Success",
        "content": {"application/json": {"schema": {
            "type": "object",
            "properties": {
                "error": {"type": "boolean", "example": False},
                "message": {"type": "string"},
                "data": data
            }
        }}}
    }

def _operation(tag: str, summary: str, schema_ref: str = None, is_list: bool = False,
               body: dict = None, errors: tuple = (401,), secured: bool = True) -> dict:
    operation = {
        "tags": [tag],
        "summary": summary,
        "responses": {"200": _envelope(schema_ref, is_list)}
    }
    for code in errors:
        operation["responses"][str(code)] = {"$ref": "#/components/responses/Error"}
    if body:
        operation["requestBody"] = {
            "required": True,
            "content": {"application/json": {"schema": {"type": "object", "properties": body}}}
        }
    if secured:
        operation["security"] = [{"bearerAuth": []}]
    return operation

def generate_swagger_spec():
    """Generate OpenAPI/Swagger specification."""
    string = {"type": "string"}
    return {
        "openapi": "3.0.0",
        "info": {
            "title": "ClassRoll API",
            "description": "School attendance with time-boxed QR session codes, "
                           "role dashboards and activity suggestions",
            "version": __version__
        },
        "servers": [{"url": "http://127.0.0.1:5000", "description": "Development server"}],
        "components": {
            "securitySchemes": {
                "bearerAuth": {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"}
            },
            "responses": {
                "Error": {
                    "description": "Error envelope",
                    "content": {"application/json": {"schema": {
                        "type": "object",
                        "properties": {
                            "error": {"type": "boolean", "example": True},
                            "message": string,
                            "status_code": {"type": "integer"}
                        }
                    }}}
                }
            },
            "schemas": {
                "User": {
                    "type": "object",
                    "properties": {
                        "id": string,
                        "email": {"type": "string", "format": "email"},
                        "name": string,
                        "roll_number": string,
                        "role": {"type": "string", "enum": ["student", "teacher", "admin", "counselor"]}
                    }
                },
                "Session": {
                    "type": "object",
                    "properties": {
                        "id": string,
                        "class_id": string,
                        "teacher_id": string,
                        "session_date": {"type": "string", "format": "date"},
                        "start_time": string,
                        "end_time": string,
                        "status": {"type": "string", "enum": ["scheduled", "active", "closed"]},
                        "qr_code": {"type": "string", "nullable": True,
                                    "description": "Only returned to the session owner"},
                        "qr_expires_at": {"type": "string", "format": "date-time", "nullable": True},
                        "total_students": {"type": "integer"},
                        "present_count": {"type": "integer"}
                    }
                },
                "AttendanceRecord": {
                    "type": "object",
                    "properties": {
                        "id": string,
                        "session_id": string,
                        "student_id": string,
                        "is_present": {"type": "boolean"},
                        "method": {"type": "string", "enum": ["qr", "face", "bluetooth", "manual"]},
                        "marked_at": {"type": "string", "format": "date-time"}
                    }
                },
                "ActivitySuggestion": {
                    "type": "object",
                    "properties": {
                        "id": string,
                        "activity": {"type": "object"},
                        "suggested_for_date": {"type": "string", "format": "date"},
                        "free_period_start": string,
                        "free_period_end": string,
                        "completed": {"type": "boolean"}
                    }
                }
            }
        },
        "paths": {
            "/api/auth/register": {"post": _operation(
                "Auth", "Register a student or teacher", "#/components/schemas/User",
                body={"email": string, "password": string, "name": string, "role": string},
                errors=(400,), secured=False)},
            "/api/auth/login": {"post": _operation(
                "Auth", "Login", body={"email": string, "password": string}, secured=False)},
            "/api/auth/me": {"get": _operation("Auth", "Current user", "#/components/schemas/User")},
            "/api/sessions/": {"post": _operation(
                "Sessions", "Schedule a session", "#/components/schemas/Session",
                body={"class_id": string, "session_date": string, "start_time": string, "end_time": string},
                errors=(400, 401, 403, 404))},
            "/api/sessions/today": {"get": _operation(
                "Sessions", "Today's sessions for the current user", "#/components/schemas/Session", True)},
            "/api/sessions/{session_id}/start": {"post": _operation(
                "Sessions", "Start or restart a session; the previous code stops working at once",
                "#/components/schemas/Session", body={"ttl_minutes": {"type": "number"}},
                errors=(401, 403, 404))},
            "/api/sessions/{session_id}/stop": {"post": _operation(
                "Sessions", "Stop a session and clear its code", "#/components/schemas/Session",
                errors=(401, 403, 404))},
            "/api/sessions/{session_id}/qr": {"get": _operation(
                "Sessions", "QR image of the current code", errors=(401, 403, 404))},
            "/api/sessions/{session_id}/attendance": {"get": _operation(
                "Sessions", "Attendance records with stats", errors=(401, 403, 404))},
            "/api/sessions/{session_id}/attendance/{student_id}/override": {"post": _operation(
                "Sessions", "Owner-only manual presence override", "#/components/schemas/AttendanceRecord",
                body={"present": {"type": "boolean"}}, errors=(401, 403, 404))},
            "/api/sessions/{session_id}/attendance/export": {"get": _operation(
                "Sessions", "Download attendance as CSV", errors=(401, 403, 404))},
            "/api/attendance/redeem": {"post": _operation(
                "Attendance", "Mark yourself present with a session code",
                "#/components/schemas/AttendanceRecord",
                body={"code": string, "session_id": string,
                      "latitude": {"type": "number"}, "longitude": {"type": "number"}},
                errors=(400, 401, 403, 404, 409))},
            "/api/attendance/me": {"get": _operation(
                "Attendance", "Own attendance history", "#/components/schemas/AttendanceRecord", True)},
            "/api/activities/suggestions/today": {"get": _operation(
                "Activities", "Open suggestions for today", "#/components/schemas/ActivitySuggestion", True)},
            "/api/activities/suggestions/generate": {"post": _operation(
                "Activities", "Generate suggestions for today's free periods",
                "#/components/schemas/ActivitySuggestion", True)},
            "/api/dashboard/": {"get": _operation("Dashboard", "Role-specific dashboard")},
        }
    }
