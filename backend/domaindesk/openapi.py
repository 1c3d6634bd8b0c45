"""Deterministic OpenAPI document for the JSON API.

Scope: auth endpoints, the task collection with its per-screen lists and lifecycle
actions, and staff management. Schemas are minimal; the Task schema carries the
lifecycle graph as `x-transitions` taken from the runtime validator.
"""
from typing import Any, Dict, List

__all__ = ["build_openapi_spec"]

# Declarative registry for task lifecycle endpoints: (action, method, summary, roles)
TASK_ACTIONS: List[Dict[str, Any]] = [
    {"action": "assign", "method": "post", "summary": "Assign task to a staff member", "roles": ["admin"]},
    {"action": "progress", "method": "patch", "summary": "Update status / work notes", "roles": ["staff"]},
    {"action": "submit", "method": "post", "summary": "Submit completed task for review", "roles": ["staff"]},
    {"action": "approve", "method": "post", "summary": "Approve submitted task", "roles": ["admin"]},
    {"action": "reject", "method": "post", "summary": "Return submitted task with a reason", "roles": ["admin"]},
]

TASK_SCREENS: List[Dict[str, Any]] = [
    {"screen": "bucket", "summary": "Unassigned tasks", "roles": ["admin"]},
    {"screen": "overview", "summary": "Assigned tasks", "roles": ["admin"]},
    {"screen": "review", "summary": "Submitted tasks awaiting review", "roles": ["admin"]},
    {"screen": "approved", "summary": "Approved tasks", "roles": ["admin"]},
    {"screen": "mine", "summary": "My open tasks", "roles": ["staff"]},
]

TASK_SORT_FIELDS = "customer_name,status,created_at,updated_at,id"


def _caching_headers() -> Dict[str, Any]:
    return {
        "ETag": {"schema": {"type": "string"}},
        "Last-Modified": {"schema": {"type": "string"}},
    }


def _op(summary: str, roles: List[str], responses: Dict[str, Any], **extra) -> Dict[str, Any]:
    op = {"summary": summary, "x-required-roles": roles, "responses": responses}
    op.update(extra)
    return op


def _task_schema() -> Dict[str, Any]:
    from domaindesk.models.task import Task
    from domaindesk.services.tasks import TASK_FSM
    return {
        "type": "object",
        "properties": {
            "id": {"type": "integer"},
            "customer_name": {"type": "string"},
            "contact_number": {"type": "string"},
            "device_name": {"type": "string"},
            "problem_reported": {"type": "string"},
            "status": {"type": "string", "enum": list(Task.ALL_STATUSES)},
            "assigned_to": {"type": "integer", "nullable": True},
            "assigned_to_name": {"type": "string", "nullable": True},
            "staff_notes": {"type": "string", "nullable": True},
            "rejection_reason": {"type": "string", "nullable": True},
            "created_by": {"type": "integer"},
            "created_at": {"type": "string", "format": "date-time"},
            "updated_at": {"type": "string", "format": "date-time"},
        },
        "required": ["id", "customer_name", "contact_number", "device_name", "problem_reported", "status"],
        "x-transitions": {src: sorted(dst) for src, dst in sorted(TASK_FSM.graph.items())},
        "x-terminal-states": [s for s in Task.ALL_STATUSES if TASK_FSM.is_terminal(s)],
    }


def _task_paths() -> Dict[str, Any]:
    task_ref = {"$ref": "#/components/schemas/Task"}
    list_ok = {
        "description": "OK",
        "headers": _caching_headers(),
        "content": {"application/json": {"schema": {
            "type": "object",
            "properties": {
                "data": {"type": "array", "items": task_ref},
                "pagination": {"$ref": "#/components/schemas/Pagination"},
            },
        }}},
    }
    paths: Dict[str, Any] = {
        "/api/tasks": {
            "get": _op(
                "List tasks", ["admin"], {"200": list_ok, "304": {"description": "Not Modified"}},
                parameters=[
                    {"$ref": "#/components/parameters/LimitParam"},
                    {"$ref": "#/components/parameters/OffsetParam"},
                    {"$ref": "#/components/parameters/SortTasksParam"},
                    {"name": "status", "in": "query", "schema": {"type": "string"}},
                    {"name": "assigned_to", "in": "query", "schema": {"type": "integer"}},
                    {"name": "unassigned", "in": "query", "schema": {"type": "boolean"}},
                ],
            ),
            "post": _op("Create task (lands in the bucket)", ["admin"], {
                "201": {"description": "Created", "content": {"application/json": {"schema": task_ref}}},
                "400": {"$ref": "#/components/responses/BadRequest"},
            }),
        },
    }
    for screen in TASK_SCREENS:
        paths[f"/api/tasks/{screen['screen']}"] = {
            "get": _op(screen["summary"], screen["roles"], {"200": {"description": "OK"}}),
        }
    paths["/api/tasks/{task_id}"] = {
        "get": _op("Get task", ["admin", "staff"], {
            "200": {"description": "OK", "content": {"application/json": {"schema": task_ref}}},
            "404": {"$ref": "#/components/responses/NotFound"},
        }),
        "delete": _op("Delete unassigned task", ["admin"], {
            "204": {"description": "Deleted"},
            "400": {"$ref": "#/components/responses/BadRequest"},
        }),
    }
    for entry in TASK_ACTIONS:
        paths[f"/api/tasks/{{task_id}}/{entry['action']}"] = {
            entry["method"]: _op(entry["summary"], entry["roles"], {
                "200": {"description": "OK", "content": {"application/json": {"schema": task_ref}}},
                "400": {"$ref": "#/components/responses/BadRequest"},
                "403": {"description": "Forbidden"},
            }),
        }
    return paths


def _staff_paths() -> Dict[str, Any]:
    ok = {"200": {"description": "OK"}}
    return {
        "/api/staff": {
            "get": _op("List staff members", ["admin"], ok),
            "post": _op("Create staff member", ["admin"], {"201": {"description": "Created"}}),
        },
        "/api/staff/board": {"get": _op("Staff with their assigned tasks", ["admin"], ok)},
        "/api/staff/{user_id}/toggle": {"post": _op("Toggle active / disabled", ["admin"], ok)},
        "/api/staff/{user_id}/status": {"put": _op("Set status", ["admin"], ok)},
        "/api/staff/{user_id}": {"delete": _op("Remove staff role", ["admin"], {"204": {"description": "Removed"}})},
    }


def build_openapi_spec() -> Dict[str, Any]:
    components: Dict[str, Any] = {
        "schemas": {
            "Task": _task_schema(),
            "Profile": {
                "type": "object",
                "properties": {
                    "id": {"type": "integer"},
                    "email": {"type": "string"},
                    "full_name": {"type": "string", "nullable": True},
                    "display_name": {"type": "string"},
                    "status": {"type": "string", "enum": ["active", "disabled"]},
                },
                "required": ["id", "email", "status"],
            },
            "Pagination": {
                "type": "object",
                "properties": {
                    "total": {"type": "integer"},
                    "limit": {"type": "integer"},
                    "offset": {"type": "integer"},
                    "returned": {"type": "integer"},
                },
                "required": ["total", "limit", "offset", "returned"],
            },
            "Error": {
                "type": "object",
                "properties": {"error": {
                    "type": "object",
                    "properties": {"status": {"type": "integer"}, "title": {"type": "string"}, "detail": {"type": "string"}},
                }},
                "required": ["error"],
            },
        },
        "responses": {"NotFound": {"description": "Not Found"}, "BadRequest": {"description": "Bad Request"}},
        "securitySchemes": {"BearerAuth": {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"}},
        "parameters": {
            "LimitParam": {"name": "limit", "in": "query", "schema": {"type": "integer", "default": 50, "maximum": 200}},
            "OffsetParam": {"name": "offset", "in": "query", "schema": {"type": "integer", "default": 0}},
            "SortTasksParam": {
                "name": "sort", "in": "query", "schema": {"type": "string"},
                "description": f"Comma list of fields, prefix '-' for descending. Allowed: {TASK_SORT_FIELDS}",
            },
        },
    }

    paths: Dict[str, Any] = {
        "/api/auth/signup": {"post": {"summary": "Create account", "security": [], "responses": {"201": {"description": "Created"}}}},
        "/api/auth/login": {"post": {"summary": "Login", "security": [], "responses": {"200": {"description": "JWT issued"}}}},
        "/api/auth/logout": {"post": {"summary": "Logout", "responses": {"200": {"description": "Signed out"}}}},
        "/api/auth/session": {"get": {"summary": "Current session and gate state", "responses": {"200": {"description": "OK"}}}},
    }
    paths.update(_task_paths())
    paths.update(_staff_paths())

    # operationIds & tags
    tags = set()
    for path, ops in paths.items():
        tag = path.split("/")[2].capitalize()
        rid = path.strip("/").replace("/", "_").replace("{", "").replace("}", "")
        for method, od in ops.items():
            od["operationId"] = f"{method}_{rid}"
            od["tags"] = [tag]
        tags.add(tag)

    return {
        "openapi": "3.0.3",
        "info": {"title": "Domain Computers API", "version": "0.1.0"},
        "paths": paths,
        "components": components,
        "security": [{"BearerAuth": []}],
        "tags": [{"name": n, "description": f"{n} endpoints"} for n in sorted(tags)],
    }
