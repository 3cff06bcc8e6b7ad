"""Test suites: the built-in users-resource suite and JSON case files.

A case is a plain dict::

    {
        "case_id": "get-user",
        "name": "GET API Test - Get User By ID",
        "request": {"method": "GET", "url": "/api/users/2"},
        "assertions": [{"type": "status_code", "expected": 200}],
    }

or, for multi-request scenarios, carries a ``steps`` list of
``{"name", "request", "assertions"}`` dicts instead of ``request`` and
``assertions``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from apiharness.config import Settings
from apiharness.http_client import RestClient

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


class SuiteError(Exception):
    pass


def _status(expected: Any, severity: str = "error", operator: str = "==") -> dict:
    return {"type": "status_code", "operator": operator, "expected": expected, "severity": severity}


def _jpath(path: str, operator: str = "equals", expected: Any = None) -> dict:
    return {"type": "jpath", "path": path, "operator": operator, "expected": expected}


def build_client(settings: Settings) -> RestClient:
    return RestClient(settings.base_url, {**JSON_HEADERS, **settings.api_headers}, settings.timeout)


def build_user_suite(settings: Settings) -> dict:
    """CRUD scenarios against a reqres-style ``users`` resource.

    Request URLs are relative to ``settings.base_url``; run the cases through
    the client from ``build_client``.
    """
    url = settings.resource_path.strip("/")
    user = {"name": "morpheus", "job": "leader"}
    updated_user = {"name": "morpheus", "job": "zion resident"}

    def request(method: str, target: str, body: Any = None) -> dict:
        data = {"method": method, "url": target}
        if body is not None:
            data["body"] = body
        return data

    cases = [
        {
            "case_id": "get-user-by-id",
            "name": "GET API Test - Get User By ID",
            "description": "Get user with ID 2",
            "request": request("GET", f"{url}/2"),
            "assertions": [
                _status(200),
                _jpath("data/id", expected=2),
                _jpath("data/email", "not_null"),
                _jpath("data/first_name", "not_null"),
            ],
        },
        {
            "case_id": "get-all-users",
            "name": "GET API Test - Get All Users",
            "description": "Get all users",
            "request": request("GET", url),
            "assertions": [
                _status(200),
                _jpath("data[0]/id", "exists"),
                {"type": "json_path", "path": "$.data", "operator": "length_gt", "expected": 0},
            ],
        },
        {
            "case_id": "get-non-existent-user",
            "name": "GET API Test - Non-Existent User (Negative)",
            "description": "Get non-existent user",
            "request": request("GET", f"{url}/999"),
            "assertions": [_status(404)],
        },
        {
            "case_id": "create-user",
            "name": "POST API Test - Create User",
            "description": "Create new user",
            "request": request("POST", url, user),
            "assertions": [
                _status(201),
                _jpath("name", expected=user["name"]),
                _jpath("job", expected=user["job"]),
                _jpath("id", "not_null"),
                _jpath("createdAt", "not_null"),
            ],
        },
        {
            "case_id": "create-user-invalid",
            "name": "POST API Test - Invalid Data (Negative)",
            "description": "Create user with an empty name; mock APIs may accept it",
            "request": request("POST", url, {"name": "", "job": "leader"}),
            "assertions": [_status(400, "warn")],
        },
        {
            "case_id": "update-user",
            "name": "PUT API Test - Update User",
            "description": "Update user with ID 2",
            "request": request("PUT", f"{url}/2", updated_user),
            "assertions": [
                _status(200),
                _jpath("name", expected=updated_user["name"]),
                _jpath("job", expected=updated_user["job"]),
                _jpath("updatedAt", "not_null"),
            ],
        },
        {
            "case_id": "update-user-invalid",
            "name": "PUT API Test - Invalid Data (Negative)",
            "description": "Update user with an empty name; mock APIs may accept it",
            "request": request("PUT", f"{url}/2", {"name": "", "job": ""}),
            "assertions": [_status(400, "warn")],
        },
        {
            "case_id": "update-non-existent-user",
            "name": "PUT API Test - Non-Existent User (Negative)",
            "description": "Update user 99999",
            "request": request("PUT", f"{url}/99999", updated_user),
            "assertions": [_status(404, "warn")],
        },
        {
            "case_id": "delete-user",
            "name": "DELETE API Test - Delete User",
            "description": "Delete user with ID 2",
            "request": request("DELETE", f"{url}/2"),
            "assertions": [_status([200, 204], operator="in")],
        },
        {
            "case_id": "delete-non-existent-user",
            "name": "DELETE API Test - Non-Existent User (Negative)",
            "description": "Delete user 99999",
            "request": request("DELETE", f"{url}/99999"),
            "assertions": [_status(404, "warn")],
        },
        {
            "case_id": "delete-and-verify",
            "name": "DELETE API Test - Delete and Verify (E2E)",
            "description": "Delete user 3, then confirm it is gone",
            "steps": [
                {
                    "name": "Step 1: DELETE user",
                    "request": request("DELETE", f"{url}/3"),
                    "assertions": [_status([200, 204], operator="in")],
                },
                {
                    "name": "Step 2: GET deleted user",
                    "request": request("GET", f"{url}/3"),
                    "assertions": [_status(404, "warn")],
                },
            ],
        },
    ]
    return {"suite_name": "users", "cases": cases}


def load_cases(path: str | Path) -> dict:
    file_path = Path(path)
    try:
        with file_path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except OSError as exc:
        raise SuiteError(f"cannot read case file {file_path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise SuiteError(f"invalid JSON in case file {file_path}: {exc}") from exc

    if isinstance(data, list):
        data = {"suite_name": file_path.stem, "cases": data}
    if not isinstance(data, dict) or not isinstance(data.get("cases"), list):
        raise SuiteError(f"case file {file_path} must hold a list of cases or an object with a 'cases' list")

    for position, case in enumerate(data["cases"], start=1):
        if not isinstance(case, dict):
            raise SuiteError(f"case #{position} in {file_path} is not an object")
        if "steps" in case:
            if not isinstance(case["steps"], list) or not case["steps"]:
                raise SuiteError(f"case #{position} in {file_path} needs a non-empty 'steps' list")
        elif "request" not in case:
            raise SuiteError(f"case #{position} in {file_path} has neither 'request' nor 'steps'")
        case.setdefault("case_id", str(position))

    data.setdefault("suite_name", file_path.stem)
    logger.info("Loaded %d cases from %s", len(data["cases"]), file_path)
    return data

