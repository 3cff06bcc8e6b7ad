from __future__ import annotations

import logging
import re
from typing import Any, Callable

from jsonpath_ng import parse

from apiharness import jpath

logger = logging.getLogger(__name__)

PASS = "PASS"
FAIL = "FAIL"
WARN = "WARN"


class AssertionEngine:
    def __init__(self) -> None:
        self._handlers: dict[str, Callable[[dict, dict], dict[str, Any]]] = {
            "status_code": self._run_status_code,
            "jpath": self._run_jpath,
            "json_path": self._run_json_path,
            "header": self._run_header,
            "response_body": self._run_response_body,
            "response_time": self._run_response_time,
        }

    def run_assertions(self, response_result: dict, assertions: list) -> list:
        return [self._run_single(response_result, assertion) for assertion in assertions]

    def _run_single(self, response_result: dict, assertion: dict) -> dict[str, Any]:
        assertion_type = assertion.get("type")
        handler = self._handlers.get(assertion_type)
        if handler is None:
            return self._build_result(
                assertion_type, False, assertion.get("expected"), None,
                f"unsupported assertion type: {assertion_type}", assertion,
            )
        try:
            return handler(response_result, assertion)
        except Exception as exc:
            logger.exception("assertion %s raised", assertion_type)
            return self._build_result(
                assertion_type, False, assertion.get("expected"), None,
                f"exception: {exc}", assertion,
            )

    def _run_status_code(self, response_result: dict, assertion: dict) -> dict[str, Any]:
        operator = assertion.get("operator") or "=="
        expected = assertion.get("expected")
        actual = response_result.get("status_code")
        if actual is None:
            return self._build_result("status_code", False, expected, None, "status_code missing", assertion)
        if operator == "in":
            codes = [self._to_number(code) for code in expected or []]
            passed = actual in codes
            message = "" if passed else f"status_code {actual} not in {expected}"
            return self._build_result("status_code", passed, expected, actual, message, assertion)
        return self._compare("status_code", actual, operator, expected, assertion)

    def _run_response_time(self, response_result: dict, assertion: dict) -> dict[str, Any]:
        operator = assertion.get("operator") or "<"
        expected = assertion.get("expected")
        actual = response_result.get("elapsed_ms")
        if actual is None:
            return self._build_result("response_time", False, expected, None, "elapsed_ms missing", assertion)
        return self._compare("response_time", actual, operator, expected, assertion)

    def _compare(
        self, kind: str, actual: float, operator: str, expected_raw: Any, assertion: dict
    ) -> dict[str, Any]:
        if operator == "between":
            bounds = self._parse_range(expected_raw)
            if bounds is None:
                return self._build_result(kind, False, expected_raw, actual, "expected range required", assertion)
            lower, upper = bounds
            passed = lower <= actual <= upper
            message = "" if passed else f"{kind} {_fmt(actual)} not in range {_fmt(lower)}~{_fmt(upper)}"
            return self._build_result(kind, passed, f"{_fmt(lower)}~{_fmt(upper)}", actual, message, assertion)
        expected = self._to_number(expected_raw)
        if expected is None:
            return self._build_result(kind, False, expected_raw, actual, "expected number required", assertion)
        compare = _NUMERIC_OPERATORS.get(operator)
        if compare is None:
            return self._build_result(kind, False, expected, actual, f"unsupported operator: {operator}", assertion)
        passed = compare(actual, expected)
        message = "" if passed else f"{kind} {_fmt(actual)} {operator} {_fmt(expected)} failed"
        return self._build_result(kind, passed, expected, actual, message, assertion)

    def _run_jpath(self, response_result: dict, assertion: dict) -> dict[str, Any]:
        operator = assertion.get("operator") or "equals"
        path = str(assertion.get("path") or "")
        expected = assertion.get("expected")
        document = response_result.get("response_json")
        if document is None:
            return self._build_result("jpath", False, expected, None, "response_json is None", assertion)

        try:
            value = jpath.resolve_value(document, path)
        except jpath.JPathError as exc:
            if operator == "not_exists":
                return self._build_result("jpath", True, "not_exists", None, "", assertion)
            return self._build_result("jpath", False, expected, None, str(exc), assertion)

        actual = jpath.stringify(value)
        if operator == "exists":
            return self._build_result("jpath", True, "exists", actual, "", assertion)
        if operator == "not_exists":
            return self._build_result("jpath", False, "not_exists", actual, f"{path} should not exist", assertion)
        if operator == "not_null":
            passed = value not in (None, "", [], {})
            message = "" if passed else f"{path} is null or empty"
            return self._build_result("jpath", passed, "not_null", actual, message, assertion)

        wanted = jpath.stringify(expected)
        if operator in {"==", "equals"}:
            passed = actual == wanted
            message = "" if passed else f"{path} {actual} != {wanted}"
        elif operator == "!=":
            passed = actual != wanted
            message = "" if passed else f"{path} {actual} == {wanted}"
        elif operator == "contains":
            passed = wanted in actual
            message = "" if passed else f"{path} {actual} does not contain {wanted}"
        else:
            return self._build_result("jpath", False, expected, actual, f"unsupported operator: {operator}", assertion)
        return self._build_result("jpath", passed, wanted, actual, message, assertion)

    def _run_json_path(self, response_result: dict, assertion: dict) -> dict[str, Any]:
        operator = assertion.get("operator") or "equals"
        path = assertion.get("path")
        expected = assertion.get("expected")
        json_data = response_result.get("response_json")
        if json_data is None:
            return self._build_result("json_path", False, expected, None, "response_json is None", assertion)
        try:
            matches = [match.value for match in parse(path).find(json_data)]
        except Exception as exc:
            return self._build_result("json_path", False, expected, None, f"json_path error: {exc}", assertion)

        if operator == "not_exists":
            passed = not matches
            message = "" if passed else f"{path} should not exist"
            return self._build_result("json_path", passed, "not_exists", matches[0] if matches else None, message, assertion)
        if not matches:
            return self._build_result("json_path", False, expected, None, f"{path} not found", assertion)

        actual = matches[0] if len(matches) == 1 else matches
        if operator == "exists":
            return self._build_result("json_path", True, "exists", actual, "", assertion)
        if operator == "not_null":
            passed = any(value not in (None, "", [], {}) for value in matches)
            message = "" if passed else f"{path} is null or empty"
            return self._build_result("json_path", passed, "not_null", actual, message, assertion)
        if operator in {"==", "equals"}:
            passed = actual == expected
            message = "" if passed else f"{path} {actual} != {expected}"
            return self._build_result("json_path", passed, expected, actual, message, assertion)
        if operator == "length_gt":
            minimum = self._to_number(expected) or 0
            if not isinstance(actual, (list, str, dict)):
                return self._build_result("json_path", False, expected, actual, f"{path} has no length", assertion)
            passed = len(actual) > minimum
            message = "" if passed else f"{path} length {len(actual)} <= {_fmt(minimum)}"
            return self._build_result("json_path", passed, expected, len(actual), message, assertion)
        return self._build_result("json_path", False, expected, actual, f"unsupported operator: {operator}", assertion)

    def _run_header(self, response_result: dict, assertion: dict) -> dict[str, Any]:
        operator = assertion.get("operator") or "=="
        expected = str(assertion.get("expected") or "")
        header_name = str(assertion.get("header") or "")
        headers = {str(name).lower(): value for name, value in (response_result.get("headers") or {}).items()}
        actual = str(headers.get(header_name.lower(), ""))
        if operator == "exists":
            passed = bool(actual)
            message = "" if passed else f"header {header_name} not found"
        elif operator == "not_exists":
            passed = not actual
            message = "" if passed else f"header {header_name} should not exist"
        elif operator == "contains":
            passed = expected.lower() in actual.lower()
            message = "" if passed else f"header {header_name} missing expected content"
        elif operator == "==":
            passed = actual == expected
            message = "" if passed else f"header {header_name} {actual} != {expected}"
        else:
            return self._build_result("header", False, expected, actual, f"unsupported operator: {operator}", assertion)
        return self._build_result("header", passed, expected, actual, message, assertion)

    def _run_response_body(self, response_result: dict, assertion: dict) -> dict[str, Any]:
        operator = assertion.get("operator") or "contains"
        expected = str(assertion.get("expected") or "")
        text = response_result.get("response_text") or ""
        if operator == "contains":
            passed = expected in text
            message = "" if passed else "response body does not contain expected text"
        elif operator == "not_contains":
            passed = expected not in text
            message = "" if passed else "response body contains expected text"
        elif operator == "matches_regex":
            try:
                passed = re.search(expected, text) is not None
            except re.error as exc:
                return self._build_result("response_body", False, expected, text, f"regex error: {exc}", assertion)
            message = "" if passed else "regex not matched"
        else:
            return self._build_result("response_body", False, expected, text, f"unsupported operator: {operator}", assertion)
        return self._build_result("response_body", passed, expected, text, message, assertion)

    def _build_result(
        self,
        assertion_type: str | None,
        passed: bool,
        expected: Any,
        actual: Any,
        message: str,
        assertion: dict,
    ) -> dict[str, Any]:
        severity = assertion.get("severity") or "error"
        if passed:
            result = PASS
        else:
            result = WARN if severity == "warn" else FAIL
        return {
            "type": assertion_type,
            "result": result,
            "expected": expected,
            "actual": actual,
            "message": message,
            "operator": assertion.get("operator"),
            "path": assertion.get("path"),
            "header": assertion.get("header"),
            "severity": severity,
        }

    def _to_number(self, value: Any) -> float | None:
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value.strip())
            except ValueError:
                return None
        return None

    def _parse_range(self, value: Any) -> tuple[float, float] | None:
        parts = re.split(r"\s*[~\-]\s*", str(value or "").strip())
        if len(parts) != 2:
            return None
        lower = self._to_number(parts[0])
        upper = self._to_number(parts[1])
        if lower is None or upper is None:
            return None
        return (lower, upper) if lower <= upper else (upper, lower)


_NUMERIC_OPERATORS: dict[str, Callable[[float, float], bool]] = {
    "==": lambda a, b: a == b,
    "!=": lambda a, b: a != b,
    ">": lambda a, b: a > b,
    "<": lambda a, b: a < b,
    ">=": lambda a, b: a >= b,
    "<=": lambda a, b: a <= b,
}


def _fmt(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
