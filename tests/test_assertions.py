import pytest

from apiharness.assertions import AssertionEngine


USER_RESPONSE = {
    "success": True,
    "status_code": 200,
    "headers": {"Content-Type": "application/json; charset=utf-8"},
    "response_text": '{"data": {"id": 2, "email": "janet@reqres.in"}}',
    "response_json": {"data": {"id": 2, "email": "janet@reqres.in", "avatar": None}, "list": [{"id": 1}]},
    "elapsed_ms": 120,
}


def _run(assertion, response=USER_RESPONSE):
    return AssertionEngine().run_assertions(response, [assertion])[0]


def test_status_code_pass_fail():
    engine = AssertionEngine()
    result = engine.run_assertions({"status_code": 200}, [{"type": "status_code", "expected": 200}])
    assert result[0]["result"] == "PASS"

    result = engine.run_assertions({"status_code": 500}, [{"type": "status_code", "expected": 200}])
    assert result[0]["result"] == "FAIL"
    assert result[0]["actual"] == 500
    assert result[0]["message"] == "status_code 500 == 200 failed"


def test_status_code_in_and_between():
    assert _run({"type": "status_code", "operator": "in", "expected": [200, 204]})["result"] == "PASS"
    assert _run({"type": "status_code", "operator": "in", "expected": [201]})["result"] == "FAIL"
    assert _run({"type": "status_code", "operator": "between", "expected": "200-299"})["result"] == "PASS"


def test_warn_severity_downgrades_failure():
    result = _run({"type": "status_code", "expected": 400, "severity": "warn"})
    assert result["result"] == "WARN"
    passing = _run({"type": "status_code", "expected": 200, "severity": "warn"})
    assert passing["result"] == "PASS"


def test_jpath_equals_compares_string_forms():
    result = _run({"type": "jpath", "path": "data/id", "operator": "equals", "expected": 2})
    assert result["result"] == "PASS"
    assert result["actual"] == "2"
    assert _run({"type": "jpath", "path": "data/id", "expected": "2"})["result"] == "PASS"
    assert _run({"type": "jpath", "path": "list[0]/id", "operator": "!=", "expected": 2})["result"] == "PASS"


def test_jpath_not_null_and_exists():
    assert _run({"type": "jpath", "path": "data/email", "operator": "not_null"})["result"] == "PASS"
    assert _run({"type": "jpath", "path": "data/avatar", "operator": "not_null"})["result"] == "FAIL"
    assert _run({"type": "jpath", "path": "list[0]", "operator": "exists"})["result"] == "PASS"
    assert _run({"type": "jpath", "path": "data/missing", "operator": "not_exists"})["result"] == "PASS"
    assert _run({"type": "jpath", "path": "data/id", "operator": "not_exists"})["result"] == "FAIL"


def test_jpath_resolution_failure_fails_assertion():
    result = _run({"type": "jpath", "path": "list[3]/id", "operator": "equals", "expected": 1})
    assert result["result"] == "FAIL"
    assert "out of range" in result["message"]


def test_jpath_contains():
    assert _run({"type": "jpath", "path": "data/email", "operator": "contains", "expected": "@reqres"})["result"] == "PASS"


def test_jpath_without_json_body():
    result = _run({"type": "jpath", "path": "data/id", "expected": 2}, {"status_code": 204, "response_json": None})
    assert result["result"] == "FAIL"
    assert result["message"] == "response_json is None"


def test_json_path_equals_and_not_null():
    engine = AssertionEngine()
    response = {"response_json": {"data": {"id": 1, "name": "demo"}}}
    assertions = [
        {"type": "json_path", "path": "$.data.id", "operator": "equals", "expected": 1},
        {"type": "json_path", "path": "$.data.name", "operator": "not_null"},
    ]
    results = engine.run_assertions(response, assertions)
    assert results[0]["result"] == "PASS"
    assert results[1]["result"] == "PASS"


def test_json_path_missing_fail():
    engine = AssertionEngine()
    response = {"response_json": {"data": {}}}
    results = engine.run_assertions(
        response,
        [{"type": "json_path", "path": "$.data.missing", "operator": "equals", "expected": 1}],
    )
    assert results[0]["result"] == "FAIL"


def test_json_path_length_gt():
    assert _run({"type": "json_path", "path": "$.list", "operator": "length_gt", "expected": 0})["result"] == "PASS"
    assert _run({"type": "json_path", "path": "$.list", "operator": "length_gt", "expected": 1})["result"] == "FAIL"


def test_header_case_insensitive():
    result = _run({"type": "header", "header": "content-type", "operator": "contains", "expected": "application/json"})
    assert result["result"] == "PASS"
    assert _run({"type": "header", "header": "X-Missing", "operator": "exists"})["result"] == "FAIL"


def test_response_body_and_time():
    assert _run({"type": "response_body", "operator": "contains", "expected": "janet"})["result"] == "PASS"
    assert _run({"type": "response_body", "operator": "matches_regex", "expected": r'"id":\s*2'})["result"] == "PASS"
    assert _run({"type": "response_time", "expected": 500})["result"] == "PASS"
    assert _run({"type": "response_time", "operator": "<", "expected": 100})["result"] == "FAIL"


def test_unknown_type_and_operator():
    assert _run({"type": "schema"})["message"] == "unsupported assertion type: schema"
    result = _run({"type": "jpath", "path": "data/id", "operator": "~=", "expected": 2})
    assert result["result"] == "FAIL"
    assert result["message"] == "unsupported operator: ~="


def test_jpath_not_null_checks_the_node_not_its_text():
    response = {"response_json": {"data": {"nickname": "null", "tags": [], "blank": ""}}}
    assert _run({"type": "jpath", "path": "data/nickname", "operator": "not_null"}, response)["result"] == "PASS"
    assert _run({"type": "jpath", "path": "data/tags", "operator": "not_null"}, response)["result"] == "FAIL"
    assert _run({"type": "jpath", "path": "data/blank", "operator": "not_null"}, response)["result"] == "FAIL"


def test_json_path_exists_and_not_exists():
    assert _run({"type": "json_path", "path": "$.data.email", "operator": "exists"})["result"] == "PASS"
    missing = _run({"type": "json_path", "path": "$.data.phone", "operator": "exists"})
    assert missing["result"] == "FAIL"
    assert missing["message"] == "$.data.phone not found"
    assert _run({"type": "json_path", "path": "$.data.phone", "operator": "not_exists"})["result"] == "PASS"
    present = _run({"type": "json_path", "path": "$.data.id", "operator": "not_exists"})
    assert present["result"] == "FAIL"
    assert present["actual"] == 2


def test_header_equals_and_not_exists():
    exact = {"type": "header", "header": "CONTENT-TYPE", "operator": "==", "expected": "application/json; charset=utf-8"}
    assert _run(exact)["result"] == "PASS"
    result = _run({**exact, "expected": "application/json"})
    assert result["result"] == "FAIL"
    assert result["message"] == "header CONTENT-TYPE application/json; charset=utf-8 != application/json"
    assert _run({"type": "header", "header": "X-Missing", "operator": "not_exists"})["result"] == "PASS"
    assert _run({"type": "header", "header": "content-type", "operator": "not_exists"})["result"] == "FAIL"


def test_response_body_not_contains():
    assert _run({"type": "response_body", "operator": "not_contains", "expected": "error"})["result"] == "PASS"
    result = _run({"type": "response_body", "operator": "not_contains", "expected": "janet"})
    assert result["result"] == "FAIL"
    assert result["message"] == "response body contains expected text"


def test_response_time_between():
    result = _run({"type": "response_time", "operator": "between", "expected": "100~200"})
    assert result["result"] == "PASS"
    assert result["expected"] == "100~200"
    slow = _run({"type": "response_time", "operator": "between", "expected": "0-100"})
    assert slow["result"] == "FAIL"
    assert slow["message"] == "response_time 120 not in range 0~100"
    assert _run({"type": "response_time", "operator": "between", "expected": "fast"})["message"] == "expected range required"


@pytest.mark.parametrize(
    "operator, passing, failing",
    [("!=", 500, 200), (">", 199, 200), (">=", 200, 201), ("<", 300, 200), ("<=", 200, 199)],
)
def test_status_code_comparison_operators(operator, passing, failing):
    assert _run({"type": "status_code", "operator": operator, "expected": passing})["result"] == "PASS"
    result = _run({"type": "status_code", "operator": operator, "expected": failing})
    assert result["result"] == "FAIL"
    assert result["message"] == f"status_code 200 {operator} {failing} failed"
