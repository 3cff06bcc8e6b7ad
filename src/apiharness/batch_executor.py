from __future__ import annotations

import logging
import time
from typing import Any

from apiharness.assertions import FAIL, PASS, WARN

logger = logging.getLogger(__name__)


class BatchExecutor:
    def __init__(self, http_client, assertion_engine) -> None:
        self.http_client = http_client
        self.assertion_engine = assertion_engine

    def run_cases(self, cases: list) -> list:
        results: list[dict[str, Any]] = []
        for case in cases:
            results.append(self.run_case(case))
        return results

    def run_case(self, case: dict) -> dict[str, Any]:
        started = time.perf_counter()
        logs: list[dict[str, str]] = []
        try:
            result = self._run_steps(case, logs)
        except Exception as exc:
            logger.exception("case %s crashed", case.get("case_id"))
            _log(logs, "ERROR", f"Exception: {exc}")
            result = {
                "steps": [],
                "result": FAIL,
                "error_type": type(self).__name__ + "Error",
                "error_message": str(exc),
            }
        result.update(
            {
                "case_id": case.get("case_id"),
                "name": case.get("name"),
                "description": case.get("description", ""),
                "logs": logs,
                "elapsed_ms": int((time.perf_counter() - started) * 1000),
            }
        )
        return result

    def _run_steps(self, case: dict, logs: list[dict[str, str]]) -> dict[str, Any]:
        name = case.get("name") or case.get("case_id")
        logger.info("========== Starting %s ==========", name)
        _log(logs, "INFO", f"Test started: {name}")

        step_results: list[dict[str, Any]] = []
        verdicts: list[str] = []
        for step in case_steps(case):
            request_data = step.get("request", {})
            assertions = step.get("assertions", [])
            _log(logs, "INFO", f"{request_data.get('method', '')} request URL: {request_data.get('url', '')}")
            response_result = self.http_client.send_request(request_data)
            assertion_results: list[dict[str, Any]] = []
            if response_result.get("success") is False:
                verdicts.append(FAIL)
                _log(
                    logs,
                    "FAIL",
                    f"{response_result.get('error_type')}: {response_result.get('error_message')}",
                )
            else:
                _log(logs, "INFO", f"Response status: {response_result.get('status_code')}")
                assertion_results = self.assertion_engine.run_assertions(response_result, assertions)
                for item in assertion_results:
                    verdicts.append(item.get("result"))
                    _log(logs, item.get("result", FAIL), _describe(item))
            step_results.append(
                {
                    "name": step.get("name", ""),
                    "request": request_data,
                    "assertions": assertions,
                    "response": response_result,
                    "assertion_results": assertion_results,
                }
            )
            if response_result.get("success") is False:
                break

        verdict = overall_result(verdicts)
        _log(logs, verdict, f"TEST {_VERDICT_WORDS[verdict]}")
        logger.info("========== %s: %s ==========", name, verdict)
        return {"steps": step_results, "result": verdict}


def case_steps(case: dict) -> list[dict]:
    if "steps" in case:
        if not case["steps"]:
            raise ValueError(f"case {case.get('case_id')} has no steps")
        return list(case["steps"])
    return [{"name": case.get("name", ""), "request": case.get("request", {}), "assertions": case.get("assertions", [])}]


def overall_result(verdicts: list[str]) -> str:
    if any(verdict not in (PASS, WARN) for verdict in verdicts):
        return FAIL
    if WARN in verdicts:
        return WARN
    return PASS


_VERDICT_WORDS = {PASS: "PASSED", FAIL: "FAILED", WARN: "PASSED WITH WARNINGS"}

_LOG_LEVELS = {"INFO": logging.INFO, "PASS": logging.INFO, "WARN": logging.WARNING, "FAIL": logging.ERROR, "ERROR": logging.ERROR}


def _log(logs: list[dict[str, str]], level: str, message: str) -> None:
    logs.append({"level": level, "message": message})
    logger.log(_LOG_LEVELS.get(level, logging.INFO), message)


def _describe(item: dict[str, Any]) -> str:
    label = item.get("type")
    if item.get("path"):
        label = f"{label} {item['path']}"
    if item.get("result") == PASS:
        return f"{label} validation passed"
    return f"{label}: {item.get('message')}"
