from __future__ import annotations


def build_summary(cases: list[dict]) -> dict:
    total = len(cases)
    passed = sum(1 for case in cases if case.get("result") == "PASS")
    warned = sum(1 for case in cases if case.get("result") == "WARN")
    failed = total - passed - warned
    pass_rate = round((passed + warned) / total * 100, 2) if total else 0.0
    return {
        "total": total,
        "pass": passed,
        "fail": failed,
        "warn": warned,
        "pass_rate": pass_rate,
    }
