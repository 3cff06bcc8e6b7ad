import threading

from apiharness.batch_thread_executor import BatchThreadExecutor


class _HttpClient:
    def send_request(self, request):
        return {"success": True, "status_code": 200, "url": request.get("url")}


class _AssertionEngine:
    def run_assertions(self, _response, _assertions):
        return [{"type": "status_code", "result": "PASS"}]


def test_batch_thread_executor_run_cases():
    executor = BatchThreadExecutor(_HttpClient(), _AssertionEngine(), max_workers=2)
    cases = [
        {"case_id": "1", "name": "a", "request": {}, "assertions": []},
        {"case_id": "2", "name": "b", "request": {}, "assertions": []},
    ]
    results = executor.run_cases(cases)
    assert len(results) == 2
    assert all(item["result"] == "PASS" for item in results)


def test_results_keep_input_order_and_report_progress():
    progress = []
    lock = threading.Lock()

    def on_progress(completed, total):
        with lock:
            progress.append((completed, total))

    executor = BatchThreadExecutor(_HttpClient(), _AssertionEngine(), max_workers=4, on_progress=on_progress)
    cases = [{"case_id": str(index), "request": {"url": f"http://x/{index}"}} for index in range(10)]
    results = executor.run_cases(cases)
    assert [item["case_id"] for item in results] == [str(index) for index in range(10)]
    assert sorted(progress) == [(count, 10) for count in range(1, 11)]


def test_cancel_skips_pending_cases():
    executor = BatchThreadExecutor(_HttpClient(), _AssertionEngine(), max_workers=1)

    def cancel_after_first(completed, _total):
        if completed == 1:
            executor.cancel()

    executor.on_progress = cancel_after_first
    results = executor.run_cases([{"case_id": str(index), "request": {}} for index in range(5)])
    assert executor.canceled
    assert [item["case_id"] for item in results] == ["0"]


def test_crashing_case_reports_thread_executor_error():
    class _Boom:
        def send_request(self, _request):
            raise RuntimeError("boom")

    results = BatchThreadExecutor(_Boom(), _AssertionEngine()).run_cases([{"case_id": "1", "request": {}}])
    assert results[0]["result"] == "FAIL"
    assert results[0]["error_type"] == "BatchThreadExecutorError"


def test_failing_progress_callback_does_not_drop_results():
    def on_progress(_completed, _total):
        raise RuntimeError("ui gone")

    executor = BatchThreadExecutor(_HttpClient(), _AssertionEngine(), max_workers=2, on_progress=on_progress)
    results = executor.run_cases([{"case_id": str(index), "request": {}} for index in range(4)])
    assert [item["case_id"] for item in results] == ["0", "1", "2", "3"]
    assert all(item["result"] == "PASS" for item in results)
