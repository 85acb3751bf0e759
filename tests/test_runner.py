import threading
import unittest
from datetime import timedelta
from unittest.mock import Mock, patch

import requests

from urlprobe.checks.results import CheckResult
from urlprobe.registry import config_from_urls
from urlprobe.runner import exit_code, loop_forever, run_once, summarize


class StopLoop(Exception):
    pass


def fake_server(statuses: dict[str, int], unreachable: set[str] = frozenset()):
    def get(url, timeout):
        if url in unreachable:
            raise requests.ConnectionError(f"Failed to establish a new connection: {url}")
        return Mock(status_code=statuses[url])

    return get


class RunnerTests(unittest.TestCase):
    def test_end_to_end_ok_and_broken(self) -> None:
        cfg = config_from_urls(["http://ok.test/", "http://broken.test/"])
        server = fake_server({"http://ok.test/": 200, "http://broken.test/": 500})

        with patch("urlprobe.checks.http_check.requests.get", side_effect=server):
            results = run_once(cfg)

        self.assertEqual(
            [{k: r.to_dict()[k] for k in ("url", "passed", "status")} for r in results],
            [
                {"url": "http://ok.test/", "passed": True, "status": 200},
                {"url": "http://broken.test/", "passed": False, "status": 500},
            ],
        )

    def test_one_result_per_url_and_404_recorded(self) -> None:
        urls = ["http://a.test/", "http://b.test/", "http://a.test/"]
        cfg = config_from_urls(urls)
        server = fake_server({"http://a.test/": 200, "http://b.test/": 404})

        with patch("urlprobe.checks.http_check.requests.get", side_effect=server):
            results = run_once(cfg)

        self.assertEqual([r.url for r in results], urls)
        self.assertFalse(results[1].passed)
        self.assertEqual(results[1].status, 404)
        self.assertEqual(results[1].error_kind, "check_failed")

    def test_unreachable_url_does_not_abort_others(self) -> None:
        cfg = config_from_urls(["http://down.test/", "http://ok.test/", "http://broken.test/"])
        server = fake_server(
            {"http://ok.test/": 200, "http://broken.test/": 503},
            unreachable={"http://down.test/"},
        )

        with patch("urlprobe.checks.http_check.requests.get", side_effect=server) as mock_get:
            results = run_once(cfg)

        self.assertEqual(mock_get.call_count, 3)
        self.assertEqual(results[0].error_kind, "network_error")
        self.assertIsNone(results[0].status)
        self.assertTrue(results[1].passed)
        self.assertEqual(results[2].status, 503)

    def test_repeated_runs_are_identical(self) -> None:
        cfg = config_from_urls(["http://ok.test/", "http://broken.test/", "http://down.test/"])
        server = fake_server(
            {"http://ok.test/": 200, "http://broken.test/": 500},
            unreachable={"http://down.test/"},
        )

        with patch("urlprobe.checks.http_check.requests.get", side_effect=server):
            first = run_once(cfg)
            second = run_once(cfg)

        self.assertEqual(first, second)

    def test_parallel_results_keep_input_order(self) -> None:
        urls = [f"http://svc{i}.test/" for i in range(8)]
        cfg = config_from_urls(urls, concurrency=4)
        server = fake_server({u: 200 if i % 2 else 500 for i, u in enumerate(urls)})

        with patch("urlprobe.checks.http_check.requests.get", side_effect=server):
            results = run_once(cfg)

        self.assertEqual([r.url for r in results], urls)
        self.assertEqual([r.passed for r in results], [i % 2 == 1 for i in range(8)])

    def test_total_timeout_records_outstanding_probes(self) -> None:
        release = threading.Event()
        self.addCleanup(release.set)

        def probe(url, timeout_s, checkers, connect_timeout_s):
            if url == "http://slow.test/":
                release.wait(5)
            return CheckResult(url=url, passed=True, status=200)

        cfg = config_from_urls(
            ["http://slow.test/", "http://ok.test/"], concurrency=2, total_timeout_s=0.2
        )
        with patch("urlprobe.runner.run_http", side_effect=probe):
            results = run_once(cfg)

        self.assertFalse(results[0].passed)
        self.assertEqual(results[0].error_kind, "network_error")
        self.assertIn("total timeout", results[0].error)
        self.assertTrue(results[1].passed)

    def test_runner_passes_target_settings_to_probe(self) -> None:
        cfg = config_from_urls(
            [{"url": "http://api.test/", "timeout_s": 2, "connect_timeout_s": 0.5}]
        )
        with patch(
            "urlprobe.runner.run_http",
            return_value=CheckResult(url="http://api.test/", passed=True, status=200),
        ) as run_http_mock:
            run_once(cfg)

        args, kwargs = run_http_mock.call_args
        self.assertEqual(args, ("http://api.test/",))
        self.assertEqual(kwargs["timeout_s"], 2)
        self.assertEqual(kwargs["connect_timeout_s"], 0.5)

    def test_summary_and_exit_code(self) -> None:
        results = [
            CheckResult(url="http://ok.test/", passed=True, status=200),
            CheckResult(
                url="http://broken.test/", passed=False, status=500, error_kind="check_failed"
            ),
            CheckResult(url="http://down.test/", passed=False, error_kind="network_error"),
        ]

        summary = summarize(results)
        self.assertEqual(summary["total"], 3)
        self.assertEqual(summary["passed"], 1)
        self.assertEqual(summary["failed"], 2)
        self.assertEqual(summary["check_failures"], 1)
        self.assertEqual(summary["network_errors"], 1)
        self.assertEqual(summary["failed_urls"], ["http://broken.test/", "http://down.test/"])
        self.assertEqual(exit_code(results), 2)
        self.assertEqual(exit_code(results[:1]), 0)

    def test_overlong_host_label_does_not_abort_the_run(self) -> None:
        bad = "http://" + "a" * 64 + ".test/"
        cfg = config_from_urls([bad, "http://127.0.0.1:1/"], defaults={"timeout_s": 2})

        results = run_once(cfg)

        self.assertEqual([r.url for r in results], [bad, "http://127.0.0.1:1/"])
        self.assertEqual([r.error_kind for r in results], ["network_error", "network_error"])
        self.assertEqual([r.status for r in results], [None, None])

    def test_unexpected_error_is_recorded_for_that_url_only(self) -> None:
        def probe(url, timeout_s, checkers, connect_timeout_s):
            if url == "http://boom.test/":
                raise RuntimeError("checker blew up")
            return CheckResult(url=url, passed=True, status=200)

        cfg = config_from_urls(["http://boom.test/", "http://ok.test/"])
        with patch("urlprobe.runner.run_http", side_effect=probe), self.assertLogs(
            "urlprobe.runner", level="ERROR"
        ):
            results = run_once(cfg)

        self.assertFalse(results[0].passed)
        self.assertEqual(results[0].error_kind, "check_failed")
        self.assertIn("checker blew up", results[0].error)
        self.assertTrue(results[1].passed)

    def test_latency_failures_compare_equal_across_runs(self) -> None:
        cfg = config_from_urls([{"url": "http://slow.test/", "max_latency_ms": 100}])
        responses = [
            Mock(status_code=200, elapsed=timedelta(milliseconds=150)),
            Mock(status_code=200, elapsed=timedelta(milliseconds=420)),
        ]

        with patch("urlprobe.checks.http_check.requests.get", side_effect=responses):
            first = run_once(cfg)
            second = run_once(cfg)

        self.assertFalse(first[0].passed)
        self.assertEqual(first, second)

    def test_loop_forever_reports_each_iteration(self) -> None:
        cfg = config_from_urls(["http://ok.test/", "http://broken.test/"])
        server = fake_server({"http://ok.test/": 200, "http://broken.test/": 500})
        batches = []

        with patch(
            "urlprobe.checks.http_check.requests.get", side_effect=server
        ), patch("urlprobe.runner.time.sleep", side_effect=[None, StopLoop()]) as sleep_mock:
            with self.assertRaises(StopLoop):
                loop_forever(cfg, interval_s=30, on_results=batches.append)

        self.assertEqual(sleep_mock.call_count, 2)
        self.assertEqual(len(batches), 2)
        for batch in batches:
            self.assertEqual([r.passed for r in batch], [True, False])
        self.assertTrue(all(0 <= call.args[0] <= 30 for call in sleep_mock.call_args_list))

    def test_exit_code_is_capped(self) -> None:
        results = [CheckResult(url=f"http://x{i}.test/", passed=False) for i in range(300)]
        self.assertEqual(exit_code(results), 255)


if __name__ == "__main__":
    unittest.main()
