import sys
import unittest
from pathlib import Path

import httpx

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from resume_enricher.ai.errors import (  # noqa: E402
    EnvelopeMalformed,
    ThrottledExhausted,
    UpstreamCallFailed,
)
from resume_enricher.ai.retry import execute, retry_decision  # noqa: E402
from resume_enricher.ai.throttle import TokenBucket  # noqa: E402

URL = "https://model.example.test/v1/models/m:generateContent"


def _status_error(status_code: int) -> httpx.HTTPStatusError:
    request = httpx.Request("POST", URL)
    response = httpx.Response(status_code, request=request)
    return httpx.HTTPStatusError(f"HTTP {status_code}", request=request, response=response)


def _ok() -> httpx.Response:
    return httpx.Response(200, json={"ok": True}, request=httpx.Request("POST", URL))


class ScriptedRequest:
    """Zero-argument request function replaying a list of outcomes."""

    def __init__(self, outcomes):
        self._outcomes = list(outcomes)
        self.calls = 0

    async def __call__(self) -> httpx.Response:
        outcome = self._outcomes[min(self.calls, len(self._outcomes) - 1)]
        self.calls += 1
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class RecordingSleep:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class ManualClock:
    def __init__(self):
        self.now = 0.0
        self.waits: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.waits.append(seconds)
        self.now += seconds


class RetryDecisionTests(unittest.TestCase):
    def test_rate_limited_attempts_back_off_exponentially(self):
        self.assertEqual(retry_decision(1, 429), (True, 2.0))
        self.assertEqual(retry_decision(2, 429), (True, 4.0))

    def test_final_attempt_is_not_retried(self):
        self.assertEqual(retry_decision(3, 429, max_attempts=3), (False, 0.0))

    def test_other_statuses_are_not_retried(self):
        self.assertEqual(retry_decision(1, 500), (False, 0.0))
        self.assertEqual(retry_decision(1, None), (False, 0.0))

    def test_base_delay_scales_backoff(self):
        self.assertEqual(retry_decision(2, 429, base_delay_s=0.5), (True, 2.0))


class ExecuteTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.bucket = TokenBucket(10, 60.0)
        self.sleep = RecordingSleep()

    async def test_succeeds_after_two_rate_limited_attempts(self):
        request_fn = ScriptedRequest([_status_error(429), _status_error(429), _ok()])

        response = await execute(request_fn, bucket=self.bucket, max_attempts=3, sleep=self.sleep)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(request_fn.calls, 3)
        self.assertEqual(self.sleep.delays, [2.0, 4.0])
        self.assertEqual(self.bucket.available, 7)

    async def test_always_rate_limited_exhausts_attempts(self):
        request_fn = ScriptedRequest([_status_error(429)])

        with self.assertRaises(ThrottledExhausted) as ctx:
            await execute(request_fn, bucket=self.bucket, max_attempts=3, sleep=self.sleep)

        self.assertEqual(request_fn.calls, 3)
        self.assertEqual(self.sleep.delays, [2.0, 4.0])
        self.assertEqual(ctx.exception.attempts, 3)
        self.assertEqual(ctx.exception.code, "throttled")
        self.assertIsInstance(ctx.exception, UpstreamCallFailed)
        self.assertIsInstance(ctx.exception.__cause__, httpx.HTTPStatusError)

    async def test_non_rate_limited_status_fails_immediately(self):
        request_fn = ScriptedRequest([_status_error(500), _ok()])

        with self.assertRaises(UpstreamCallFailed) as ctx:
            await execute(request_fn, bucket=self.bucket, sleep=self.sleep)

        self.assertNotIsInstance(ctx.exception, ThrottledExhausted)
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertEqual(request_fn.calls, 1)
        self.assertEqual(self.sleep.delays, [])

    async def test_transport_error_is_not_retried(self):
        request = httpx.Request("POST", URL)
        request_fn = ScriptedRequest([httpx.ConnectError("connection refused", request=request)])

        with self.assertRaises(UpstreamCallFailed) as ctx:
            await execute(request_fn, bucket=self.bucket, sleep=self.sleep)

        self.assertIsNone(ctx.exception.status_code)
        self.assertIsInstance(ctx.exception.__cause__, httpx.ConnectError)
        self.assertEqual(request_fn.calls, 1)

    async def test_upstream_errors_from_request_fn_propagate_unchanged(self):
        error = EnvelopeMalformed("missing candidates")
        request_fn = ScriptedRequest([error])

        with self.assertRaises(EnvelopeMalformed) as ctx:
            await execute(request_fn, bucket=self.bucket, sleep=self.sleep)

        self.assertIs(ctx.exception, error)
        self.assertEqual(self.sleep.delays, [])

    async def test_single_attempt_budget_does_not_wait(self):
        request_fn = ScriptedRequest([_status_error(429)])

        with self.assertRaises(ThrottledExhausted):
            await execute(request_fn, bucket=self.bucket, max_attempts=1, sleep=self.sleep)

        self.assertEqual(request_fn.calls, 1)
        self.assertEqual(self.sleep.delays, [])

    async def test_each_attempt_takes_a_token(self):
        bucket = TokenBucket(2, 60.0)
        request_fn = ScriptedRequest([_status_error(429), _ok()])

        await execute(request_fn, bucket=bucket, sleep=self.sleep)

        self.assertEqual(bucket.available, 0)

    async def test_invalid_url_is_wrapped_and_not_retried(self):
        request_fn = ScriptedRequest([httpx.InvalidURL("bad url")])

        with self.assertRaises(UpstreamCallFailed) as ctx:
            await execute(request_fn, bucket=self.bucket, sleep=self.sleep)

        self.assertIsNone(ctx.exception.status_code)
        self.assertIsInstance(ctx.exception.__cause__, httpx.InvalidURL)
        self.assertEqual(request_fn.calls, 1)

    async def test_stream_error_is_wrapped_and_not_retried(self):
        request_fn = ScriptedRequest([httpx.StreamClosed()])

        with self.assertRaises(UpstreamCallFailed) as ctx:
            await execute(request_fn, bucket=self.bucket, sleep=self.sleep)

        self.assertIsInstance(ctx.exception.__cause__, httpx.StreamError)
        self.assertEqual(request_fn.calls, 1)

    async def test_empty_bucket_logs_wait_then_proceeds(self):
        clock = ManualClock()
        bucket = TokenBucket(1, 60.0, clock=clock, sleep=clock.sleep)
        await bucket.acquire()
        request_fn = ScriptedRequest([_ok()])

        with self.assertLogs("resume_enricher.ai.retry", level="INFO") as logs:
            response = await execute(request_fn, bucket=bucket, sleep=self.sleep)

        self.assertEqual(response.status_code, 200)
        self.assertTrue(any("gemini_token_wait attempt=1" in line for line in logs.output))
        self.assertEqual(clock.waits, [60.0])
        self.assertEqual(bucket.available, 0)
        self.assertEqual(self.sleep.delays, [])

    async def test_invalid_attempt_budget_is_rejected(self):
        with self.assertRaises(ValueError):
            await execute(ScriptedRequest([_ok()]), bucket=self.bucket, max_attempts=0)


if __name__ == "__main__":
    unittest.main()
