"""Shared test configuration and fixtures for the beta signup tests"""

import itertools
import json
import logging
import re
from urllib.parse import parse_qsl

import fakeredis
import httpx
import pytest
from fastapi.testclient import TestClient

from beta_signup.backends.airtable_client import AirtableClient
from beta_signup.backends.recaptcha_client import RecaptchaClient
from beta_signup.main import app
from beta_signup.services.bot_gate import BotGate
from beta_signup.services.notifier import Notifier
from beta_signup.services.providers import get_redis, get_signup_flow
from beta_signup.services.rate_limiter import RateLimiter
from beta_signup.services.record_store import SignupRecordStore
from beta_signup.services.signup_flow import SignupFlow
from tests.config import test_config

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

TOKEN_FORMULA = re.compile(r'^\{Verification Token\} = "(.*)"$', re.DOTALL)
VERIFY_LINK = re.compile(r"/verify\?token=([0-9a-f-]+)")


class FakeAirtable:
    """In-memory stand-in for one Airtable table, served through httpx.MockTransport"""

    def __init__(self):
        self.records: dict[str, dict] = {}
        self.requests: list[httpx.Request] = []
        self.fail = False
        self._ids = itertools.count(1)

    def add(self, fields: dict) -> str:
        record_id = f"rec{next(self._ids):05d}"
        self.records[record_id] = dict(fields)
        return record_id

    def _record(self, record_id: str) -> dict:
        return {"id": record_id, "fields": dict(self.records[record_id])}

    def records_with_token(self, token: str) -> list[dict]:
        return [
            self._record(record_id)
            for record_id, fields in self.records.items()
            if fields.get("Verification Token") == token
        ]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail:
            return httpx.Response(503, json={"error": "SERVICE_UNAVAILABLE"})

        if request.method == "POST":
            fields = json.loads(request.content)["records"][0]["fields"]
            record_id = self.add(fields)
            return httpx.Response(200, json={"records": [self._record(record_id)]})

        if request.method == "GET":
            formula = request.url.params["filterByFormula"]
            match = TOKEN_FORMULA.match(formula)
            if not match:
                return httpx.Response(422, json={"error": "INVALID_FILTER_BY_FORMULA"})
            token = re.sub(r"\\(.)", r"\1", match.group(1))
            return httpx.Response(200, json={"records": self.records_with_token(token)})

        if request.method == "PATCH":
            record_id = request.url.path.rstrip("/").split("/")[-1]
            if record_id not in self.records:
                return httpx.Response(404, json={"error": "NOT_FOUND"})
            self.records[record_id].update(json.loads(request.content)["fields"])
            return httpx.Response(200, json=self._record(record_id))

        return httpx.Response(405)


class FakeRecaptcha:
    """Canned siteverify answers, served through httpx.MockTransport"""

    def __init__(self):
        self.result = {"success": True, "score": 0.9, "action": "signup"}
        self.calls: list[dict] = []
        self.error: Exception | None = None
        self.status_code = 200

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(dict(parse_qsl(request.content.decode())))
        if self.error:
            raise self.error
        return httpx.Response(self.status_code, json=self.result)


class RecordingEmailClient:
    """Collects outgoing messages instead of calling Mailgun"""

    def __init__(self):
        self.sent: list[dict] = []
        self.fail = False

    async def send_email(self, to, subject, html, text=None, tag="beta-signup"):
        if self.fail:
            raise RuntimeError("Email sending failed: Mailgun unavailable")
        self.sent.append(
            {"to": to, "subject": subject, "html": html, "text": text, "tag": tag}
        )
        return {"id": f"<{len(self.sent)}@mg.example.com>"}

    def subjects(self) -> list[str]:
        return [message["subject"] for message in self.sent]

    def verification_token(self) -> str:
        """Token from the most recent verification link"""
        for message in reversed(self.sent):
            match = VERIFY_LINK.search(message["text"] or "")
            if match:
                return match.group(1)
        raise AssertionError("No verification email was sent")


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def redis_client():
    """Isolated in-memory Redis for each test"""
    client = fakeredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)
    yield client
    client.flushall()


@pytest.fixture
def rate_limiter(redis_client, fake_clock):
    return RateLimiter(
        redis_client,
        max_per_window=test_config["rate_limit_max_requests"],
        window_seconds=test_config["rate_limit_window_seconds"],
        clock=fake_clock,
    )


@pytest.fixture
def fake_airtable():
    return FakeAirtable()


@pytest.fixture
def fake_recaptcha():
    return FakeRecaptcha()


@pytest.fixture
def email_client():
    return RecordingEmailClient()


@pytest.fixture
def record_store(fake_airtable):
    return SignupRecordStore(
        AirtableClient(test_config, transport=httpx.MockTransport(fake_airtable.handler))
    )


@pytest.fixture
def bot_gate(fake_recaptcha):
    return BotGate(
        RecaptchaClient(
            test_config, transport=httpx.MockTransport(fake_recaptcha.handler)
        ),
        min_score=test_config["recaptcha_min_score"],
    )


@pytest.fixture
def notifier(email_client):
    return Notifier(email_client, test_config)


@pytest.fixture
def signup_flow(rate_limiter, bot_gate, record_store, notifier):
    return SignupFlow(
        config=test_config,
        rate_limiter=rate_limiter,
        bot_gate=bot_gate,
        record_store=record_store,
        notifier=notifier,
    )


@pytest.fixture
def client(signup_flow, redis_client):
    """Test client wired to the fake collaborators"""

    # Store original overrides to restore them later
    original_overrides = app.dependency_overrides.copy()

    app.dependency_overrides[get_signup_flow] = lambda: signup_flow
    app.dependency_overrides[get_redis] = lambda: redis_client

    yield TestClient(app)

    app.dependency_overrides.clear()
    app.dependency_overrides.update(original_overrides)
