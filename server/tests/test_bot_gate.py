"""Tests for the reCAPTCHA-backed bot gate"""

import httpx
import pytest

from beta_signup.backends.recaptcha_client import RecaptchaClient
from beta_signup.errors import DependencyError
from beta_signup.services.bot_gate import BotGate
from tests.config import test_config


@pytest.mark.asyncio
async def test_high_score_accepted(bot_gate, fake_recaptcha):
    verdict = await bot_gate.verify("client-token", "203.0.113.7")

    assert verdict.accepted is True
    assert verdict.score == 0.9
    assert fake_recaptcha.calls == [
        {
            "secret": "test-recaptcha-secret",
            "response": "client-token",
            "remoteip": "203.0.113.7",
        }
    ]


@pytest.mark.asyncio
async def test_low_score_rejected_despite_success(bot_gate, fake_recaptcha):
    fake_recaptcha.result = {"success": True, "score": 0.3}

    verdict = await bot_gate.verify("client-token")

    assert verdict.accepted is False
    assert verdict.score == 0.3


@pytest.mark.asyncio
async def test_threshold_score_accepted(bot_gate, fake_recaptcha):
    fake_recaptcha.result = {"success": True, "score": 0.7}

    assert (await bot_gate.verify("client-token")).accepted is True


@pytest.mark.asyncio
async def test_provider_failure_verdict_rejected(bot_gate, fake_recaptcha):
    fake_recaptcha.result = {"success": False, "error-codes": ["timeout-or-duplicate"]}

    verdict = await bot_gate.verify("client-token")

    assert verdict.accepted is False
    assert verdict.score is None


@pytest.mark.asyncio
async def test_success_without_score_accepted(bot_gate, fake_recaptcha):
    fake_recaptcha.result = {"success": True}

    verdict = await bot_gate.verify("client-token")

    assert verdict.accepted is True
    assert verdict.score is None


@pytest.mark.asyncio
async def test_missing_token_rejected_without_provider_call(bot_gate, fake_recaptcha):
    verdict = await bot_gate.verify(None)

    assert verdict.accepted is False
    assert fake_recaptcha.calls == []


@pytest.mark.asyncio
async def test_unconfigured_secret_accepts_everything(fake_recaptcha):
    gate = BotGate(
        RecaptchaClient(
            {**test_config, "recaptcha_secret_key": None},
            transport=httpx.MockTransport(fake_recaptcha.handler),
        )
    )

    verdict = await gate.verify(None)

    assert verdict.accepted is True
    assert verdict.score == 1.0
    assert fake_recaptcha.calls == []


@pytest.mark.asyncio
async def test_unreachable_provider_raises_dependency_error(bot_gate, fake_recaptcha):
    fake_recaptcha.error = httpx.ConnectError("connection refused")

    with pytest.raises(DependencyError):
        await bot_gate.verify("client-token")


@pytest.mark.asyncio
async def test_provider_http_error_raises_dependency_error(bot_gate, fake_recaptcha):
    fake_recaptcha.status_code = 500

    with pytest.raises(DependencyError):
        await bot_gate.verify("client-token")
