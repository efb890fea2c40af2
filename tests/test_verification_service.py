import base64
import uuid

import httpx
import pytest

from hiring_pipeline.errors import (
    EvidenceRequiredError,
    ProviderConfigError,
    ProviderError,
    ProviderUnavailableError,
    VerificationDecodeError,
)
from hiring_pipeline.services.classifier import ClassificationRequest, GeminiClassifierProvider
from hiring_pipeline.services.verification_service import (
    DEFAULT_REJECT_MESSAGE,
    Evidence,
    VerificationContext,
    VerificationService,
    parse_decision,
)

PNG = Evidence(content=b"\x89PNG fake image", media_type="image/png")


class FakeProvider:
    provider = "fake"

    def __init__(self, model, outcome):
        self.model = model
        self.outcome = outcome
        self.calls = 0

    def __repr__(self):
        return self.model

    async def classify(self, request):
        self.calls += 1
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


def _context():
    return VerificationContext(employer_name="Acme Corp", application_id=uuid.uuid4(), student_id=uuid.uuid4())


def _gemini_payload(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


@pytest.mark.asyncio
async def test_falls_back_past_unavailable_models_in_order():
    providers = [
        FakeProvider("m1", ProviderUnavailableError("m1")),
        FakeProvider("m2", ProviderUnavailableError("m2")),
        FakeProvider("m3", '{"success": true, "message": "ok"}'),
        FakeProvider("m4", '{"success": false, "message": "never asked"}'),
    ]

    decision = await VerificationService(providers).verify("Interview", PNG, _context())

    assert decision.accepted is True
    assert decision.model == "m3"
    assert [p.calls for p in providers] == [1, 1, 1, 0]


@pytest.mark.asyncio
async def test_terminal_provider_error_stops_the_fallback():
    providers = [
        FakeProvider("m1", ProviderError("m1", "quota exceeded", upstream_status=429)),
        FakeProvider("m2", '{"success": true}'),
    ]

    with pytest.raises(ProviderError):
        await VerificationService(providers).verify("Interview", PNG, _context())
    assert providers[1].calls == 0


@pytest.mark.asyncio
async def test_all_models_unavailable_raises_last_error():
    providers = [
        FakeProvider("m1", ProviderUnavailableError("m1")),
        FakeProvider("m2", ProviderUnavailableError("m2")),
    ]

    with pytest.raises(ProviderUnavailableError) as exc_info:
        await VerificationService(providers).verify("Interview", PNG, _context())
    assert exc_info.value.model == "m2"


@pytest.mark.asyncio
async def test_undecodable_answer_is_a_service_error():
    providers = [FakeProvider("m1", "I am not sure what this image shows.")]

    with pytest.raises(VerificationDecodeError):
        await VerificationService(providers).verify("Interview", PNG, _context())


@pytest.mark.asyncio
async def test_empty_evidence_is_rejected_without_calling_out():
    provider = FakeProvider("m1", '{"success": true}')

    with pytest.raises(EvidenceRequiredError):
        await VerificationService([provider]).verify("Interview", Evidence(b"", "image/png"), _context())
    with pytest.raises(EvidenceRequiredError):
        await VerificationService([provider]).verify("Interview", Evidence(b"data", None), _context())
    assert provider.calls == 0


@pytest.mark.asyncio
async def test_no_models_configured():
    with pytest.raises(ProviderConfigError):
        await VerificationService([]).verify("Interview", PNG, _context())


def test_reject_without_message_gets_default_reason():
    decision = parse_decision('{"success": false}')
    assert decision.accepted is False
    assert decision.message == DEFAULT_REJECT_MESSAGE


def test_success_must_be_boolean():
    with pytest.raises(VerificationDecodeError):
        parse_decision('{"success": "yes", "message": "fine"}')


@pytest.mark.asyncio
async def test_gemini_request_and_success_answer():
    seen = {}

    async def fetcher(url, json_body, params):
        seen.update(url=url, body=json_body, params=params)
        return 200, _gemini_payload('```json\n{"success": true, "message": "Offer letter"}\n```')

    provider = GeminiClassifierProvider(
        "gemini-2.5-flash",
        api_key="test-key",
        api_base="https://example.test/v1beta/models",
        fetcher=fetcher,
    )
    request = ClassificationRequest(prompt="Verify", media_type="image/png", evidence=b"img")

    text = await provider.classify(request)

    assert '"success": true' in text
    assert seen["url"] == "https://example.test/v1beta/models/gemini-2.5-flash:generateContent"
    assert seen["params"] == {"key": "test-key"}
    inline = seen["body"]["contents"][0]["parts"][0]["inlineData"]
    assert inline == {"mimeType": "image/png", "data": base64.b64encode(b"img").decode("ascii")}


@pytest.mark.asyncio
async def test_gemini_status_mapping():
    request = ClassificationRequest(prompt="Verify", media_type="image/png", evidence=b"img")

    async def not_found(url, json_body, params):
        return 404, {"error": {"message": "models/x is not found"}}

    async def forbidden(url, json_body, params):
        return 403, {"error": {"message": "API key invalid"}}

    async def broken(url, json_body, params):
        raise httpx.ConnectError("connection refused")

    with pytest.raises(ProviderUnavailableError):
        await GeminiClassifierProvider("x", api_key="k", fetcher=not_found).classify(request)

    with pytest.raises(ProviderError) as exc_info:
        await GeminiClassifierProvider("x", api_key="k", fetcher=forbidden).classify(request)
    assert exc_info.value.upstream_status == 403
    assert "API key invalid" in exc_info.value.message

    with pytest.raises(ProviderError):
        await GeminiClassifierProvider("x", api_key="k", fetcher=broken).classify(request)


@pytest.mark.asyncio
async def test_gemini_without_api_key_is_a_config_error():
    async def fetcher(url, json_body, params):
        raise AssertionError("must not be called")

    provider = GeminiClassifierProvider("x", api_key="", fetcher=fetcher)
    with pytest.raises(ProviderConfigError):
        await provider.classify(ClassificationRequest(prompt="p", media_type="image/png", evidence=b"i"))


@pytest.mark.asyncio
async def test_gemini_fallback_end_to_end():
    calls = []

    async def fetcher(url, json_body, params):
        calls.append(url.rsplit("/", 1)[-1])
        if "gemini-2.5-flash" in url or "gemini-2.0-flash" in url:
            return 404, {"error": {"message": "not found"}}
        return 200, _gemini_payload('{"success": false, "message": "Screenshot is cropped"}')

    models = ["gemini-2.5-flash", "gemini-2.0-flash", "gemini-flash-latest", "gemini-1.5-flash-latest"]
    service = VerificationService(
        [GeminiClassifierProvider(model, api_key="k", fetcher=fetcher) for model in models]
    )

    decision = await service.verify("Offer", PNG, _context())

    assert decision.accepted is False
    assert decision.message == "Screenshot is cropped"
    assert calls == [
        "gemini-2.5-flash:generateContent",
        "gemini-2.0-flash:generateContent",
        "gemini-flash-latest:generateContent",
    ]
