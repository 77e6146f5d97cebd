"""Tests for the Google Translate and DeepL clients with a mocked transport."""

from typing import Callable, List
from urllib.parse import parse_qs

import httpx
import pytest
from multilingual.config import ProviderSettings
from multilingual.errors import ErrorKind
from multilingual.provider_deepl import (
    DEEPL_FREE_API_URL,
    DEEPL_PRO_API_URL,
    DeepLTranslator,
    deepl_api_url,
)
from multilingual.provider_google import GOOGLE_TRANSLATE_URL, GoogleTranslator
from multilingual.providers import create_translator
from multilingual.results import TranslationFailure, TranslationSuccess

EXPECTED_CALLS_BEFORE_ABORT = 2

Handler = Callable[[httpx.Request], httpx.Response]


class RecordingTransport(httpx.MockTransport):
    """Mock transport that keeps every request it served."""

    def __init__(self, handler: Handler) -> None:
        self.requests: List[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)


def google_ok(text: str, detected: str = "en") -> httpx.Response:
    return httpx.Response(
        200,
        json={"data": {"translations": [{"translatedText": text, "detectedSourceLanguage": detected}]}},
    )


def google_error(status: int, message: str, details=None) -> httpx.Response:
    error = {"code": status, "message": message}
    if details is not None:
        error["details"] = details
    return httpx.Response(status, json={"error": error})


def deepl_ok(*texts: str, detected: str = "EN") -> httpx.Response:
    return httpx.Response(
        200,
        json={"translations": [{"detected_source_language": detected, "text": t} for t in texts]},
    )


def form(request: httpx.Request) -> dict:
    return {k: v[0] for k, v in parse_qs(request.content.decode("utf-8")).items()}


def make_google(handler: Handler, online: bool = True):
    transport = RecordingTransport(handler)
    client = httpx.AsyncClient(transport=transport)
    translator = GoogleTranslator("g-key", client=client, connectivity_check=lambda: online)
    return translator, transport


def make_deepl(handler: Handler, api_key: str = "d-key:fx", online: bool = True):
    transport = RecordingTransport(handler)
    client = httpx.AsyncClient(transport=transport)
    translator = DeepLTranslator(api_key, client=client, connectivity_check=lambda: online)
    return translator, transport


class TestGoogleTranslator:
    """Test cases for the Google Translate client."""

    @pytest.mark.asyncio
    async def test_one_key_per_language_first_detection_wins(self):
        """Test that the detected language of the first response is kept."""
        detections = iter(["en", "es"])

        def handler(request):
            target = request.url.params["target"]
            return google_ok(f"Budget ({target})", next(detections))

        translator, transport = make_google(handler)
        result = await translator.translate("Budget", ["fr", "de"])

        assert isinstance(result, TranslationSuccess)
        assert result.translations == {"fr": ["Budget (fr)"], "de": ["Budget (de)"]}
        assert result.detected_language == "en"
        assert [r.url.params["target"] for r in transport.requests] == ["fr", "de"]

    @pytest.mark.asyncio
    async def test_request_shape(self):
        """Test that the key and text travel as query parameters of a POST."""
        translator, transport = make_google(lambda request: google_ok("Bonjour"))
        await translator.translate("Hello", ["fr"], "en")

        request = transport.requests[0]
        assert request.method == "POST"
        assert str(request.url).startswith(GOOGLE_TRANSLATE_URL)
        assert request.url.params["key"] == "g-key"
        assert request.url.params["q"] == "Hello"
        assert request.url.params["source"] == "en"

    @pytest.mark.asyncio
    async def test_source_omitted_without_hint(self):
        translator, transport = make_google(lambda request: google_ok("Bonjour"))
        await translator.translate("Hello", ["fr"])
        assert "source" not in transport.requests[0].url.params

    @pytest.mark.asyncio
    async def test_html_entities_decoded(self):
        """Test that HTML-escaped output is unescaped."""
        translator, _ = make_google(lambda request: google_ok("Tom &amp; Jerry&#39;s"))
        result = await translator.translate("Tom & Jerry's", ["fr"])
        assert result.translations["fr"] == ["Tom & Jerry's"]

    @pytest.mark.asyncio
    async def test_failure_discards_partial_results(self):
        """Test that a failure on the second of three languages aborts the call."""

        def handler(request):
            if request.url.params["target"] == "de":
                return google_error(503, "Backend Error")
            return google_ok("Budget")

        translator, transport = make_google(handler)
        result = await translator.translate("Budget", ["fr", "de", "it"])

        assert isinstance(result, TranslationFailure)
        assert result.error_kind is ErrorKind.SERVICE_UNAVAILABLE
        assert result.provider_error_code == 503
        assert result.provider_message == "Backend Error"
        assert not hasattr(result, "translations")
        assert len(transport.requests) == EXPECTED_CALLS_BEFORE_ABORT

    @pytest.mark.asyncio
    async def test_empty_language_list(self):
        """Test that no languages means no calls and an empty success."""
        translator, transport = make_google(lambda request: google_ok("unused"))
        result = await translator.translate("Budget", [])
        assert result == TranslationSuccess({}, None)
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_hint_used_when_nothing_detected(self):
        """Test that the hint stands in when the service reports no detection."""
        response = httpx.Response(200, json={"data": {"translations": [{"translatedText": "Hallo"}]}})
        translator, _ = make_google(lambda request: response)
        result = await translator.translate("Hello", ["de"], "EN")
        assert result.detected_language == "en"

    @pytest.mark.parametrize(
        "response, expected",
        [
            (google_error(403, "The caller does not have permission"), ErrorKind.AUTH_PROBLEM),
            (google_error(401, "Request is missing valid credentials"), ErrorKind.AUTH_PROBLEM),
            (
                google_error(400, "API key not valid. Please pass a valid API key."),
                ErrorKind.AUTH_BAD_KEY,
            ),
            (
                google_error(
                    400,
                    "Invalid Value",
                    [{"fieldViolations": [{"field": "target", "description": "Invalid Value"}]}],
                ),
                ErrorKind.INVALID_LANGUAGES,
            ),
            (google_error(400, "Invalid Value"), ErrorKind.OTHER_ERROR),
            (google_error(429, "Quota exceeded"), ErrorKind.FREE_LIMITS_REACHED),
            (google_error(500, "Internal error"), ErrorKind.SERVICE_UNAVAILABLE),
            (google_error(404, "Not found"), ErrorKind.OTHER_ERROR),
            (httpx.Response(200, json={"data": {}}), ErrorKind.OTHER_ERROR),
            (httpx.Response(200, text="<html>oops</html>"), ErrorKind.OTHER_ERROR),
        ],
    )
    @pytest.mark.asyncio
    async def test_error_classification(self, response, expected):
        translator, _ = make_google(lambda request: response)
        result = await translator.translate("Budget", ["fr"])
        assert isinstance(result, TranslationFailure)
        assert result.error_kind is expected

    @pytest.mark.asyncio
    async def test_connection_error_offline(self):
        """Test that a transport error without connectivity is OFFLINE."""

        def handler(request):
            raise httpx.ConnectError("no route to host")

        translator, _ = make_google(handler, online=False)
        result = await translator.translate("Budget", ["fr"])
        assert result.error_kind is ErrorKind.OFFLINE

    @pytest.mark.asyncio
    async def test_connection_error_online(self):
        """Test that a transport error with connectivity is OTHER_ERROR."""

        def handler(request):
            raise httpx.ReadTimeout("timed out")

        translator, _ = make_google(handler, online=True)
        result = await translator.translate("Budget", ["fr"])
        assert result.error_kind is ErrorKind.OTHER_ERROR


class TestDeepLTranslator:
    """Test cases for the DeepL client."""

    @pytest.mark.asyncio
    async def test_header_auth_and_form_body(self):
        """Test that the key travels in the Authorization header."""
        translator, transport = make_deepl(lambda request: deepl_ok("Bonjour"))
        result = await translator.translate("Hello", ["FR"], "EN")

        request = transport.requests[0]
        assert str(request.url) == DEEPL_FREE_API_URL
        assert request.headers["Authorization"] == "DeepL-Auth-Key d-key:fx"
        assert form(request) == {"text": "Hello", "target_lang": "FR", "source_lang": "EN"}
        assert "auth_key" not in request.url.params
        assert result.translations == {"FR": ["Bonjour"]}

    @pytest.mark.asyncio
    async def test_detected_language_lowercased(self):
        translator, _ = make_deepl(lambda request: deepl_ok("Hallo", detected="EN"))
        result = await translator.translate("Hello", ["de"])
        assert result.detected_language == "en"

    @pytest.mark.asyncio
    async def test_variants_keep_order(self):
        """Test that several candidates are kept in service order."""
        translator, _ = make_deepl(lambda request: deepl_ok("Plan &amp; budget", "Projet"))
        result = await translator.translate("Plan", ["fr"])
        assert result.translations["fr"] == ["Plan & budget", "Projet"]

    @pytest.mark.asyncio
    async def test_failure_on_second_language(self):
        """Test that the first error aborts the whole call."""

        def handler(request):
            if form(request)["target_lang"] == "xx":
                return httpx.Response(400, json={"message": "Value for 'target_lang' not supported."})
            return deepl_ok("Budget")

        translator, transport = make_deepl(handler)
        result = await translator.translate("Budget", ["fr", "xx", "de"])
        assert result == TranslationFailure(
            ErrorKind.INVALID_LANGUAGES, 400, "Value for 'target_lang' not supported."
        )
        assert len(transport.requests) == EXPECTED_CALLS_BEFORE_ABORT

    @pytest.mark.parametrize(
        "response, expected",
        [
            (httpx.Response(403), ErrorKind.AUTH_PROBLEM),
            (httpx.Response(403, json={"message": "Invalid auth key"}), ErrorKind.AUTH_BAD_KEY),
            (httpx.Response(456, json={"message": "Quota exceeded"}), ErrorKind.FREE_LIMITS_REACHED),
            (httpx.Response(429), ErrorKind.FREE_LIMITS_REACHED),
            (httpx.Response(503), ErrorKind.SERVICE_UNAVAILABLE),
            (httpx.Response(400, json={"message": "Bad request"}), ErrorKind.OTHER_ERROR),
            (httpx.Response(200, json={"translations": []}), ErrorKind.OTHER_ERROR),
        ],
    )
    @pytest.mark.asyncio
    async def test_error_classification(self, response, expected):
        translator, _ = make_deepl(lambda request: response)
        result = await translator.translate("Budget", ["fr"])
        assert isinstance(result, TranslationFailure)
        assert result.error_kind is expected

    def test_endpoint_by_key(self):
        """Test that free-plan keys use the free endpoint."""
        assert deepl_api_url("abc:fx") == DEEPL_FREE_API_URL
        assert deepl_api_url("abc") == DEEPL_PRO_API_URL


class TestCreateTranslator:
    """Test cases for the translator lookup."""

    def test_google(self):
        settings = ProviderSettings(translator="google", api_keys={"google": "k"})
        assert isinstance(create_translator(settings), GoogleTranslator)

    def test_deepl(self):
        settings = ProviderSettings(translator="deepl", api_keys={"deepl": "k"})
        translator = create_translator(settings)
        assert isinstance(translator, DeepLTranslator)
        assert translator.name == "DeepL"

    def test_unknown(self):
        with pytest.raises(ValueError):
            create_translator(ProviderSettings(translator="babel"))
