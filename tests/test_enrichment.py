import asyncio
import json

import httpx

from sentiment_table.config import NO_SENTIMENT_RESULT, SENTIMENT_ERROR, EnrichmentSettings
from sentiment_table.data.enrichment import SentimentClient, build_payload, build_prompt, extract_label


def _reply(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def _classify(handler, text="Great product", api_key="secret", settings=None):
    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            client = SentimentClient(settings=settings, http_client=http)
            return await client.classify(text, api_key)

    return asyncio.run(run())


def test_payload_shape():
    payload = build_payload("Nice")
    assert payload["contents"][0]["parts"][0]["text"] == build_prompt("Nice")
    assert '"Nice"' in build_prompt("Nice")
    assert payload["generationConfig"] == {
        "temperature": 0.2,
        "topK": 1,
        "topP": 0.8,
        "maxOutputTokens": 20,
    }


def test_request_carries_key_and_body():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["url"] = request.url
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_reply("Positive"))

    assert _classify(handler, text="Great product", api_key="abc123") == "Positive"
    assert seen["method"] == "POST"
    assert seen["url"].params["key"] == "abc123"
    assert seen["url"].path.endswith("/models/gemini-1.5-flash:generateContent")
    assert seen["body"] == build_payload("Great product")


def test_model_comes_from_settings():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        return httpx.Response(200, json=_reply("Neutral"))

    _classify(handler, settings=EnrichmentSettings(model="gemini-2.0-flash"))
    assert seen["path"].endswith("/models/gemini-2.0-flash:generateContent")


def test_label_is_trimmed():
    assert _classify(lambda request: httpx.Response(200, json=_reply(" Negative\n"))) == "Negative"


def test_no_candidates_yields_no_result():
    assert _classify(lambda request: httpx.Response(200, json={"candidates": []})) == NO_SENTIMENT_RESULT
    assert _classify(lambda request: httpx.Response(200, json={})) == NO_SENTIMENT_RESULT


def test_error_status_body_yields_no_result():
    body = {"error": {"code": 400, "message": "API key not valid"}}
    assert _classify(lambda request: httpx.Response(400, json=body)) == NO_SENTIMENT_RESULT


def test_transport_failure_yields_error_sentinel():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    assert _classify(handler) == SENTIMENT_ERROR


def test_non_json_body_yields_error_sentinel():
    assert _classify(lambda request: httpx.Response(200, text="<html>busy</html>")) == SENTIMENT_ERROR


def test_extract_label_rejects_partial_shapes():
    assert extract_label(None) is None
    assert extract_label({"candidates": [{}]}) is None
    assert extract_label({"candidates": [{"content": {"parts": []}}]}) is None
    assert extract_label({"candidates": [{"content": {"parts": [{"inlineData": {}}]}}]}) is None
    assert extract_label(_reply("Positive")) == "Positive"
