import httpx
import pytest
from langchain_core.messages import HumanMessage, SystemMessage

from akinator.errors import ConfigurationError, ParseError, UpstreamTransportError
from akinator.tools.fireworks import REPAIR_SYSTEM_PROMPT, call_inference, to_wire_messages

MESSAGES = [SystemMessage(content="rules"), HumanMessage(content="facts")]


def test_to_wire_messages_maps_roles():
    assert to_wire_messages(MESSAGES) == [
        {"role": "system", "content": "rules"},
        {"role": "user", "content": "facts"},
    ]


def test_primary_payload_and_parsed_reply(settings, fireworks):
    fake = fireworks('{"type":"ask","question":"Is it alive?"}')
    with fake.client() as client:
        obj = call_inference(MESSAGES, settings, client=client)

    assert obj == {"type": "ask", "question": "Is it alive?"}
    assert len(fake.requests) == 1
    body = fake.requests[0]
    assert body["model"] == "primary-model"
    assert body["max_tokens"] == settings.max_tokens
    assert body["temperature"] == settings.temperature
    assert body["top_k"] == settings.top_k
    assert body["presence_penalty"] == 0
    assert body["frequency_penalty"] == 0
    assert body["messages"][1] == {"role": "user", "content": "facts"}


def test_bearer_token_is_sent(settings):
    seen = {}

    def handler(request):
        seen["auth"] = request.headers["Authorization"]
        return httpx.Response(200, json={"choices": [{"message": {"content": '{"type":"ask","question":"x?"}'}}]})

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        call_inference(MESSAGES, settings, client=client)
    assert seen["auth"] == "Bearer test-key"


def test_unparseable_reply_triggers_one_repair_call(settings, fireworks):
    fake = fireworks("I think it is a cat", '{"type":"guess","guess":"cat","confidence":0.4}')
    with fake.client() as client:
        obj = call_inference(MESSAGES, settings, client=client)

    assert obj["guess"] == "cat"
    repair = fake.requests[1]
    assert repair["model"] == "repair-model"
    assert repair["temperature"] == 0
    assert repair["max_tokens"] == 256
    assert repair["messages"] == [
        {"role": "system", "content": REPAIR_SYSTEM_PROMPT},
        {"role": "user", "content": "Reformat this text to valid JSON only: I think it is a cat"},
    ]


def test_object_without_type_triggers_repair(settings, fireworks):
    fake = fireworks('{"question":"Is it red?"}', '{"type":"ask","question":"Is it red?"}')
    with fake.client() as client:
        assert call_inference(MESSAGES, settings, client=client)["type"] == "ask"
    assert len(fake.requests) == 2


def test_parse_error_after_failed_repair(settings, fireworks):
    fake = fireworks("nonsense", "still nonsense")
    with fake.client() as client, pytest.raises(ParseError):
        call_inference(MESSAGES, settings, client=client)
    assert len(fake.requests) == 2


def test_repair_call_failure_becomes_parse_error(settings, fireworks):
    fake = fireworks("nonsense", httpx.Response(503, json={"error": "overloaded"}))
    with fake.client() as client, pytest.raises(ParseError):
        call_inference(MESSAGES, settings, client=client)


def test_upstream_error_payload_is_surfaced(settings, fireworks):
    fake = fireworks(httpx.Response(401, json={"error": {"message": "invalid api key"}}))
    with fake.client() as client, pytest.raises(UpstreamTransportError) as excinfo:
        call_inference(MESSAGES, settings, client=client)
    assert str(excinfo.value) == "invalid api key"
    assert excinfo.value.status_code == 401


def test_upstream_error_without_payload_is_generic(settings, fireworks):
    fake = fireworks(httpx.Response(500, text="<html>oops</html>"))
    with fake.client() as client, pytest.raises(UpstreamTransportError, match="Fireworks error"):
        call_inference(MESSAGES, settings, client=client)


def test_transport_failure(settings):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(UpstreamTransportError, match="connection refused"):
            call_inference(MESSAGES, settings, client=client)


def test_missing_api_key(settings):
    settings.fireworks_api_key = None
    with pytest.raises(ConfigurationError):
        call_inference(MESSAGES, settings)
