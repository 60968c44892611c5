"""Unit tests for the oracle gateway and JSON decoding."""

from types import SimpleNamespace
import unittest
from unittest import mock

from loanrisk.ai.exceptions import OracleConfigurationError, OracleDecodeError, OracleTransportError
from loanrisk.ai.gateway import GeminiTransport, OracleGateway, decode_json_response
from loanrisk.tests.fakes import ScriptedTransport


class DecodeJsonResponseTests(unittest.TestCase):
    """Exercise each decoding stage in order."""

    def test_plain_json(self) -> None:
        self.assertEqual(decode_json_response('{"a":1}'), {"a": 1})

    def test_plain_json_with_whitespace(self) -> None:
        self.assertEqual(decode_json_response('  \n{"a":1}\n  '), {"a": 1})

    def test_json_fence(self) -> None:
        self.assertEqual(decode_json_response('```json\n{"a":1}\n```'), {"a": 1})

    def test_json_fence_is_case_insensitive_and_surrounded_by_prose(self) -> None:
        text = 'Here you go:\n```JSON\n{"a": [1, 2]}\n```\nThanks!'
        self.assertEqual(decode_json_response(text), {"a": [1, 2]})

    def test_brace_span_amid_noise(self) -> None:
        self.assertEqual(decode_json_response('noise {"a":1} trailing'), {"a": 1})

    def test_brace_span_used_when_fence_body_is_broken(self) -> None:
        text = '```json\nnot valid\n``` then {"a": 2}'
        self.assertEqual(decode_json_response(text), {"a": 2})

    def test_not_json_raises(self) -> None:
        with self.assertRaises(OracleDecodeError):
            decode_json_response("not json at all")

    def test_empty_text_raises(self) -> None:
        for text in ("", None, "   "):
            with self.assertRaises(OracleDecodeError):
                decode_json_response(text)

    def test_reversed_braces_raise(self) -> None:
        with self.assertRaises(OracleDecodeError):
            decode_json_response("} nothing here {")

    def test_error_message_does_not_carry_raw_text(self) -> None:
        with self.assertRaises(OracleDecodeError) as ctx:
            decode_json_response("secret reasoning without json")
        self.assertNotIn("secret reasoning", str(ctx.exception))

    def test_non_object_json_is_returned_as_is(self) -> None:
        self.assertEqual(decode_json_response("[1, 2, 3]"), [1, 2, 3])


class OracleGatewayTests(unittest.TestCase):
    """Validate configuration checks, transport use and error propagation."""

    def test_missing_credential_fails_without_calling_transport(self) -> None:
        transport = ScriptedTransport(['{"a":1}'])
        for api_key in (None, ""):
            gateway = OracleGateway(api_key=api_key, model_name="gemini-test", transport=transport)
            with self.assertRaises(OracleConfigurationError):
                gateway.invoke("prompt")
        self.assertEqual(transport.prompts, [])

    def test_missing_credential_does_not_build_gemini_client(self) -> None:
        with mock.patch("loanrisk.ai.gateway.genai.Client") as client_cls:
            gateway = OracleGateway(api_key=None, model_name="gemini-test")
            with self.assertRaises(OracleConfigurationError):
                gateway.invoke("prompt")
        client_cls.assert_not_called()

    def test_invoke_sends_prompt_and_decodes_reply(self) -> None:
        transport = ScriptedTransport(['Sure! ```json\n{"riskLevel": "LOW"}\n```'])
        gateway = OracleGateway(api_key="key", model_name="gemini-test", transport=transport)

        self.assertEqual(gateway.invoke("the prompt"), {"riskLevel": "LOW"})
        self.assertEqual(transport.prompts, ["the prompt"])
        self.assertEqual(gateway.model_name, "gemini-test")
        self.assertTrue(gateway.is_configured)

    def test_empty_reply_is_a_decode_error(self) -> None:
        gateway = OracleGateway(api_key="key", model_name="gemini-test", transport=ScriptedTransport([""]))
        with self.assertRaises(OracleDecodeError):
            gateway.invoke("prompt")

    def test_transport_errors_propagate_unchanged(self) -> None:
        failure = OracleTransportError("connection reset")
        transport = ScriptedTransport([failure])
        gateway = OracleGateway(api_key="key", model_name="gemini-test", transport=transport)

        with self.assertRaises(OracleTransportError) as ctx:
            gateway.invoke("prompt")
        self.assertIs(ctx.exception, failure)

    def test_no_retry_after_transport_error(self) -> None:
        transport = ScriptedTransport([TimeoutError("stalled"), '{"a":1}'])
        gateway = OracleGateway(api_key="key", model_name="gemini-test", transport=transport)

        with self.assertRaises(TimeoutError):
            gateway.invoke("prompt")
        self.assertEqual(len(transport.prompts), 1)


class GeminiTransportTests(unittest.TestCase):
    """Validate text extraction from Gemini responses."""

    def _transport_returning(self, response):
        with mock.patch("loanrisk.ai.gateway.genai.Client") as client_cls:
            client_cls.return_value.models.generate_content.return_value = response
            transport = GeminiTransport(api_key="key", model_name="gemini-test")
        return transport, client_cls

    def test_concatenates_text_parts(self) -> None:
        parts = [SimpleNamespace(text='{"a":'), SimpleNamespace(text=None), SimpleNamespace(text="1}")]
        response = SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=parts))])
        transport, client_cls = self._transport_returning(response)

        self.assertEqual(transport.generate("prompt"), '{"a":1}')
        client_cls.assert_called_once_with(api_key="key")
        client_cls.return_value.models.generate_content.assert_called_once_with(
            model="gemini-test",
            contents="prompt",
        )

    def test_missing_candidates_yield_empty_text(self) -> None:
        for response in (
            SimpleNamespace(candidates=None),
            SimpleNamespace(candidates=[]),
            SimpleNamespace(candidates=[SimpleNamespace(content=None)]),
            SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=None))]),
        ):
            transport, _ = self._transport_returning(response)
            self.assertEqual(transport.generate("prompt"), "")


if __name__ == "__main__":
    unittest.main()
