"""Unit tests for response adaptation."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import pytest

from openai_brain.api.schemas import ResponseType, ValidationResult
from openai_brain.core import response_adapter
from openai_brain.core.response_adapter import (
    ProviderResponseError,
    adapt_chat_completion,
    adapt_image_generation,
    adapt_transcription,
    fetch_image_bytes,
)


def _completion(*contents):
    return SimpleNamespace(choices=[
        SimpleNamespace(message=SimpleNamespace(content=c)) for c in contents
    ])


def _images(urls=(), b64=()):
    items = [SimpleNamespace(url=u, b64_json=None) for u in urls]
    items += [SimpleNamespace(url=None, b64_json=b) for b in b64]
    return SimpleNamespace(data=items)


class TestChatCompletion:

    def test_first_choice_stripped(self):
        envelope = adapt_chat_completion(_completion("  hi there \n", "other"), ValidationResult())
        assert envelope.result == "hi there"
        assert envelope.attachments == []
        assert envelope.validation_result.success

    def test_empty_choices_raise(self):
        with pytest.raises(ProviderResponseError):
            adapt_chat_completion(SimpleNamespace(choices=[]), ValidationResult())

    def test_null_content_raises(self):
        with pytest.raises(ProviderResponseError):
            adapt_chat_completion(_completion(None), ValidationResult())


def test_transcription_verbatim():
    envelope = adapt_transcription(SimpleNamespace(text=" hello world "), ValidationResult())
    assert envelope.result == " hello world "


class TestImageGeneration:

    def test_url_passthrough(self):
        response = _images(urls=["https://img/1.png", "https://img/2.png"])
        envelope = adapt_image_generation(response, ResponseType.URL, ValidationResult())

        assert envelope.result == ""
        assert [a.data for a in envelope.attachments] == ["https://img/1.png", "https://img/2.png"]
        assert all(a.mime_type == "image/png" and a.file_type == "image"
                   for a in envelope.attachments)

    def test_base64_passthrough(self):
        response = _images(b64=["aGVsbG8="])
        envelope = adapt_image_generation(response, ResponseType.BASE64, ValidationResult())
        assert envelope.attachments[0].data == "aGVsbG8="

    def test_binary_fetched_in_order(self):
        response = _images(urls=["https://img/1.png", "https://img/2.png"])
        fetch_calls = []

        def fake_fetch(urls):
            fetch_calls.append(urls)
            return [url.encode() for url in urls]

        envelope = adapt_image_generation(response, ResponseType.BINARY, ValidationResult(),
                                          fetch=fake_fetch)

        assert fetch_calls == [["https://img/1.png", "https://img/2.png"]]
        assert [a.data for a in envelope.attachments] == [b"https://img/1.png", b"https://img/2.png"]

    def test_missing_field_raises(self):
        response = _images(urls=["https://img/1.png"])
        with pytest.raises(ProviderResponseError):
            adapt_image_generation(response, ResponseType.BASE64, ValidationResult())

    @pytest.mark.parametrize("data", [[], None])
    def test_no_images_raises(self, data):
        fetch = MagicMock()
        with pytest.raises(ProviderResponseError, match="no images"):
            adapt_image_generation(SimpleNamespace(data=data), ResponseType.BINARY,
                                   ValidationResult(), fetch=fetch)
        fetch.assert_not_called()


class TestFetchImageBytes:

    def test_order_preserved(self, mocker):
        def fake_get(url, timeout, follow_redirects):
            return httpx.Response(200, content=url[-1].encode(),
                                  request=httpx.Request("GET", url))

        mocker.patch.object(response_adapter.httpx, "get", side_effect=fake_get)
        assert fetch_image_bytes(["https://x/a", "https://x/b", "https://x/c"]) == [b"a", b"b", b"c"]

    def test_http_error_propagates(self, mocker):
        def fake_get(url, timeout, follow_redirects):
            return httpx.Response(404, request=httpx.Request("GET", url))

        mocker.patch.object(response_adapter.httpx, "get", side_effect=fake_get)
        with pytest.raises(httpx.HTTPStatusError):
            fetch_image_bytes(["https://x/a", "https://x/b"])

    def test_empty_list(self):
        assert fetch_image_bytes([]) == []
