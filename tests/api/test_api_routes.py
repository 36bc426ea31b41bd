"""HTTP contract tests for the critic API.

Covers the welcome route, upload validation for both intake modes, and the
three analysis endpoints' status/message mapping.
"""

import base64
import io
from unittest.mock import MagicMock

import httpx
import openai
import pytest
import requests

from critic_testutils import chat_response, image_response, make_settings
from uicritic.api.uploads import DesignUploader
from uicritic.config.settings import IntakeMode
from uicritic.core.exceptions import StorageError
from uicritic.services.image_source import ImageResolver
from uicritic.services.storage import StoredImage


def _data_url(raw: bytes, mime_type: str = "image/png") -> str:
    return f"data:{mime_type};base64,{base64.b64encode(raw).decode('ascii')}"


def _upload_form(raw: bytes, filename: str = "design.png", mime_type: str = "image/png") -> dict:
    return {"designImage": (io.BytesIO(raw), filename, mime_type)}


def _status_error(status: int, message: str) -> openai.APIStatusError:
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    return openai.APIStatusError(
        message,
        response=httpx.Response(status, request=request),
        body={"message": message},
    )


class TestWelcome:
    def test_root_returns_welcome_message(self, make_client, settings):
        client = make_client(settings)

        resp = client.get("/api")

        assert resp.status_code == 200
        assert resp.get_json() == {"message": "Welcome to AI UI Critic API!"}


class TestUpload:
    def _client(self, make_client, settings, storage):
        uploader = DesignUploader(settings, storage_factory=lambda _settings: storage)
        return make_client(settings, uploader=uploader)

    def test_missing_file_is_rejected(self, make_client, settings):
        storage = MagicMock()
        client = self._client(make_client, settings, storage)

        resp = client.post("/api/upload", data={}, content_type="multipart/form-data")

        assert resp.status_code == 400
        assert resp.get_json() == {"message": "No file uploaded."}
        storage.upload.assert_not_called()

    def test_unsupported_type_is_rejected(self, make_client, settings):
        storage = MagicMock()
        client = self._client(make_client, settings, storage)

        resp = client.post(
            "/api/upload",
            data=_upload_form(b"%PDF-1.4", filename="spec.pdf", mime_type="application/pdf"),
            content_type="multipart/form-data",
        )

        assert resp.status_code == 400
        assert "jpeg|jpg|png|gif|webp" in resp.get_json()["message"]
        storage.upload.assert_not_called()

    def test_oversized_file_is_rejected(self, make_client):
        settings = make_settings(max_upload_bytes=1024)
        storage = MagicMock()
        client = self._client(make_client, settings, storage)

        resp = client.post(
            "/api/upload",
            data=_upload_form(b"x" * 1500),
            content_type="multipart/form-data",
        )

        assert resp.status_code == 400
        assert resp.get_json()["message"].startswith("File is too large")
        storage.upload.assert_not_called()

    def test_body_over_request_cap_is_413(self, make_client):
        settings = make_settings(max_upload_bytes=1024)
        storage = MagicMock()
        client = self._client(make_client, settings, storage)

        resp = client.post(
            "/api/upload",
            data=_upload_form(b"x" * 5000),
            content_type="multipart/form-data",
        )

        assert resp.status_code == 413
        assert resp.get_json() == {"message": "Request body too large."}
        storage.upload.assert_not_called()

    def test_storage_mode_returns_hosted_url(self, make_client, settings, png_bytes):
        storage = MagicMock()
        storage.upload.return_value = StoredImage(
            url="https://res.cloudinary.com/demo/image/upload/v1/ai-ui-critic-uploads/abc.png",
            public_id="ai-ui-critic-uploads/abc",
        )
        client = self._client(make_client, settings, storage)

        resp = client.post(
            "/api/upload",
            data=_upload_form(png_bytes),
            content_type="multipart/form-data",
        )

        assert resp.status_code == 201
        body = resp.get_json()
        assert body["message"] == "File uploaded successfully!"
        assert body["imageUrl"].startswith("https://res.cloudinary.com/")
        assert body["publicId"] == "ai-ui-critic-uploads/abc"
        storage.upload.assert_called_once_with(png_bytes, "image/png")

    def test_storage_error_keeps_its_status(self, make_client, settings, png_bytes):
        storage = MagicMock()
        storage.upload.side_effect = StorageError("Invalid API key", status_code=401)
        client = self._client(make_client, settings, storage)

        resp = client.post(
            "/api/upload",
            data=_upload_form(png_bytes),
            content_type="multipart/form-data",
        )

        assert resp.status_code == 401
        assert resp.get_json() == {"message": "Invalid API key"}

    def test_unexpected_error_is_a_generic_500(self, make_client, settings, png_bytes):
        storage = MagicMock()
        storage.upload.side_effect = RuntimeError("boom")
        client = self._client(make_client, settings, storage)

        resp = client.post(
            "/api/upload",
            data=_upload_form(png_bytes),
            content_type="multipart/form-data",
        )

        assert resp.status_code == 500
        assert resp.get_json() == {"message": "Server error during upload."}

    def test_unconfigured_storage_is_503(self, make_client, png_bytes):
        settings = make_settings(cloudinary_api_secret=None)
        client = make_client(settings)

        resp = client.post(
            "/api/upload",
            data=_upload_form(png_bytes),
            content_type="multipart/form-data",
        )

        assert resp.status_code == 503
        assert "Cloudinary" in resp.get_json()["message"]

    def test_inline_mode_returns_data_url(self, make_client, png_bytes):
        settings = make_settings(intake_mode=IntakeMode.INLINE)
        storage = MagicMock()
        client = self._client(make_client, settings, storage)

        resp = client.post(
            "/api/upload",
            data=_upload_form(png_bytes),
            content_type="multipart/form-data",
        )

        assert resp.status_code == 201
        body = resp.get_json()
        assert body["imageUrl"] == _data_url(png_bytes)
        assert body["publicId"].startswith("inline-")
        storage.upload.assert_not_called()


ANALYSIS_ENDPOINTS = [
    ("/api/analyze/journey", "Image URL is required for analysis."),
    ("/api/generate/abtest", "Image URL is required."),
    ("/api/generate/variant-image", "Image URL is required."),
]


class TestAnalysisPreconditions:
    """Checks shared by all three analysis endpoints."""

    @pytest.mark.parametrize("path,message", ANALYSIS_ENDPOINTS)
    def test_missing_image_url_is_400_without_collaborator_call(
        self, make_client, settings, fake_openai, path, message
    ):
        client = make_client(settings)

        resp = client.post(path, json={"context": "landing page"})

        assert resp.status_code == 400
        assert resp.get_json() == {"message": message}
        fake_openai.chat.completions.create.assert_not_called()
        fake_openai.images.edit.assert_not_called()

    @pytest.mark.parametrize("path", [path for path, _ in ANALYSIS_ENDPOINTS])
    def test_missing_credential_is_503_before_any_io(self, make_client, path):
        settings = make_settings(openai_api_key=None)
        session = MagicMock(spec=requests.Session)
        factory = MagicMock()
        client = make_client(
            settings,
            client_factory=factory,
            resolver=ImageResolver(session=session),
        )

        resp = client.post(path, json={"imageUrl": "https://example.com/design.png"})

        assert resp.status_code == 503
        assert resp.get_json() == {"message": "AI Service Unavailable: API Key not configured."}
        factory.assert_not_called()
        session.get.assert_not_called()

    @pytest.mark.parametrize("path", [path for path, _ in ANALYSIS_ENDPOINTS])
    def test_missing_credential_wins_over_missing_image(self, make_client, path):
        client = make_client(make_settings(openai_api_key=None))

        resp = client.post(path, json={})

        assert resp.status_code == 503


class TestJourney:
    def test_data_url_is_sent_to_collaborator(self, make_client, settings, fake_openai, png_bytes):
        client = make_client(settings)
        data_url = _data_url(png_bytes)

        resp = client.post(
            "/api/analyze/journey",
            json={"imageUrl": data_url, "context": "Checkout page for a bakery"},
        )

        assert resp.status_code == 200
        assert resp.get_json() == {"journeyAnalysis": "Looks clear."}
        kwargs = fake_openai.chat.completions.create.call_args.kwargs
        content = kwargs["messages"][0]["content"]
        assert content[1]["image_url"]["url"] == data_url
        assert content[1]["image_url"]["detail"] == "low"
        assert "Checkout page for a bakery" in content[0]["text"]
        assert kwargs["max_completion_tokens"] == 400

    def test_remote_url_is_fetched_and_inlined(self, make_client, settings, fake_openai, png_bytes):
        response = MagicMock(status_code=200, content=png_bytes, headers={"Content-Type": "image/png"})
        session = MagicMock(spec=requests.Session)
        session.get.return_value = response
        client = make_client(settings, resolver=ImageResolver(session=session))

        resp = client.post(
            "/api/analyze/journey",
            json={"imageUrl": "https://res.cloudinary.com/demo/design.png"},
        )

        assert resp.status_code == 200
        content = fake_openai.chat.completions.create.call_args.kwargs["messages"][0]["content"]
        assert content[1]["image_url"]["url"] == _data_url(png_bytes)

    def test_upstream_status_is_propagated(self, make_client, settings, fake_openai, png_bytes):
        fake_openai.chat.completions.create.side_effect = _status_error(429, "Rate limit exceeded")
        client = make_client(settings)

        resp = client.post("/api/analyze/journey", json={"imageUrl": _data_url(png_bytes)})

        assert resp.status_code == 429
        assert resp.get_json() == {"message": "Rate limit exceeded"}

    def test_invalid_data_url_is_400(self, make_client, settings, fake_openai):
        client = make_client(settings)

        resp = client.post(
            "/api/analyze/journey",
            json={"imageUrl": "data:image/png;base64,@@not-base64@@"},
        )

        assert resp.status_code == 400
        assert resp.get_json()["message"].startswith("Invalid image data")
        fake_openai.chat.completions.create.assert_not_called()


class TestAbTest:
    def test_empty_collaborator_answer_is_502(self, make_client, settings, fake_openai, png_bytes):
        fake_openai.chat.completions.create.return_value = chat_response("   ")
        client = make_client(settings)

        resp = client.post("/api/generate/abtest", json={"imageUrl": _data_url(png_bytes)})

        assert resp.status_code == 502
        assert resp.get_json() == {"message": "No content received from OpenAI for A/B test."}

    def test_element_fields_reach_the_prompt(self, make_client, settings, fake_openai, png_bytes):
        fake_openai.chat.completions.create.return_value = chat_response("1. Try green.")
        client = make_client(settings)

        resp = client.post(
            "/api/generate/abtest",
            json={
                "imageUrl": _data_url(png_bytes),
                "elementType": "Signup Button",
                "elementDescription": "Blue pill button in the hero",
            },
        )

        assert resp.status_code == 200
        assert resp.get_json() == {"abTestSuggestions": "1. Try green."}
        kwargs = fake_openai.chat.completions.create.call_args.kwargs
        prompt = kwargs["messages"][0]["content"][0]["text"]
        assert "Signup Button" in prompt
        assert "Blue pill button in the hero" in prompt
        assert kwargs["max_completion_tokens"] == 300


class TestVariantImage:
    def test_returns_generated_image_as_data_url(
        self, make_client, settings, fake_openai, png_bytes
    ):
        client = make_client(settings)

        resp = client.post(
            "/api/generate/variant-image",
            json={"imageUrl": _data_url(png_bytes)},
        )

        assert resp.status_code == 200
        assert resp.get_json() == {"variantImageUrl": "data:image/png;base64,aGVsbG8="}
        kwargs = fake_openai.images.edit.call_args.kwargs
        assert kwargs["image"] == ("design.png", png_bytes, "image/png")
        assert kwargs["n"] == 1

    def test_missing_image_payload_is_502(self, make_client, settings, fake_openai, png_bytes):
        fake_openai.images.edit.return_value = image_response(None)
        client = make_client(settings)

        resp = client.post(
            "/api/generate/variant-image",
            json={"imageUrl": _data_url(png_bytes)},
        )

        assert resp.status_code == 502
        assert resp.get_json() == {
            "message": "No image received from OpenAI for variant generation."
        }

    @pytest.mark.parametrize("status", [400, 500])
    def test_upstream_status_is_propagated(
        self, make_client, settings, fake_openai, png_bytes, status
    ):
        fake_openai.images.edit.side_effect = _status_error(status, "Image edit rejected")
        client = make_client(settings)

        resp = client.post(
            "/api/generate/variant-image",
            json={"imageUrl": _data_url(png_bytes)},
        )

        assert resp.status_code == status
        assert resp.get_json() == {"message": "Image edit rejected"}

    def test_unexpected_error_is_a_generic_500(self, make_client, settings, fake_openai, png_bytes):
        fake_openai.images.edit.side_effect = RuntimeError("boom")
        client = make_client(settings)

        resp = client.post(
            "/api/generate/variant-image",
            json={"imageUrl": _data_url(png_bytes)},
        )

        assert resp.status_code == 500
        assert resp.get_json() == {"message": "Failed to generate variant image."}
