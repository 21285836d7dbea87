"""Tests for the PushNotifier session client."""

import base64

import pytest

from conftest import API_TOKEN, NOW, PACKAGE_NAME
from pushnotifier.client import PushNotifier
from pushnotifier.config import PushNotifierConfig
from pushnotifier.errors import (
    EmptyContentError,
    ImageIsDirectoryError,
    ImageNotFoundError,
    InvalidUrlError,
    MissingCredentialsError,
    MissingFieldError,
    NonSuccessResponseError,
    PayloadTooLargeError,
    ResponseDecodeError,
    ServiceRejectedError,
    ServiceUnreachableError,
    TokenDecodeError,
    TokenTransportError,
)
from pushnotifier.models import NO_EXPIRY, AppToken
from pushnotifier.payloads import MAX_IMAGE_BYTES

DEVICES = [
    {"id": "d1", "title": "Phone", "model": "Pixel 7", "image": "https://x/p.png"},
    {"id": "d2", "title": "Tablet", "model": "iPad", "image": "https://x/t.png"},
]
ACCEPTED = {"success": "Notification sent", "error": []}


class TestConstruction:
    def test_without_app_token(self, client):
        assert client.package_name == PACKAGE_NAME
        assert client.api_token == API_TOKEN
        assert client.base_url == "https://api.pushnotifier.de/v2/"
        assert client.username is None
        assert client.token is None
        assert client.app_token is None
        assert client.app_token_expiry == 0
        assert client.devices == []

    def test_with_app_token_has_no_expiry(self, authed_client):
        assert authed_client.app_token == "preset-app-token"
        assert authed_client.app_token_expiry == NO_EXPIRY

    def test_credentials_are_read_only(self, client):
        with pytest.raises(AttributeError):
            client.api_token = "other"
        with pytest.raises(AttributeError):
            client.package_name = "other"

    def test_from_config(self, http_session):
        config = PushNotifierConfig(
            package_name="pkg",
            api_token="api",
            app_token="app",
            base_url="http://localhost:9000/v2/",
            timeout=3,
        )

        client = PushNotifier.from_config(config, session=http_session)

        assert client.package_name == "pkg"
        assert client.app_token == "app"
        assert client.base_url == "http://localhost:9000/v2/"
        assert client._transport.timeout == 3


class TestLogin:
    def test_login_stores_token(
        self, client, http_session, make_response, make_login_body, frozen_time
    ):
        http_session.request.return_value = make_response(json_data=make_login_body())

        client.login("aUser", "aUserPassword")

        assert client.app_token == "ZZXX11ff"
        assert client.app_token_expiry == NOW + 30 * 24 * 3600
        assert client.username == "aUser"
        assert client.needs_refresh() is False

    def test_login_request(self, client, http_session, make_response, make_login_body):
        http_session.request.return_value = make_response(json_data=make_login_body())

        client.login("aUser", "aUserPassword")

        method, url = http_session.request.call_args.args
        kwargs = http_session.request.call_args.kwargs
        assert method == "POST"
        assert url == "https://api.pushnotifier.de/v2/login"
        assert kwargs["json"] == {"username": "aUser", "password": "aUserPassword"}
        assert kwargs["auth"] == (PACKAGE_NAME, API_TOKEN)
        assert "X-AppToken" not in kwargs["headers"]

    @pytest.mark.parametrize("username, password", [("", "pw"), ("user", ""), ("", "")])
    def test_missing_credentials(self, client, http_session, username, password):
        with pytest.raises(MissingCredentialsError):
            client.login(username, password)

        http_session.request.assert_not_called()

    def test_wrong_api_credentials(self, client, http_session, make_response):
        http_session.request.return_value = make_response(
            status=401, reason="Unauthorized", text="api token is invalid"
        )

        with pytest.raises(TokenTransportError) as exc_info:
            client.login("aUser", "aUserPassword")

        assert exc_info.value.status == 401
        assert isinstance(exc_info.value.cause, NonSuccessResponseError)
        assert client.token is None
        assert client.username is None

    def test_unreachable(self, client, http_session):
        import requests

        http_session.request.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(TokenTransportError) as exc_info:
            client.login("aUser", "aUserPassword")

        assert isinstance(exc_info.value.cause, ServiceUnreachableError)
        assert exc_info.value.status is None

    def test_malformed_body(self, client, http_session, make_response):
        http_session.request.return_value = make_response(text="<html>oops</html>")

        with pytest.raises(TokenDecodeError):
            client.login("aUser", "aUserPassword")

        assert client.token is None


class TestListDevices:
    def test_returns_devices_and_fills_cache(self, authed_client, http_session, make_response):
        http_session.request.return_value = make_response(json_data=DEVICES)

        devices = authed_client.list_devices()

        assert [d.id for d in devices] == ["d1", "d2"]
        assert devices[0].title == "Phone"
        assert devices[1].model == "iPad"
        assert authed_client.devices == ["d1", "d2"]

        method, url = http_session.request.call_args.args
        assert method == "GET"
        assert url.endswith("/v2/devices")
        assert http_session.request.call_args.kwargs["headers"]["X-AppToken"] == "preset-app-token"

    def test_repeated_calls_append(self, authed_client, http_session, make_response):
        http_session.request.return_value = make_response(json_data=DEVICES)

        authed_client.list_devices()
        authed_client.list_devices()

        assert authed_client.devices == ["d1", "d2", "d1", "d2"]

    def test_replace_cache(self, authed_client, http_session, make_response):
        http_session.request.return_value = make_response(json_data=DEVICES)

        authed_client.list_devices()
        authed_client.list_devices(replace_cache=True)

        assert authed_client.devices == ["d1", "d2"]

    def test_refreshes_stale_token_first(
        self, client, http_session, make_response, make_login_body, frozen_time
    ):
        client.token = AppToken(value="old", expires_at=NOW + 5)
        http_session.request.side_effect = [
            make_response(json_data=make_login_body(app_token="new")),
            make_response(json_data=DEVICES),
        ]

        client.list_devices()

        first, second = http_session.request.call_args_list
        assert first.args[1].endswith("/v2/user/refresh")
        assert second.args[1].endswith("/v2/devices")
        assert second.kwargs["headers"]["X-AppToken"] == "new"

    def test_failed_refresh_aborts(self, client, http_session, make_response, frozen_time):
        client.token = AppToken(value="old", expires_at=NOW + 5)
        http_session.request.return_value = make_response(status=401, text="expired")

        with pytest.raises(TokenTransportError):
            client.list_devices()

        assert http_session.request.call_count == 1
        assert client.devices == []

    def test_malformed_body(self, authed_client, http_session, make_response):
        http_session.request.return_value = make_response(json_data={"id": "d1"})

        with pytest.raises(ResponseDecodeError):
            authed_client.list_devices()

        assert authed_client.devices == []


class TestSendText:
    @pytest.mark.parametrize("devices", [None, [], ["d1"], ["d1", "d2"]])
    def test_empty_content(self, authed_client, http_session, devices):
        with pytest.raises(EmptyContentError):
            authed_client.send_text("", devices, False)

        http_session.request.assert_not_called()

    def test_discovers_devices_when_cache_empty(
        self, authed_client, http_session, make_response, request_body
    ):
        http_session.request.side_effect = [
            make_response(json_data=[{"id": "d1", "title": "Phone"}]),
            make_response(json_data=ACCEPTED),
        ]

        envelope = authed_client.send_text("hello", [], False)

        assert envelope.success == "Notification sent"
        assert request_body(http_session) == {
            "devices": ["d1"],
            "content": "hello",
            "silent": False,
        }
        method, url = http_session.request.call_args.args
        assert method == "PUT"
        assert url.endswith("/v2/notifications/text")

    def test_none_and_empty_devices_behave_alike(
        self, authed_client, http_session, make_response, request_body
    ):
        authed_client.devices = ["cached"]
        http_session.request.return_value = make_response(json_data=ACCEPTED)

        authed_client.send_text("a", None)
        authed_client.send_text("b", [])

        assert request_body(http_session, 0)["devices"] == ["cached"]
        assert request_body(http_session, 1)["devices"] == ["cached"]
        assert http_session.request.call_count == 2

    def test_caller_devices_used_verbatim(
        self, authed_client, http_session, make_response, request_body
    ):
        authed_client.devices = ["cached"]
        http_session.request.return_value = make_response(json_data=ACCEPTED)

        authed_client.send_text("hello", ["x", "y"], silent=True)

        assert request_body(http_session) == {
            "devices": ["x", "y"],
            "content": "hello",
            "silent": True,
        }

    def test_service_rejection(self, authed_client, http_session, make_response):
        http_session.request.return_value = make_response(
            json_data={"success": False, "error": ["device not found", "bad content"]}
        )

        with pytest.raises(ServiceRejectedError) as exc_info:
            authed_client.send_text("hello", ["d1"])

        assert exc_info.value.errors == ["device not found", "bad content"]

    def test_undecodable_response(self, authed_client, http_session, make_response):
        http_session.request.return_value = make_response(text="not json")

        with pytest.raises(ResponseDecodeError) as exc_info:
            authed_client.send_text("hello", ["d1"])

        assert exc_info.value.raw_body == "not json"

    def test_http_failure_propagates(self, authed_client, http_session, make_response):
        http_session.request.return_value = make_response(status=500, text="boom")

        with pytest.raises(NonSuccessResponseError):
            authed_client.send_text("hello", ["d1"])


class TestSendUrl:
    def test_empty_url(self, authed_client, http_session):
        with pytest.raises(EmptyContentError):
            authed_client.send_url("", ["d1"])
        http_session.request.assert_not_called()

    @pytest.mark.parametrize("url", ["not a url", "example.com", "http://"])
    def test_invalid_url(self, authed_client, http_session, url):
        with pytest.raises(InvalidUrlError):
            authed_client.send_url(url, ["d1"])
        http_session.request.assert_not_called()

    def test_body(self, authed_client, http_session, make_response, request_body):
        http_session.request.return_value = make_response(json_data=ACCEPTED)

        authed_client.send_url("https://example.com/page?a=1", ["d1"], True)

        assert request_body(http_session) == {
            "devices": ["d1"],
            "url": "https://example.com/page?a=1",
            "silent": True,
        }
        assert http_session.request.call_args.args[1].endswith("/v2/notifications/url")


class TestSendTextAndUrl:
    def test_missing_content(self, authed_client):
        with pytest.raises(MissingFieldError) as exc_info:
            authed_client.send_text_and_url("", "https://example.com", ["d1"])
        assert exc_info.value.field == "content"

    def test_missing_url(self, authed_client):
        with pytest.raises(MissingFieldError) as exc_info:
            authed_client.send_text_and_url("hello", "", ["d1"])
        assert exc_info.value.field == "url"

    def test_body(self, authed_client, http_session, make_response, request_body):
        http_session.request.return_value = make_response(json_data=ACCEPTED)

        authed_client.send_text_and_url("hello", "https://example.com", ["d1"])

        assert request_body(http_session) == {
            "devices": ["d1"],
            "content": "hello",
            "url": "https://example.com",
            "silent": False,
        }
        assert http_session.request.call_args.args[1].endswith(
            "/v2/notifications/notification"
        )


class TestSendImage:
    def test_directory(self, authed_client, tmp_path):
        with pytest.raises(ImageIsDirectoryError):
            authed_client.send_image(tmp_path, ["d1"])

    def test_missing_file(self, authed_client, tmp_path):
        with pytest.raises(ImageNotFoundError):
            authed_client.send_image(tmp_path / "nope.png", ["d1"])

    def test_empty_path(self, authed_client):
        with pytest.raises(MissingFieldError):
            authed_client.send_image("", ["d1"])

    def test_too_large(self, authed_client, http_session, tmp_path):
        image = tmp_path / "big.png"
        image.write_bytes(b"\0" * MAX_IMAGE_BYTES)

        with pytest.raises(PayloadTooLargeError) as exc_info:
            authed_client.send_image(image, ["d1"])

        assert exc_info.value.size == MAX_IMAGE_BYTES
        http_session.request.assert_not_called()

    def test_body(self, authed_client, http_session, make_response, request_body, tmp_path):
        data = bytes(range(256)) * 4
        image = tmp_path / "cat.png"
        image.write_bytes(data)
        http_session.request.return_value = make_response(json_data=ACCEPTED)

        authed_client.send_image(str(image), ["d1"], True)

        body = request_body(http_session)
        assert body["devices"] == ["d1"]
        assert body["filename"] == "cat.png"
        assert body["silent"] is True
        assert base64.b64decode(body["content"]) == data
        assert http_session.request.call_args.args[1].endswith("/v2/notifications/image")


class TestSendGeneric:
    def test_refresh_then_send(
        self, client, http_session, make_response, make_login_body, request_body, frozen_time
    ):
        from pushnotifier.payloads import TextNotification

        client.token = AppToken(value="old", expires_at=NOW + 100)
        http_session.request.side_effect = [
            make_response(json_data=make_login_body(app_token="fresh", expires_at=NOW + 9000)),
            make_response(json_data=ACCEPTED),
        ]

        client.send(TextNotification("hi", devices=["d1"]))

        refresh_call, send_call = http_session.request.call_args_list
        assert refresh_call.args[1].endswith("/v2/user/refresh")
        assert send_call.kwargs["headers"]["X-AppToken"] == "fresh"
        assert request_body(http_session)["content"] == "hi"
