# tests/unit/test_sendgrid.py
"""
测试 SendGrid 资源族：两种配置形式的归一化、单例与工厂绑定、客户端构造。
"""

import json

import httpx
import pytest

from service_providers.core.resolver import resolve
from service_providers.exceptions import InvalidConfigurationError, MissingDependencyError
from service_providers.infrastructure.sendgrid_client import send_mail
from service_providers.providers.sendgrid import SENDGRID, SendGridSettings, create_client


class TestNormalization:
    def test_bare_string_equals_mapping_form(self):
        from_string = resolve({"sendgrid": "SG.key"}, SENDGRID)
        from_mapping = resolve({"sendgrid": {"apiKey": "SG.key", "options": {}}}, SENDGRID)
        assert from_string == from_mapping

    def test_null_options_become_empty(self):
        assert resolve({"sendgrid": {"apiKey": "k", "options": None}}, SENDGRID).options == {}

    def test_missing_api_key_is_invalid(self):
        with pytest.raises(InvalidConfigurationError) as exc_info:
            resolve({"sendgrid": {"options": {}}}, SENDGRID)
        assert exc_info.value.field == "apiKey"

    @pytest.mark.parametrize("value", ["", {"apiKey": ""}])
    def test_empty_api_key_is_invalid(self, value):
        with pytest.raises(InvalidConfigurationError):
            resolve({"sendgrid": value}, SENDGRID)

    @pytest.mark.parametrize("value", [42, ["SG.key"], True])
    def test_non_string_non_mapping_is_invalid(self, value):
        with pytest.raises(InvalidConfigurationError):
            resolve({"sendgrid": value}, SENDGRID)

    def test_options_must_be_mapping(self):
        with pytest.raises(InvalidConfigurationError) as exc_info:
            resolve({"sendgrid": {"apiKey": "k", "options": "fast"}}, SENDGRID)
        assert exc_info.value.field == "options"


class TestClient:
    def test_client_is_authenticated(self):
        client = create_client(SendGridSettings(apiKey="SG.key"))
        try:
            assert client.headers["Authorization"] == "Bearer SG.key"
            assert str(client.base_url).startswith("https://api.sendgrid.com")
        finally:
            client.close()

    def test_options_customize_client(self):
        client = create_client(
            SendGridSettings(
                apiKey="SG.key",
                options={"host": "https://sendgrid.internal", "impersonate_subuser": "team-a", "timeout": 2.0},
            )
        )
        try:
            assert str(client.base_url).startswith("https://sendgrid.internal")
            assert client.headers["On-Behalf-Of"] == "team-a"
            assert client.timeout.connect == 2.0
        finally:
            client.close()

    def test_unknown_option_is_invalid(self):
        with pytest.raises(InvalidConfigurationError) as exc_info:
            create_client(SendGridSettings(apiKey="SG.key", options={"no_such_option": 1}))
        assert exc_info.value.field == "options"

    def test_send_mail_payload(self):
        captured: list[httpx.Request] = []

        def respond(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(202)

        client = create_client(
            SendGridSettings(apiKey="SG.key", options={"transport": httpx.MockTransport(respond)})
        )
        send_mail(client, sender="a@example.com", recipients=["b@example.com"], subject="Hi", content="Body")

        payload = json.loads(captured[0].content)
        assert captured[0].url.path == "/v3/mail/send"
        assert captured[0].headers["Authorization"] == "Bearer SG.key"
        assert payload["from"] == {"email": "a@example.com"}
        assert payload["personalizations"] == [{"to": [{"email": "b@example.com"}]}]

    def test_send_mail_raises_on_error_status(self):
        client = create_client(
            SendGridSettings(
                apiKey="SG.key",
                options={"transport": httpx.MockTransport(lambda request: httpx.Response(401))},
            )
        )
        with pytest.raises(httpx.HTTPStatusError):
            send_mail(client, sender="a@example.com", recipients=["b@example.com"], subject="Hi", content="x")


class TestBinding:
    def test_memoized_names_share_instance(self, make_container):
        container = make_container({"sendgrid": "SG.key"})
        assert container.sendgrid() is container.SendGrid()
        assert container.sendgrid() is container.sendgrid()

    def test_factory_names_build_fresh_instances(self, make_container):
        container = make_container({"sendgrid": "SG.key"})
        first, second = container.sendgridFactory(), container.SendGridFactory()
        assert first is not second
        assert container.sendgridFactory() is not container.sendgridFactory()
        assert first is not container.sendgrid()

    def test_memoized_and_factory_bindings_are_distinct(self, make_container):
        container = make_container({"sendgrid": "SG.key"})
        assert container.providers["sendgrid"] is container.providers["SendGrid"]
        assert container.providers["sendgridFactory"] is container.providers["SendGridFactory"]
        assert container.providers["sendgrid"] is not container.providers["sendgridFactory"]

    def test_missing_config(self, make_container):
        with pytest.raises(MissingDependencyError):
            make_container().sendgridFactory()
