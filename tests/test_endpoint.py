"""Tests for method URL construction."""

from codeassist.api.endpoint import (
    CODE_ASSIST_API_VERSION,
    CODE_ASSIST_ENDPOINT,
    ENDPOINT_ENV_VAR,
    get_method_url,
)
from codeassist.api.server import CodeAssistServer
from codeassist.config.models import CodeAssistConfig
from tests.conftest import FakeTransport


class TestGetMethodUrl:
    def test_default_endpoint(self):
        assert (
            get_method_url("countTokens")
            == "https://cloudcode-pa.googleapis.com/v1internal:countTokens"
        )

    def test_uses_constants(self):
        url = get_method_url("loadCodeAssist")
        assert url == f"{CODE_ASSIST_ENDPOINT}/{CODE_ASSIST_API_VERSION}:loadCodeAssist"

    def test_env_override_replaces_base_verbatim(self, monkeypatch):
        monkeypatch.setenv(ENDPOINT_ENV_VAR, "http://localhost:8080/")
        assert get_method_url("countTokens") == "http://localhost:8080//v1internal:countTokens"

    def test_env_is_read_on_every_call(self, monkeypatch):
        monkeypatch.setenv(ENDPOINT_ENV_VAR, "http://one")
        first = get_method_url("countTokens")
        monkeypatch.setenv(ENDPOINT_ENV_VAR, "http://two")
        second = get_method_url("countTokens")
        monkeypatch.delenv(ENDPOINT_ENV_VAR)
        third = get_method_url("countTokens")

        assert first == "http://one/v1internal:countTokens"
        assert second == "http://two/v1internal:countTokens"
        assert third == f"{CODE_ASSIST_ENDPOINT}/v1internal:countTokens"

    def test_explicit_override_beats_env(self, monkeypatch):
        monkeypatch.setenv(ENDPOINT_ENV_VAR, "http://env")
        url = get_method_url("countTokens", endpoint_override="http://config")
        assert url == "http://config/v1internal:countTokens"


class TestServerMethodUrl:
    def test_reads_config_at_call_time(self):
        config = CodeAssistConfig()
        server = CodeAssistServer(FakeTransport(), config=config)

        assert server.get_method_url("onboardUser").startswith(CODE_ASSIST_ENDPOINT)

        config.endpoint_override = "http://staging"
        assert server.get_method_url("onboardUser") == "http://staging/v1internal:onboardUser"

    def test_falls_back_to_env(self, monkeypatch):
        server = CodeAssistServer(FakeTransport())
        monkeypatch.setenv(ENDPOINT_ENV_VAR, "http://env")
        assert server.get_method_url("countTokens") == "http://env/v1internal:countTokens"
