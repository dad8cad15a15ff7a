"""Tests for the completion gateway."""
import httpx
import pytest

from relaychat.gateway import GatewaySettings, create_app

from support import FakeProvider


def client_for(app) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver")


class TestAskValidation:
    """Requests without a usable question are rejected with 400."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"question": ""},
            {"question": "   \n"},
            {"question": None},
            {"question": 42},
        ],
    )
    async def test_missing_question(self, gateway_settings, body):
        provider = FakeProvider(["unused"])
        async with client_for(create_app(provider=provider, settings=gateway_settings)) as client:
            response = await client.post("/ask", json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "No question provided"}
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_malformed_body(self, gateway_settings):
        app = create_app(provider=FakeProvider(["unused"]), settings=gateway_settings)
        async with client_for(app) as client:
            response = await client.post(
                "/ask", content=b"{not json", headers={"Content-Type": "application/json"}
            )

        assert response.status_code == 400
        assert response.json() == {"error": "No question provided"}


class TestAskStreaming:
    """Successful requests relay fragments verbatim."""

    @pytest.mark.asyncio
    async def test_single_fragment(self, gateway_settings):
        provider = FakeProvider(["4"])
        async with client_for(create_app(provider=provider, settings=gateway_settings)) as client:
            response = await client.post("/ask", json={"question": "What is 2+2?"})

        assert response.status_code == 200
        assert response.text == "4"
        assert response.headers["content-type"] == "text/plain; charset=utf-8"
        assert response.headers["cache-control"] == "no-cache"
        assert response.headers["connection"] == "keep-alive"

    @pytest.mark.asyncio
    async def test_fragments_in_order(self, gateway_settings):
        fragments = ["Hel", "lo", ", ", "wor", "ld", " éè"]
        provider = FakeProvider(fragments)
        async with client_for(create_app(provider=provider, settings=gateway_settings)) as client:
            async with client.stream("POST", "/ask", json={"question": "Say hello"}) as response:
                body = "".join([text async for text in response.aiter_text()])

        assert body == "".join(fragments)

    @pytest.mark.asyncio
    async def test_question_forwarded_as_user_message(self, gateway_settings):
        provider = FakeProvider(["ok"])
        async with client_for(create_app(provider=provider, settings=gateway_settings)) as client:
            await client.post("/ask", json={"question": "Why is the sky blue?"})

        assert len(provider.calls) == 1
        [message] = provider.calls[0]
        assert message.role == "user"
        assert message.content == "Why is the sky blue?"

    @pytest.mark.asyncio
    async def test_empty_completion_gives_empty_body(self, gateway_settings):
        async with client_for(create_app(provider=FakeProvider([]), settings=gateway_settings)) as client:
            response = await client.post("/ask", json={"question": "Anything?"})

        assert response.status_code == 200
        assert response.text == ""


class TestAskFailures:
    """Provider failures before and after the first fragment."""

    @pytest.mark.asyncio
    async def test_failure_before_streaming(self, gateway_settings):
        provider = FakeProvider(fail_before=RuntimeError("invalid api key"))
        async with client_for(create_app(provider=provider, settings=gateway_settings)) as client:
            response = await client.post("/ask", json={"question": "Hi"})

        assert response.status_code == 500
        assert response.json() == {"error": "Error generating response"}

    @pytest.mark.asyncio
    async def test_failure_on_first_fragment(self, gateway_settings):
        provider = FakeProvider(["never sent"], fail_at=0)
        async with client_for(create_app(provider=provider, settings=gateway_settings)) as client:
            response = await client.post("/ask", json={"question": "Hi"})

        assert response.status_code == 500
        assert response.json() == {"error": "Error generating response"}

    @pytest.mark.asyncio
    async def test_failure_mid_stream_keeps_partial_output(self, gateway_settings):
        provider = FakeProvider(["The answer ", "is ", "lost"], fail_at=2)
        async with client_for(create_app(provider=provider, settings=gateway_settings)) as client:
            response = await client.post("/ask", json={"question": "Hi"})

        assert response.status_code == 200
        assert response.text == "The answer is "

    @pytest.mark.asyncio
    async def test_no_provider_configured(self):
        settings = GatewaySettings(llm_provider="openai", openai_api_key=None)
        async with client_for(create_app(settings=settings)) as client:
            response = await client.post("/ask", json={"question": "Hi"})

        assert response.status_code == 500
        assert response.json() == {"error": "Error generating response"}


class TestHealth:
    """Tests for the health endpoint."""

    @pytest.mark.asyncio
    async def test_health_reports_provider(self, gateway_settings):
        async with client_for(create_app(provider=FakeProvider(), settings=gateway_settings)) as client:
            response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "provider": "openai", "model": "fake-model"}

    @pytest.mark.asyncio
    async def test_unknown_route_uses_error_shape(self, gateway_settings):
        async with client_for(create_app(provider=FakeProvider(), settings=gateway_settings)) as client:
            response = await client.get("/nope")

        assert response.status_code == 404
        assert "error" in response.json()


class TestGatewaySettings:
    """Tests for environment-driven settings."""

    def test_defaults_from_environment(self, monkeypatch):
        monkeypatch.setenv("RELAYCHAT_PORT", "8080")
        monkeypatch.setenv("LLM_PROVIDER", "DeepSeek")
        monkeypatch.delenv("OPENAI_CHAT_MODEL", raising=False)

        settings = GatewaySettings()

        assert settings.server_port == 8080
        assert settings.llm_provider == "deepseek"
        assert settings.openai_model == "gpt-3.5-turbo"

    def test_invalid_port_falls_back(self, monkeypatch):
        monkeypatch.setenv("RELAYCHAT_PORT", "not-a-port")
        assert GatewaySettings().server_port == 3001

    def test_cors_origins(self):
        assert GatewaySettings(cors_allow_origins_raw="*").cors_allow_origins == ["*"]
        settings = GatewaySettings(cors_allow_origins_raw="http://a.test, http://b.test,")
        assert settings.cors_allow_origins == ["http://a.test", "http://b.test"]

    def test_provider_config(self):
        settings = GatewaySettings(llm_provider="anthropic", anthropic_api_key="sk-ant", anthropic_model="claude-x")
        assert settings.provider_config() == {"api_key": "sk-ant", "model": "claude-x"}

    def test_provider_config_without_key(self):
        assert GatewaySettings(llm_provider="deepseek", deepseek_api_key=None).provider_config() is None

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown LLM provider"):
            GatewaySettings(llm_provider="mystery").provider_config()
