import pytest

from boussole.config import Settings
from boussole.errors import ConfigurationError
from boussole.services import backend


def test_missing_credentials_raise_configuration_error():
    settings = Settings(_env_file=None)

    assert backend.backend_configured(settings) is False
    with pytest.raises(ConfigurationError):
        backend.get_backend_client(settings)


def test_client_built_once_per_credentials(monkeypatch):
    calls = []

    def fake_create_client(url, key):
        calls.append((url, key))
        return object()

    monkeypatch.setattr(backend, "create_client", fake_create_client)
    backend._client_for.cache_clear()
    settings = Settings(
        _env_file=None,
        supabase_url="https://demo.supabase.co",
        supabase_anon_key="anon",
    )

    try:
        first = backend.get_backend_client(settings)
        second = backend.get_backend_client(settings)
    finally:
        backend._client_for.cache_clear()

    assert first is second
    assert calls == [("https://demo.supabase.co", "anon")]
