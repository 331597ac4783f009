# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-17
# Description: test_config.py
# -----------------------------------------------------------------------------
import pytest

from config.Config import Config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for env_name in Config.ENV_VARS.values():
        monkeypatch.delenv(env_name, raising=False)


def test_defaults_match_local_ollama_and_chroma():
    cfg = Config.from_env()

    assert cfg.embed_provider == "ollama"
    assert cfg.embed_base_url == "http://localhost:11434"
    assert cfg.embed_model == "nomic-embed-text"
    assert cfg.chroma_mode == "http"
    assert cfg.chroma_host == "http://localhost:8000"
    assert cfg.collection_name == "voicemail_transcripts"
    assert cfg.parallelism == 4


def test_env_overrides_are_coerced(monkeypatch):
    monkeypatch.setenv("OLLAMA_HOST", "http://gpu-box:11434")
    monkeypatch.setenv("VMI_PARALLELISM", "8")
    monkeypatch.setenv("VMI_STORE_TIMEOUT_S", "2.5")
    monkeypatch.setenv("VMI_EMBED_NORMALIZE", "off")
    monkeypatch.setenv("VMI_COLLECTION", "  vms  ")

    cfg = Config.from_env()

    assert cfg.embed_base_url == "http://gpu-box:11434"
    assert cfg.parallelism == 8
    assert cfg.store_timeout_s == 2.5
    assert cfg.embed_normalize is False
    assert cfg.collection_name == "vms"


@pytest.mark.parametrize(
    "env_name, value",
    [
        ("VMI_PARALLELISM", "many"),
        ("VMI_PARALLELISM", "0"),
        ("VMI_EMBED_NORMALIZE", "maybe"),
        ("VMI_EMBED_PROVIDER", "cohere"),
        ("VMI_CHROMA_MODE", "redis"),
        ("VMI_DISTANCE_SPACE", "manhattan"),
        ("VMI_EMBED_TIMEOUT_S", "0"),
        ("VMI_MAX_RETRIES", "-1"),
    ],
)
def test_invalid_values_fail_fast(monkeypatch, env_name, value):
    monkeypatch.setenv(env_name, value)

    with pytest.raises(ValueError, match=env_name):
        Config.from_env()


def test_cloud_mode_requires_credentials(monkeypatch):
    monkeypatch.setenv("VMI_CHROMA_MODE", "cloud")
    monkeypatch.setenv("CHROMA_TENANT", "tenant")

    with pytest.raises(ValueError) as exc:
        Config.from_env()
    assert "CHROMA_API_KEY" in str(exc.value)
    assert "CHROMA_DATABASE" in str(exc.value)


def test_summary_hides_secrets():
    cfg = Config(chroma_api_key="ck-secret", embed_api_key="sk-secret")
    summary = cfg.summary()

    assert "ck-secret" not in summary.values()
    assert "sk-secret" not in summary.values()
    assert summary["embed_model"] == "nomic-embed-text"
