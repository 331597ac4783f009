# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-12
# Description: Config
# -----------------------------------------------------------------------------

import os
from dataclasses import dataclass, fields
from typing import Any, Dict

from dotenv import load_dotenv, find_dotenv

# Load .env once globally; real environment variables take precedence
load_dotenv(find_dotenv(usecwd=True), override=False)

EMBED_PROVIDERS = ("ollama", "openai", "azure")
CHROMA_MODES = ("http", "cloud", "persistent", "ephemeral")
DISTANCE_SPACES = ("cosine", "l2", "ip")


@dataclass(frozen=True)
class Config:
    # Embedding provider (OpenAI-compatible endpoint)
    embed_provider: str = "ollama"
    embed_base_url: str = "http://localhost:11434"
    embed_api_key: str = "ollama"
    embed_model: str = "nomic-embed-text"
    azure_api_version: str = "2024-10-21"
    embed_timeout_s: float = 30.0
    embed_normalize: bool = True

    # Chroma vector database
    chroma_mode: str = "http"
    chroma_host: str = "http://localhost:8000"
    chroma_path: str = "./chroma"
    chroma_api_key: str = ""
    chroma_tenant: str = ""
    chroma_database: str = ""
    store_timeout_s: float = 30.0
    collection_name: str = "voicemail_transcripts"
    distance_space: str = "cosine"

    # Pipeline
    parallelism: int = 4
    max_retries: int = 2
    retry_delay_s: float = 0.8
    default_top_k: int = 5

    # ---- Single source of truth: field_name -> ENV VAR NAME ----
    ENV_VARS = {
        # Embeddings
        "embed_provider": "VMI_EMBED_PROVIDER",      # ollama | openai | azure
        "embed_base_url": "OLLAMA_HOST",             # Azure: resource endpoint
        "embed_api_key": "VMI_EMBED_API_KEY",
        "embed_model": "VMI_EMBED_MODEL",            # Azure: deployment name
        "azure_api_version": "AZURE_OPENAI_API_VERSION",
        "embed_timeout_s": "VMI_EMBED_TIMEOUT_S",
        "embed_normalize": "VMI_EMBED_NORMALIZE",

        # Chroma
        "chroma_mode": "VMI_CHROMA_MODE",            # http | cloud | persistent | ephemeral
        "chroma_host": "CHROMA_HOST",
        "chroma_path": "VMI_CHROMA_PATH",
        "chroma_api_key": "CHROMA_API_KEY",
        "chroma_tenant": "CHROMA_TENANT",
        "chroma_database": "CHROMA_DATABASE",
        "store_timeout_s": "VMI_STORE_TIMEOUT_S",
        "collection_name": "VMI_COLLECTION",
        "distance_space": "VMI_DISTANCE_SPACE",

        # Pipeline
        "parallelism": "VMI_PARALLELISM",
        "max_retries": "VMI_MAX_RETRIES",
        "retry_delay_s": "VMI_RETRY_DELAY_S",
        "default_top_k": "VMI_DEFAULT_TOP_K",
    }

    @staticmethod
    def from_env() -> "Config":
        """Build Config object from environment variables; unset vars keep defaults."""
        types = {f.name: f.type for f in fields(Config)}
        kwargs: Dict[str, Any] = {}
        for field_name, env_name in Config.ENV_VARS.items():
            raw = (os.getenv(env_name) or "").strip()
            if raw == "":
                continue
            kwargs[field_name] = Config._coerce(env_name, raw, types[field_name])
        return Config(**kwargs)

    @staticmethod
    def _coerce(env_name: str, raw: str, type_: Any) -> Any:
        type_name = type_ if isinstance(type_, str) else getattr(type_, "__name__", "str")
        try:
            if type_name == "int":
                return int(raw)
            if type_name == "float":
                return float(raw)
        except ValueError as e:
            raise ValueError(f"Env var {env_name} must be a {type_name}, got {raw!r}") from e
        if type_name == "bool":
            v = raw.lower()
            if v in ("1", "true", "t", "yes", "y", "on"):
                return True
            if v in ("0", "false", "f", "no", "n", "off"):
                return False
            raise ValueError(f"Env var {env_name} must be a boolean, got {raw!r}")
        return raw

    def __post_init__(self):
        """Fail fast on values that can never work."""
        problems = []

        if self.embed_provider not in EMBED_PROVIDERS:
            problems.append(f"{self.ENV_VARS['embed_provider']} must be one of {EMBED_PROVIDERS}")
        if self.chroma_mode not in CHROMA_MODES:
            problems.append(f"{self.ENV_VARS['chroma_mode']} must be one of {CHROMA_MODES}")
        if self.distance_space not in DISTANCE_SPACES:
            problems.append(f"{self.ENV_VARS['distance_space']} must be one of {DISTANCE_SPACES}")
        if not self.embed_model:
            problems.append(f"{self.ENV_VARS['embed_model']} must not be empty")
        if not self.collection_name:
            problems.append(f"{self.ENV_VARS['collection_name']} must not be empty")

        for name in ("embed_timeout_s", "store_timeout_s"):
            if getattr(self, name) <= 0:
                problems.append(f"{self.ENV_VARS[name]} must be > 0")
        for name in ("parallelism", "default_top_k"):
            if getattr(self, name) < 1:
                problems.append(f"{self.ENV_VARS[name]} must be >= 1")
        if self.max_retries < 0:
            problems.append(f"{self.ENV_VARS['max_retries']} must be >= 0")
        if self.retry_delay_s < 0:
            problems.append(f"{self.ENV_VARS['retry_delay_s']} must be >= 0")

        if self.chroma_mode == "cloud":
            missing = [
                self.ENV_VARS[f]
                for f in ("chroma_api_key", "chroma_tenant", "chroma_database")
                if not getattr(self, f)
            ]
            if missing:
                problems.append(f"Missing required environment variables: {missing}")

        if self.embed_provider == "azure" and self.embed_api_key in ("", "ollama"):
            problems.append(f"{self.ENV_VARS['embed_api_key']} must be set for Azure OpenAI")

        if problems:
            raise ValueError("Invalid configuration: " + "; ".join(problems))

    def summary(self) -> dict:
        """Return a safe, non-sensitive summary for logging."""
        return {
            "embed_provider": self.embed_provider,
            "embed_base_url": self.embed_base_url,
            "embed_model": self.embed_model,
            "chroma_mode": self.chroma_mode,
            "chroma_host": self.chroma_host,
            "chroma_tenant": self.chroma_tenant,
            "chroma_database": self.chroma_database,
            "collection_name": self.collection_name,
            "distance_space": self.distance_space,
            "parallelism": self.parallelism,
            "max_retries": self.max_retries,
        }
