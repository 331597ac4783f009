# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-13
# Description: VMEmbedder
# -----------------------------------------------------------------------------
import threading
import time
from typing import Any, List, Optional

import numpy as np
import openai
from openai import AzureOpenAI, OpenAI

from config.Config import Config
from record.VMErrors import EmbeddingMalformed, EmbeddingUnavailable
from utility.logging_utils import get_class_logger


class VMEmbedder:
    """
    Turns one text into one fixed-length vector via an OpenAI-compatible
    embeddings endpoint (Ollama's /v1, OpenAI, or Azure OpenAI).

    No retries here: the client is built with max_retries=0 and every call is
    bounded by cfg.embed_timeout_s. Retry policy belongs to VMIngestService.
    """

    def __init__(
            self,
            cfg: Config,
            *,
            client: Any = None,
            logger=None,
    ):
        self.cfg = cfg
        self.model = cfg.embed_model
        self.normalize = cfg.embed_normalize
        self.logger = logger or get_class_logger(self.__class__)

        # Established by the first good response; every later vector must match
        self.dimension: Optional[int] = None
        self._lock = threading.Lock()

        self.client = client if client is not None else self._init_client()
        self.logger.info(
            "Embedder initialised (provider=%s, model=%s, timeout=%.1fs)",
            cfg.embed_provider,
            self.model,
            cfg.embed_timeout_s,
        )

    def _init_client(self) -> Any:
        cfg = self.cfg
        if cfg.embed_provider == "azure":
            return AzureOpenAI(
                api_key=cfg.embed_api_key,
                azure_endpoint=cfg.embed_base_url.rstrip("/"),
                api_version=cfg.azure_api_version,
                timeout=cfg.embed_timeout_s,
                max_retries=0,
            )

        base_url = cfg.embed_base_url.rstrip("/")
        if cfg.embed_provider == "ollama" and not base_url.endswith("/v1"):
            # Ollama serves the OpenAI-compatible API under /v1
            base_url = f"{base_url}/v1"
        return OpenAI(
            api_key=cfg.embed_api_key,
            base_url=base_url,
            timeout=cfg.embed_timeout_s,
            max_retries=0,
        )

    def embed(self, text: str, expected_dim: Optional[int] = None) -> List[float]:
        """
        Embed a single text.

        :param expected_dim: dimensionality already established for the target
            collection, if any.
        :raises EmbeddingUnavailable: transport error, timeout or provider error.
        :raises EmbeddingMalformed: empty / non-finite vector or a length that
            disagrees with expected_dim or with earlier responses.
        """
        if not text or not text.strip():
            raise EmbeddingMalformed("Refusing to embed blank text")

        start = time.time()
        try:
            resp = self.client.embeddings.create(model=self.model, input=text)
        except openai.OpenAIError as e:
            raise EmbeddingUnavailable(
                f"Embedding provider call failed (model={self.model}): {e}"
            ) from e

        data = getattr(resp, "data", None) or []
        raw = getattr(data[0], "embedding", None) if data else None
        if raw is None or len(raw) == 0:
            raise EmbeddingMalformed("Embedding provider returned no vector")

        try:
            arr = np.asarray(raw, dtype=np.float32)
        except (TypeError, ValueError) as e:
            raise EmbeddingMalformed(f"Embedding is not a numeric vector: {e}") from e
        if arr.ndim != 1 or not np.all(np.isfinite(arr)):
            raise EmbeddingMalformed(f"Embedding has bad shape {arr.shape} or non-finite values")

        # Normalise (cosine-friendly)
        if self.normalize:
            arr = arr / (np.linalg.norm(arr) + 1e-12)

        dim = int(arr.shape[0])
        with self._lock:
            reference = expected_dim if expected_dim is not None else self.dimension
            if reference is not None and dim != reference:
                raise EmbeddingMalformed(
                    f"Embedding length {dim} does not match established dimensionality {reference}"
                )
            if self.dimension is None:
                self.dimension = dim
                self.logger.info("Embedding dimensionality established: %d", dim)

        self.logger.debug(
            "Embedded %d chars in %.1f ms (dim=%d)",
            len(text),
            (time.time() - start) * 1000.0,
            dim,
        )
        return arr.tolist()

    def test_connection(self) -> bool:
        """Health check: one real embedding call."""
        try:
            vec = self.embed("voicemail embedding healthcheck")
            self.logger.info("Embedding healthcheck PASSED (dim=%d)", len(vec))
            return True
        except (EmbeddingUnavailable, EmbeddingMalformed) as e:
            self.logger.error("Embedding healthcheck FAILED: %s", e)
            return False
