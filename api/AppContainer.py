# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-16
# Description: AppContainer.py
# -----------------------------------------------------------------------------
from config.Config import Config
from embedding.VMEmbedder import VMEmbedder
from extractor.CallerFieldExtractor import CallerFieldExtractor
from health.TestRunner import TestRunner
from loader.VMBatchLoader import VMBatchLoader
from services.VMHealthService import VMHealthService
from services.VMIngestService import VMIngestService
from services.VMQueryService import VMQueryService
from utility.logging_utils import get_class_logger
from vectorstore.ChromaVMRecordStore import ChromaVMRecordStore


class AppContainer:
    """
    Owns heavy object instantiation and application wiring.
    Adapters are built once here and handed to the services; nothing else
    creates clients. Singleton instances are provided via FastAPI dependencies.
    """

    def __init__(self, cfg: Config | None = None) -> None:
        self.cfg = cfg or Config.from_env()
        self.logger = get_class_logger(self.__class__)
        self.logger.info("Building application container: %s", self.cfg.summary())

        # Core infrastructure
        self.embedder = VMEmbedder(cfg=self.cfg)
        self.store = ChromaVMRecordStore(cfg=self.cfg, max_workers=max(8, self.cfg.parallelism * 2))
        self.extractor = CallerFieldExtractor()
        self.batch_loader = VMBatchLoader()

        self.ingest_service = VMIngestService.from_config(
            self.cfg,
            store=self.store,
            embedder=self.embedder,
            extractor=self.extractor,
        )

        self.query_service = VMQueryService(
            store=self.store,
            embedder=self.embedder,
            collection_name=self.cfg.collection_name,
            default_top_k=self.cfg.default_top_k,
        )

        self.health_service = VMHealthService(
            test_runner=TestRunner(embedder=self.embedder, store=self.store),
        )

    def close(self) -> None:
        self.store.close()
