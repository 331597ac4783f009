# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-16
# Description: dependencies.py
# -----------------------------------------------------------------------------
from functools import lru_cache

from api.AppContainer import AppContainer
from config.Config import Config
from loader.VMBatchLoader import VMBatchLoader
from services.VMHealthService import VMHealthService
from services.VMIngestService import VMIngestService
from services.VMQueryService import VMQueryService


@lru_cache
def get_cfg() -> Config:
    return Config.from_env()


@lru_cache
def get_app_container() -> AppContainer:
    # built on first request, not at import time
    return AppContainer(cfg=get_cfg())


def shutdown_app_container() -> None:
    """Close the container on app shutdown, if a request ever built it."""
    if get_app_container.cache_info().currsize == 0:
        return
    get_app_container().close()
    get_app_container.cache_clear()


def get_health_service() -> VMHealthService:
    return get_app_container().health_service


def get_ingest_service() -> VMIngestService:
    return get_app_container().ingest_service


def get_query_service() -> VMQueryService:
    return get_app_container().query_service


def get_batch_loader() -> VMBatchLoader:
    return get_app_container().batch_loader


def get_store():
    return get_app_container().store
