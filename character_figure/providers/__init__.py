"""
Vendor API clients.

Each client is a thin async adapter around a vendor-owned HTTP contract. The
``build_*`` factories create clients from the application settings; routes
receive them through FastAPI dependencies so tests can substitute clients
backed by ``httpx.MockTransport``.
"""

from typing import Optional

from character_figure.server.core.config import Settings, settings

from .context7 import Context7Service, UpstashVectorClient, generate_simple_vector
from .creem import CreemClient, compute_signature, verify_signature
from .errors import (
    ProviderConfigurationError,
    ProviderError,
    ProviderRequestError,
    ProviderTimeoutError,
)
from .kling import KlingClient, build_api_token
from .nano_banana import NanoBananaClient, NanoBananaResult, NanoBananaService
from .openrouter import OpenRouterClient
from .siliconflow import SILICONFLOW_IMAGE_MODELS, SiliconFlowClient


def build_nano_banana_service(config: Optional[Settings] = None) -> NanoBananaService:
    cfg = (config or settings).nano_banana
    client = NanoBananaClient(cfg.api_url, api_key=cfg.api_key, timeout=cfg.timeout, max_retries=cfg.max_retries)
    return NanoBananaService(client)


def build_kling_client(config: Optional[Settings] = None) -> KlingClient:
    cfg = (config or settings).kling
    return KlingClient(cfg.api_url, access_key=cfg.access_key, secret_key=cfg.secret_key)


def build_openrouter_client(config: Optional[Settings] = None) -> OpenRouterClient:
    cfg = config or settings
    return OpenRouterClient(cfg.openrouter.base_url, api_key=cfg.openrouter.api_key, referer=cfg.server.web_url)


def build_siliconflow_client(config: Optional[Settings] = None) -> SiliconFlowClient:
    cfg = (config or settings).siliconflow
    return SiliconFlowClient(cfg.base_url, api_key=cfg.api_key)


def build_creem_client(config: Optional[Settings] = None) -> CreemClient:
    cfg = (config or settings).creem
    return CreemClient(cfg.base_url, api_key=cfg.api_key)


def build_context7_service(config: Optional[Settings] = None) -> Context7Service:
    cfg = (config or settings).upstash
    if not cfg.url or not cfg.token:
        return Context7Service()
    return Context7Service(UpstashVectorClient(cfg.url, token=cfg.token))


__all__ = [
    "Context7Service",
    "CreemClient",
    "KlingClient",
    "NanoBananaClient",
    "NanoBananaResult",
    "NanoBananaService",
    "OpenRouterClient",
    "ProviderConfigurationError",
    "ProviderError",
    "ProviderRequestError",
    "ProviderTimeoutError",
    "SILICONFLOW_IMAGE_MODELS",
    "SiliconFlowClient",
    "UpstashVectorClient",
    "build_api_token",
    "build_context7_service",
    "build_creem_client",
    "build_kling_client",
    "build_nano_banana_service",
    "build_openrouter_client",
    "build_siliconflow_client",
    "compute_signature",
    "generate_simple_vector",
    "verify_signature",
]
