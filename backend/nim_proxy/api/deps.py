"""
API Dependency Injection Module

Provides the dependencies required by FastAPI routes. The resolver and proxy
service are built once at startup and stored on ``app.state``.
"""

from typing import Annotated

from fastapi import Depends, Request

from nim_proxy.config import Settings, get_settings
from nim_proxy.services import ModelResolver, ProxyService


def get_model_resolver(request: Request) -> ModelResolver:
    """Get the process-wide model resolver"""
    return request.app.state.model_resolver


def get_proxy_service(request: Request) -> ProxyService:
    """Get the proxy service"""
    return request.app.state.proxy_service


# Dependency type aliases
SettingsDep = Annotated[Settings, Depends(get_settings)]
ModelResolverDep = Annotated[ModelResolver, Depends(get_model_resolver)]
ProxyServiceDep = Annotated[ProxyService, Depends(get_proxy_service)]
