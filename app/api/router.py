"""
APIRouter that serializes responses by field name.

Models keep alias="_id" for MongoDB documents; API clients receive "id".
"""

from typing import Any

from fastapi import APIRouter
from fastapi.routing import APIRoute


class APIRouteByFieldName(APIRoute):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs["response_model_by_alias"] = False
        super().__init__(*args, **kwargs)


class CustomAPIRouter(APIRouter):
    """
    Router used by every endpoint module.

    Usage:
        router = CustomAPIRouter()

        @router.get("/{project_id}", response_model=ProjectResponse)
        async def read_project(project_id: str): ...
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("route_class", APIRouteByFieldName)
        super().__init__(*args, **kwargs)
