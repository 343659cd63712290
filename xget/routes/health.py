from typing import Literal

from fastapi import APIRouter
from typing_extensions import TypedDict

from xget.packages.registry_proxy import route_keys

router = APIRouter(tags=["Health"])


class HealthResponse(TypedDict):
    status: Literal["pass"]
    routes: list[str]


@router.get("/health", responses={200: {"model": HealthResponse}})
async def health():
    return {"status": "pass", "routes": route_keys()}
