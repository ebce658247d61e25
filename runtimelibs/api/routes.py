"""Health endpoint with a summary of runtime library activation."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Request

from runtimelibs.modules.libraries.domain import LibraryStatus

router = APIRouter(tags=["health"])


@router.get("/health", summary="Liveness plus activated/failed library counts")
async def health(request: Request) -> Dict[str, Any]:
    container = getattr(request.app.state, "container", None)
    states = container.library_service.states() if container is not None else {}
    statuses = [state.status for state in states.values()]
    return {
        "status": "ok",
        "libraries": len(statuses),
        "activated": sum(1 for status in statuses if status is LibraryStatus.ACTIVATED),
        "failed": sum(1 for status in statuses if status.is_failure),
    }
