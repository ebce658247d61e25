"""FastAPI routes reporting the state of runtime libraries."""

from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Request

from runtimelibs.modules.libraries.service import RuntimeLibraryService

router = APIRouter(prefix="/libraries", tags=["runtime-libraries"])


def get_library_service(request: Request) -> RuntimeLibraryService:
    container = getattr(request.app.state, "container", None)
    if not container or not getattr(container, "library_service", None):
        raise HTTPException(status_code=500, detail="Runtime library service not initialized.")
    return container.library_service


@router.get("", summary="State of every declared runtime library")
async def list_libraries(svc: RuntimeLibraryService = Depends(get_library_service)) -> Dict[str, Any]:
    libraries: List[Dict[str, Any]] = [state.as_dict() for state in svc.states().values()]
    resolution = svc.declaration.settings
    return {
        "librariesDir": str(resolution.libraries_dir),
        "relocationPrefix": resolution.shared_namespace_prefix,
        "libraries": libraries,
    }


@router.get("/{key}", summary="State of one runtime library")
async def get_library(key: str, svc: RuntimeLibraryService = Depends(get_library_service)) -> Dict[str, Any]:
    state = svc.states().get(key)
    if state is None:
        raise HTTPException(status_code=404, detail=f"library {key} is not declared")
    return state.as_dict()
