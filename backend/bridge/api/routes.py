from __future__ import annotations

import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends
from structlog.contextvars import bind_contextvars, reset_contextvars

from backend.bridge.dependencies import get_dispatcher
from backend.bridge.models.method_contracts import (
    MethodCatalogEntry,
    MethodRequest,
    MethodResponse,
)
from backend.bridge.services.errors import ArgumentError
from backend.bridge.services.method_dispatcher import MethodDispatcher, argument_error_response

router = APIRouter()


@router.get(
    "/methods",
    response_model=list[MethodCatalogEntry],
    tags=["methods"],
    operation_id="list_methods",
)
def list_methods(
    dispatcher: Annotated[MethodDispatcher, Depends(get_dispatcher)],
) -> list[MethodCatalogEntry]:
    return dispatcher.list_methods()


@router.post(
    "/methods/{method_name}",
    response_model=MethodResponse,
    tags=["methods"],
    operation_id="invoke_method",
)
async def invoke_method(
    method_name: str,
    request: MethodRequest,
    dispatcher: Annotated[MethodDispatcher, Depends(get_dispatcher)],
) -> MethodResponse:
    context_tokens = bind_contextvars(method_name=method_name)
    try:
        try:
            future = dispatcher.submit(method_name, request.arguments)
        except ArgumentError as exc:
            return argument_error_response(method_name, exc)
        return await asyncio.wrap_future(future)
    finally:
        reset_contextvars(**context_tokens)
