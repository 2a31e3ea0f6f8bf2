"""RemoteStore adapter for a JSON-over-HTTP object store.

Routes (relative to the configured base URL)::

    POST   {kind}                        create
    GET    {kind}/{key}?stage=...        stage metadata, token in ETag
    GET    {kind}/{key}/content?stage=   content blob (text)
    PUT    {kind}/{key}                  update, If-Match: draft token
    POST   {kind}/{key}/publish          publish, If-Match: draft token
    DELETE {kind}/{key}                  delete, If-Match: draft token

HTTP failures are mapped to the domain error taxonomy here so the reconciler
never sees status codes.
"""

from __future__ import annotations

import asyncio
import threading
from logging import getLogger
from typing import TYPE_CHECKING, Self
from urllib.parse import quote

import httpx

from reconcipy.adapters.http_resilience import ResilientClient
from reconcipy.domain.errors import (
    AlreadyExistsError,
    ConflictError,
    NotFoundError,
    ReconcileError,
    TransientAPIError,
    ValidationFailedError,
)
from reconcipy.domain.model import Stage

from .schema import ErrorResponse
from .translator import (
    descriptor_payload,
    parse_create_response,
    parse_stage_response,
    token_from_response,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from reconcipy.adapters.http_resilience import RequestOptions
    from reconcipy.config.http_resilience import ResilienceConfig
    from reconcipy.domain.model import ConcurrencyToken, Descriptor, Identity, ResourceKind
    from reconcipy.domain.ports import CallOptions, CreateResult, StageRecord

log = getLogger(__name__)

IF_MATCH_HEADER = "If-Match"


def _error_message(response: httpx.Response) -> str:
    try:
        payload = ErrorResponse.model_validate(response.json())
    except ValueError:
        return response.text or response.reason_phrase
    if payload.code:
        return f"{payload.code}: {payload.message}"
    return payload.message or response.reason_phrase


def _raise_for_status(
    response: httpx.Response,
    *,
    operation: str,
    identity: Identity | None,
    creating: bool = False,
) -> None:
    if response.is_success:
        return

    status = response.status_code
    message = f"{operation}: HTTP {status}: {_error_message(response)}"
    error: ReconcileError
    if status == httpx.codes.NOT_FOUND:
        error = NotFoundError(message, identity=identity)
    elif status == httpx.codes.CONFLICT and creating:
        error = AlreadyExistsError(message, identity=identity)
    elif status in (httpx.codes.CONFLICT, httpx.codes.PRECONDITION_FAILED):
        error = ConflictError(message, identity=identity)
    elif status in (httpx.codes.BAD_REQUEST, httpx.codes.UNPROCESSABLE_ENTITY):
        error = ValidationFailedError(message, identity=identity)
    else:
        error = TransientAPIError(message, identity=identity)
    raise error


def _object_path(kind: ResourceKind, identity: Identity) -> str:
    return f"{kind.name}/{quote(identity.key, safe='')}"


class HttpRemoteStore:
    """Synchronous facade over one async resilient client.

    Every call runs on a single event loop owned by the store, so the client's
    connection pool and rate limiter are shared by all calls. Calls from several
    threads are serialised. ``close`` releases the client and the loop.
    """

    def __init__(
        self,
        *,
        resilience: ResilienceConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        if resilience.base_url is None:
            raise ValueError("HttpRemoteStore requires a base_url in its resilience configuration")
        self._resilience = resilience
        self._client_factory = client_factory or ResilientClient
        self._client: ResilientClient | None = None
        self._runner = asyncio.Runner()
        self._lock = threading.Lock()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        with self._lock:
            if self._client is not None:
                self._runner.run(self._client.aclose())
                self._client = None
            self._runner.close()

    def create(
        self, kind: ResourceKind, descriptor: Descriptor, *, options: CallOptions
    ) -> CreateResult:
        identity = descriptor.identity
        response = self._call(
            "POST",
            kind.name,
            operation=f"creating {kind.name} ({identity})",
            identity=identity,
            options=options,
            json=descriptor_payload(kind, descriptor),
            creating=True,
        )
        return parse_create_response(kind, response, stage=Stage.DRAFT)

    def read_stage(
        self, kind: ResourceKind, identity: Identity, stage: Stage, *, options: CallOptions
    ) -> StageRecord:
        response = self._call(
            "GET",
            _object_path(kind, identity),
            operation=f"reading {kind.name} ({identity}) {stage} stage",
            identity=identity,
            options=options,
            params={"stage": stage.value},
        )
        return parse_stage_response(kind, identity, response, stage=stage)

    def read_content(
        self, kind: ResourceKind, identity: Identity, stage: Stage, *, options: CallOptions
    ) -> str:
        response = self._call(
            "GET",
            f"{_object_path(kind, identity)}/content",
            operation=f"reading {kind.name} ({identity}) {stage} stage content",
            identity=identity,
            options=options,
            params={"stage": stage.value},
        )
        return response.text

    def update(
        self,
        kind: ResourceKind,
        identity: Identity,
        descriptor: Descriptor,
        token: ConcurrencyToken,
        *,
        options: CallOptions,
    ) -> ConcurrencyToken:
        response = self._call(
            "PUT",
            _object_path(kind, identity),
            operation=f"updating {kind.name} ({identity})",
            identity=identity,
            options=options,
            json=descriptor_payload(kind, descriptor),
            token=token,
        )
        return token_from_response(response, Stage.DRAFT)

    def publish(
        self,
        kind: ResourceKind,
        identity: Identity,
        token: ConcurrencyToken,
        *,
        options: CallOptions,
    ) -> ConcurrencyToken:
        response = self._call(
            "POST",
            f"{_object_path(kind, identity)}/publish",
            operation=f"publishing {kind.name} ({identity})",
            identity=identity,
            options=options,
            token=token,
        )
        return token_from_response(response, Stage.PUBLISHED)

    def delete(
        self,
        kind: ResourceKind,
        identity: Identity,
        token: ConcurrencyToken,
        *,
        options: CallOptions,
    ) -> None:
        self._call(
            "DELETE",
            _object_path(kind, identity),
            operation=f"deleting {kind.name} ({identity})",
            identity=identity,
            options=options,
            token=token,
        )

    def _call(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        identity: Identity | None,
        options: CallOptions,
        params: dict[str, str] | None = None,
        json: object | None = None,
        token: ConcurrencyToken | None = None,
        creating: bool = False,
    ) -> httpx.Response:
        headers: dict[str, str] = {}
        if token is not None:
            headers[IF_MATCH_HEADER] = token.value

        request_options: RequestOptions = {"headers": headers}
        if params is not None:
            request_options["params"] = params
        if json is not None:
            request_options["json"] = json
        if options.timeout_seconds is not None:
            request_options["timeout"] = options.timeout_seconds

        with self._lock:
            response = self._runner.run(
                self._send(method, path, operation, identity, request_options)
            )
        _raise_for_status(response, operation=operation, identity=identity, creating=creating)
        return response

    async def _send(
        self,
        method: str,
        path: str,
        operation: str,
        identity: Identity | None,
        request_options: RequestOptions,
    ) -> httpx.Response:
        if self._client is None:
            self._client = self._client_factory(self._resilience)
        log.debug("%s %s", method, path)
        try:
            return await self._client.request(method, path, **request_options)
        except httpx.HTTPError as exc:
            raise TransientAPIError(f"{operation}: {exc}", identity=identity) from exc
