"""A client that serves custom readers to Pkl as an external reader process."""

from __future__ import annotations

import sys
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import BinaryIO, TypeVar
from urllib.parse import SplitResult, urlsplit

from msgpack.exceptions import UnpackException

from . import msgapi
from .debug import debug
from .reader import ModuleReader, Reader, ResourceReader

_R = TypeVar("_R", bound=Reader)


class ExternalReaderError(Exception):
    """Communication with the Pkl evaluator failed."""


@dataclass
class ExternalReaderClientOptions:
    """Options of an ExternalReaderClient.

    Requests are read from ``request_reader`` (standard input by default) and
    responses written to ``response_writer`` (standard output by default).
    """

    request_reader: BinaryIO | None = None
    response_writer: BinaryIO | None = None
    resource_readers: list[ResourceReader] = field(default_factory=list)
    module_readers: list[ModuleReader] = field(default_factory=list)


ClientOption = Callable[[ExternalReaderClientOptions], None]


def with_external_client_resource_reader(reader: ResourceReader) -> ClientOption:
    """Add a resource reader to the client."""

    def apply(options: ExternalReaderClientOptions) -> None:
        options.resource_readers.append(reader)

    return apply


def with_external_client_module_reader(reader: ModuleReader) -> ClientOption:
    """Add a module reader to the client."""

    def apply(options: ExternalReaderClientOptions) -> None:
        options.module_readers.append(reader)

    return apply


def with_external_client_streams(
    request_reader: BinaryIO, response_writer: BinaryIO
) -> ClientOption:
    """Set the streams used to talk to the Pkl evaluator."""

    def apply(options: ExternalReaderClientOptions) -> None:
        options.request_reader = request_reader
        options.response_writer = response_writer

    return apply


def _find(readers: Sequence[_R], scheme: str) -> _R | None:
    return next((reader for reader in readers if reader.scheme == scheme), None)


def _parse(uri: str) -> SplitResult:
    try:
        return urlsplit(uri)
    except ValueError as exc:
        raise ValueError(f"internal error: failed to parse resource url: {exc}") from exc


class ExternalReaderClient:
    """Answers read and list requests from Pkl using registered readers."""

    def __init__(self, options: ExternalReaderClientOptions) -> None:
        self.options = options
        self._exited = threading.Event()
        self._handlers = {
            msgapi.InitializeModuleReader: self._initialize_module_reader,
            msgapi.InitializeResourceReader: self._initialize_resource_reader,
            msgapi.ReadResource: self._read_resource,
            msgapi.ReadModule: self._read_module,
            msgapi.ListResources: self._list_resources,
            msgapi.ListModules: self._list_modules,
        }

    def run(self) -> None:
        """Serve requests until the stream ends or the client is closed.

        Raises ExternalReaderError if a message cannot be read or written.
        """
        debug("Starting external reader client")
        for reader in self.options.module_readers:
            debug(
                "Registered module reader of type %s for scheme %r",
                type(reader).__name__,
                reader.scheme,
            )
        for reader in self.options.resource_readers:
            debug(
                "Registered resource reader of type %s for scheme %r",
                type(reader).__name__,
                reader.scheme,
            )
        messages = msgapi.read_messages(self.options.request_reader)
        while not self._exited.is_set():
            try:
                message = next(messages)
            except StopIteration:
                break
            except (ValueError, UnpackException) as exc:
                if self._exited.is_set():
                    break
                raise ExternalReaderError(str(exc)) from exc
            if self._exited.is_set():
                break
            debug("Received message: %r", message)
            if isinstance(message, msgapi.CloseExternalProcess):
                self.close()
                break
            handler = self._handlers.get(type(message))
            if handler is not None:
                self._send(handler(message))

    def close(self) -> None:
        """Stop serving; no further requests are handled."""
        self._exited.set()

    def _send(self, message: msgapi.OutgoingMessage) -> None:
        debug("Sending message: %r", message)
        payload = message.to_msgpack()
        if self._exited.is_set():
            return
        writer = self.options.response_writer
        try:
            writer.write(payload)
            flush = getattr(writer, "flush", None)
            if flush is not None:
                flush()
        except (OSError, ValueError) as exc:
            if not self._exited.is_set():
                raise ExternalReaderError(str(exc)) from exc

    def _initialize_module_reader(
        self, msg: msgapi.InitializeModuleReader
    ) -> msgapi.InitializeModuleReaderResponse:
        reader = _find(self.options.module_readers, msg.scheme)
        spec = None
        if reader is not None:
            spec = msgapi.ModuleReaderSpec(
                scheme=reader.scheme,
                has_hierarchical_uris=reader.has_hierarchical_uris,
                is_globbable=reader.is_globbable,
                is_local=reader.is_local,
            )
        return msgapi.InitializeModuleReaderResponse(request_id=msg.request_id, spec=spec)

    def _initialize_resource_reader(
        self, msg: msgapi.InitializeResourceReader
    ) -> msgapi.InitializeResourceReaderResponse:
        reader = _find(self.options.resource_readers, msg.scheme)
        spec = None
        if reader is not None:
            spec = msgapi.ResourceReaderSpec(
                scheme=reader.scheme,
                has_hierarchical_uris=reader.has_hierarchical_uris,
                is_globbable=reader.is_globbable,
            )
        return msgapi.InitializeResourceReaderResponse(
            request_id=msg.request_id, spec=spec
        )

    def _read_resource(self, msg: msgapi.ReadResource) -> msgapi.ReadResourceResponse:
        response = msgapi.ReadResourceResponse(
            request_id=msg.request_id, evaluator_id=msg.evaluator_id
        )
        try:
            url = _parse(msg.uri)
        except ValueError as exc:
            response.error = str(exc)
            return response
        reader = _find(self.options.resource_readers, url.scheme)
        if reader is None:
            response.error = f"No resource reader found for scheme `{url.scheme}`"
            return response
        try:
            response.contents = bytes(reader.read(url))
        except Exception as exc:  # reader failures are reported to Pkl
            response.error = str(exc)
        return response

    def _read_module(self, msg: msgapi.ReadModule) -> msgapi.ReadModuleResponse:
        response = msgapi.ReadModuleResponse(
            request_id=msg.request_id, evaluator_id=msg.evaluator_id
        )
        try:
            url = _parse(msg.uri)
        except ValueError as exc:
            response.error = str(exc)
            return response
        reader = _find(self.options.module_readers, url.scheme)
        if reader is None:
            response.error = f"No module reader found for scheme `{url.scheme}`"
            return response
        try:
            response.contents = reader.read(url)
        except Exception as exc:  # reader failures are reported to Pkl
            response.error = str(exc)
        return response

    def _list(
        self,
        uri: str,
        readers: Sequence[Reader],
        kind: str,
        response: msgapi.ListResourcesResponse | msgapi.ListModulesResponse,
    ) -> None:
        try:
            url = _parse(uri)
        except ValueError as exc:
            response.error = str(exc)
            return
        reader = _find(readers, url.scheme)
        if reader is None:
            response.error = f"No {kind} reader found for scheme `{url.scheme}`"
            return
        try:
            elements = reader.list_elements(url)
        except Exception as exc:  # reader failures are reported to Pkl
            response.error = str(exc)
            return
        response.path_elements = [
            msgapi.PathElement(name=element.name, is_directory=element.is_directory)
            for element in elements
        ]

    def _list_resources(self, msg: msgapi.ListResources) -> msgapi.ListResourcesResponse:
        response = msgapi.ListResourcesResponse(
            request_id=msg.request_id, evaluator_id=msg.evaluator_id
        )
        self._list(msg.uri, self.options.resource_readers, "resource", response)
        return response

    def _list_modules(self, msg: msgapi.ListModules) -> msgapi.ListModulesResponse:
        response = msgapi.ListModulesResponse(
            request_id=msg.request_id, evaluator_id=msg.evaluator_id
        )
        self._list(msg.uri, self.options.module_readers, "module", response)
        return response


def new_external_reader_client(*args: ClientOption) -> ExternalReaderClient:
    """Build a client from option functions, defaulting to standard streams."""
    options = ExternalReaderClientOptions()
    for apply in args:
        apply(options)
    if options.request_reader is None:
        options.request_reader = getattr(sys.stdin, "buffer", sys.stdin)
    if options.response_writer is None:
        options.response_writer = getattr(sys.stdout, "buffer", sys.stdout)
    return ExternalReaderClient(options)