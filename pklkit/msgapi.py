"""Messages exchanged with the Pkl server and external readers, and their wire format."""

from __future__ import annotations

from dataclasses import MISSING, dataclass, field, fields, is_dataclass
from enum import IntEnum
from typing import Any, BinaryIO, ClassVar, Iterator

import msgpack


class MessageCode(IntEnum):
    """Numeric codes identifying each message type on the wire."""

    NEW_EVALUATOR = 0x20
    NEW_EVALUATOR_RESPONSE = 0x21
    CLOSE_EVALUATOR = 0x22
    EVALUATE = 0x23
    EVALUATE_RESPONSE = 0x24
    EVALUATE_LOG = 0x25
    EVALUATE_READ = 0x26
    EVALUATE_READ_RESPONSE = 0x27
    EVALUATE_READ_MODULE = 0x28
    EVALUATE_READ_MODULE_RESPONSE = 0x29
    LIST_RESOURCES_REQUEST = 0x2A
    LIST_RESOURCES_RESPONSE = 0x2B
    LIST_MODULES_REQUEST = 0x2C
    LIST_MODULES_RESPONSE = 0x2D
    INITIALIZE_MODULE_READER_REQUEST = 0x2E
    INITIALIZE_MODULE_READER_RESPONSE = 0x2F
    INITIALIZE_RESOURCE_READER_REQUEST = 0x30
    INITIALIZE_RESOURCE_READER_RESPONSE = 0x31
    CLOSE_EXTERNAL_PROCESS = 0x32


def _wire(key: str, default: Any = None, *, omitempty: bool = False) -> Any:
    """Declare a dataclass field carried on the wire under ``key``."""
    return field(default=default, metadata={"key": key, "omitempty": omitempty})


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, bool):
        return not value
    if isinstance(value, (int, float)):
        return value == 0
    if isinstance(value, (str, bytes, bytearray, list, tuple, dict)):
        return len(value) == 0
    return False


def _encode(value: Any) -> Any:
    """Convert wire dataclasses (recursively) into plain msgpack-ready values."""
    if is_dataclass(value) and not isinstance(value, type):
        body: dict[str, Any] = {}
        for f in fields(value):
            key = f.metadata.get("key")
            if key is None:
                continue
            item = getattr(value, f.name)
            if f.metadata.get("omitempty") and _is_empty(item):
                continue
            body[key] = _encode(item)
        return body
    if isinstance(value, (list, tuple)):
        return [_encode(item) for item in value]
    if isinstance(value, dict):
        return {key: _encode(item) for key, item in value.items()}
    return value


# --------------------------------------------------------------------------
# Incoming messages
# --------------------------------------------------------------------------


class IncomingMessage:
    """Base class of messages received from the Pkl process."""

    code: ClassVar[MessageCode]

    @classmethod
    def from_body(cls, body: Any) -> IncomingMessage:
        """Build the message from its decoded map body."""
        if body is None:
            body = {}
        if not isinstance(body, dict):
            raise ValueError(
                f"expected a map body for {cls.__name__}, got {type(body).__name__}"
            )
        kwargs = {}
        for f in fields(cls):  # type: ignore[arg-type]
            key = f.metadata.get("key")
            if key is None or body.get(key) is None:
                continue
            kwargs[f.name] = body[key]
        return cls(**kwargs)


@dataclass
class CreateEvaluatorResponse(IncomingMessage):
    code = MessageCode.NEW_EVALUATOR_RESPONSE

    request_id: int = _wire("requestId", 0)
    evaluator_id: int = _wire("evaluatorId", 0)
    error: str = _wire("error", "")


@dataclass
class EvaluateResponse(IncomingMessage):
    code = MessageCode.EVALUATE_RESPONSE

    request_id: int = _wire("requestId", 0)
    evaluator_id: int = _wire("evaluatorId", 0)
    result: bytes = _wire("result", b"")
    error: str = _wire("error", "")


@dataclass
class ReadResource(IncomingMessage):
    code = MessageCode.EVALUATE_READ

    request_id: int = _wire("requestId", 0)
    evaluator_id: int = _wire("evaluatorId", 0)
    uri: str = _wire("uri", "")


@dataclass
class ReadModule(IncomingMessage):
    code = MessageCode.EVALUATE_READ_MODULE

    request_id: int = _wire("requestId", 0)
    evaluator_id: int = _wire("evaluatorId", 0)
    uri: str = _wire("uri", "")


@dataclass
class Log(IncomingMessage):
    code = MessageCode.EVALUATE_LOG

    evaluator_id: int = _wire("evaluatorId", 0)
    level: int = _wire("level", 0)
    message: str = _wire("message", "")
    frame_uri: str = _wire("frameUri", "")


@dataclass
class ListResources(IncomingMessage):
    code = MessageCode.LIST_RESOURCES_REQUEST

    request_id: int = _wire("requestId", 0)
    evaluator_id: int = _wire("evaluatorId", 0)
    uri: str = _wire("uri", "")


@dataclass
class ListModules(IncomingMessage):
    code = MessageCode.LIST_MODULES_REQUEST

    request_id: int = _wire("requestId", 0)
    evaluator_id: int = _wire("evaluatorId", 0)
    uri: str = _wire("uri", "")


@dataclass
class InitializeModuleReader(IncomingMessage):
    code = MessageCode.INITIALIZE_MODULE_READER_REQUEST

    request_id: int = _wire("requestId", 0)
    scheme: str = _wire("scheme", "")


@dataclass
class InitializeResourceReader(IncomingMessage):
    code = MessageCode.INITIALIZE_RESOURCE_READER_REQUEST

    request_id: int = _wire("requestId", 0)
    scheme: str = _wire("scheme", "")


@dataclass
class CloseExternalProcess(IncomingMessage):
    code = MessageCode.CLOSE_EXTERNAL_PROCESS


_INCOMING: dict[int, type[IncomingMessage]] = {
    cls.code: cls
    for cls in (
        CreateEvaluatorResponse,
        EvaluateResponse,
        ReadResource,
        ReadModule,
        Log,
        ListResources,
        ListModules,
        InitializeModuleReader,
        InitializeResourceReader,
        CloseExternalProcess,
    )
}


def _from_envelope(envelope: Any) -> IncomingMessage:
    if not isinstance(envelope, (list, tuple)) or len(envelope) < 2:
        raise ValueError(f"malformed message envelope: {envelope!r}")
    code, body = envelope[0], envelope[1]
    if isinstance(code, bool) or not isinstance(code, int):
        raise ValueError(f"malformed message code: {code!r}")
    try:
        cls = _INCOMING[code]
    except KeyError:
        raise ValueError(f"Unknown code: {code}") from None
    return cls.from_body(body)


def decode(payload: bytes) -> IncomingMessage:
    """Decode one incoming message from its msgpack bytes."""
    return _from_envelope(msgpack.unpackb(payload, raw=False))


def read_messages(stream: BinaryIO) -> Iterator[IncomingMessage]:
    """Yield incoming messages read from ``stream`` until it ends."""
    unpacker = msgpack.Unpacker(stream, raw=False)
    for envelope in unpacker:
        yield _from_envelope(envelope)


# --------------------------------------------------------------------------
# Outgoing messages
# --------------------------------------------------------------------------


class OutgoingMessage:
    """Base class of messages sent to the Pkl process."""

    code: ClassVar[MessageCode]

    def to_msgpack(self) -> bytes:
        """Encode the message as ``[code, body]`` in msgpack."""
        return msgpack.packb([int(self.code), _encode(self)], use_bin_type=True)


@dataclass
class ResourceReaderSpec:
    scheme: str = _wire("scheme", "")
    has_hierarchical_uris: bool = _wire("hasHierarchicalUris", False)
    is_globbable: bool = _wire("isGlobbable", False)


@dataclass
class ModuleReaderSpec:
    scheme: str = _wire("scheme", "")
    has_hierarchical_uris: bool = _wire("hasHierarchicalUris", False)
    is_globbable: bool = _wire("isGlobbable", False)
    is_local: bool = _wire("isLocal", False)


@dataclass
class Checksums:
    sha256: str = _wire("checksums", "")


@dataclass
class ProjectOrDependency:
    package_uri: str = _wire("packageUri", "", omitempty=True)
    type: str = _wire("type", "")
    project_file_uri: str = _wire("projectFileUri", "", omitempty=True)
    checksums: Checksums | None = _wire("checksums", omitempty=True)
    dependencies: dict[str, ProjectOrDependency] | None = _wire("dependencies")


@dataclass
class Proxy:
    address: str = _wire("address", "", omitempty=True)
    no_proxy: list[str] | None = _wire("noProxy", omitempty=True)


@dataclass
class Http:
    ca_certificates: bytes = _wire("caCertificates", b"", omitempty=True)
    proxy: Proxy | None = _wire("proxy", omitempty=True)


@dataclass
class ExternalReaderSpec:
    executable: str = _wire("executable", "")
    arguments: list[str] | None = _wire("arguments", omitempty=True)


@dataclass
class CreateEvaluator(OutgoingMessage):
    code = MessageCode.NEW_EVALUATOR

    request_id: int = _wire("requestId", 0)
    resource_readers: list[ResourceReaderSpec] | None = _wire(
        "clientResourceReaders", omitempty=True
    )
    module_readers: list[ModuleReaderSpec] | None = _wire(
        "clientModuleReaders", omitempty=True
    )
    external_reader_commands: list[list[str]] | None = _wire(
        "externalReaderCommands", omitempty=True
    )
    module_paths: list[str] | None = _wire("modulePaths", omitempty=True)
    env: dict[str, str] | None = _wire("env", omitempty=True)
    properties: dict[str, str] | None = _wire("properties", omitempty=True)
    output_format: str = _wire("outputFormat", "", omitempty=True)
    allowed_modules: list[str] | None = _wire("allowedModules", omitempty=True)
    allowed_resources: list[str] | None = _wire("allowedResources", omitempty=True)
    root_dir: str = _wire("rootDir", "", omitempty=True)
    cache_dir: str = _wire("cacheDir", "", omitempty=True)
    project: ProjectOrDependency | None = _wire("project", omitempty=True)
    http: Http | None = _wire("http", omitempty=True)
    timeout_seconds: int = _wire("timeoutSeconds", 0, omitempty=True)
    external_module_readers: dict[str, ExternalReaderSpec] | None = _wire(
        "externalModuleReaders", omitempty=True
    )
    external_resource_readers: dict[str, ExternalReaderSpec] | None = _wire(
        "externalResourceReaders", omitempty=True
    )


@dataclass
class CloseEvaluator(OutgoingMessage):
    code = MessageCode.CLOSE_EVALUATOR

    evaluator_id: int = _wire("evaluatorId", 0, omitempty=True)


@dataclass
class Evaluate(OutgoingMessage):
    code = MessageCode.EVALUATE

    request_id: int = _wire("requestId", 0)
    evaluator_id: int = _wire("evaluatorId", 0)
    module_uri: str = _wire("moduleUri", "")
    module_text: str = _wire("moduleText", "", omitempty=True)
    expr: str = _wire("expr", "", omitempty=True)


@dataclass
class ReadResourceResponse(OutgoingMessage):
    code = MessageCode.EVALUATE_READ_RESPONSE

    request_id: int = _wire("requestId", 0)
    evaluator_id: int = _wire("evaluatorId", 0)
    contents: bytes = _wire("contents", b"", omitempty=True)
    error: str = _wire("error", "", omitempty=True)


@dataclass
class ReadModuleResponse(OutgoingMessage):
    code = MessageCode.EVALUATE_READ_MODULE_RESPONSE

    request_id: int = _wire("requestId", 0)
    evaluator_id: int = _wire("evaluatorId", 0)
    contents: str = _wire("contents", "", omitempty=True)
    error: str = _wire("error", "", omitempty=True)


@dataclass
class PathElement:
    name: str = _wire("name", "")
    is_directory: bool = _wire("isDirectory", False)


@dataclass
class ListResourcesResponse(OutgoingMessage):
    code = MessageCode.LIST_RESOURCES_RESPONSE

    request_id: int = _wire("requestId", 0)
    evaluator_id: int = _wire("evaluatorId", 0)
    path_elements: list[PathElement] | None = _wire("pathElements", omitempty=True)
    error: str = _wire("error", "", omitempty=True)


@dataclass
class ListModulesResponse(OutgoingMessage):
    code = MessageCode.LIST_MODULES_RESPONSE

    request_id: int = _wire("requestId", 0)
    evaluator_id: int = _wire("evaluatorId", 0)
    path_elements: list[PathElement] | None = _wire("pathElements", omitempty=True)
    error: str = _wire("error", "", omitempty=True)


@dataclass
class InitializeModuleReaderResponse(OutgoingMessage):
    code = MessageCode.INITIALIZE_MODULE_READER_RESPONSE

    request_id: int = _wire("requestId", 0)
    spec: ModuleReaderSpec | None = _wire("spec", omitempty=True)


@dataclass
class InitializeResourceReaderResponse(OutgoingMessage):
    code = MessageCode.INITIALIZE_RESOURCE_READER_RESPONSE

    request_id: int = _wire("requestId", 0)
    spec: ResourceReaderSpec | None = _wire("spec", omitempty=True)


# Guard against an accidental MISSING default leaking into wire fields.
assert all(
    f.default is not MISSING
    for cls in (*_INCOMING.values(), CreateEvaluator, ProjectOrDependency)
    for f in fields(cls)
)