# pklkit

`pklkit` holds the pieces a Python program needs to work with the Pkl
configuration language next to a Pkl evaluator:

- `pklkit.values` — Python shapes for Pkl's own types: `Object`, `Pair`,
  `Regex`, `Class`, `TypeAlias`, `IntSeq`, `Duration` with `DurationUnit`, and
  `DataSize` with `DataSizeUnit`.
- `pklkit.version` — `parse_semver` and `Semver`, for comparing Pkl releases.
- `pklkit.msgapi` — the msgpack messages exchanged with the evaluator, with
  `decode` and `read_messages` for incoming traffic and `to_msgpack()` on every
  outgoing message.
- `pklkit.reader` — `ResourceReader` and `ModuleReader` base classes for custom
  URI schemes, and `PathElement`.
- `pklkit.fs_reader` — `FsModuleReader` and `FsResourceReader`, which serve
  files from a directory.
- `pklkit.logger` — `Logger`, `StreamLogger`, `new_logger`,
  `format_log_message`, `STDERR_LOGGER` and `NOOP_LOGGER`.
- `pklkit.module_source` — `ModuleSource` with `file_source`, `text_source`
  and `uri_source`.
- `pklkit.schema` — `register_mapping` and `lookup_mapping`, a registry from
  Pkl class names to Python types.
- `pklkit.options` — `EvaluatorOptions`, built from small option functions.
- `pklkit.project` — `Project` and its settings, with `Project.dependencies()`.
- `pklkit.external_reader` — `ExternalReaderClient`, which lets a Python
  program act as an external module or resource reader for Pkl.

Install with `pip install .`; the only runtime dependency is `msgpack`.

## Values

```python
from pklkit.values import DataSize, Duration, to_data_size_unit, to_duration_unit

size = DataSize(value=5.3, unit=to_data_size_unit("kib"))
print(str(size))                                   # 5.3.kib
print(size.to_unit(to_data_size_unit("b")))

timeout = Duration(value=5, unit=to_duration_unit("min"))
print(timeout.to_timedelta())                      # 0:05:00
```

Unknown unit names raise `ValueError`. A `DataSize` whose unit is not a known
`DataSizeUnit` prints its unit as `<invalid>`.

## Versions

```python
from pklkit.version import parse_semver

current = parse_semver("0.27.1")
print(current.is_greater_than(parse_semver("0.26.0")))   # True
print(current.compare_to_string("0.27.1"))               # 0
```

`parse_semver` takes the first version found in the text and raises
`ValueError` when there is none. Pre-release identifiers take part in
ordering; build metadata does not.

## Module sources

```python
from pklkit.module_source import file_source, text_source, uri_source

file_source("/usr", "local", "lib", "config.pkl").uri.geturl()  # file:///usr/local/lib/config.pkl
text_source('name = "example"').uri.geturl()                    # repl:text
uri_source("package://example.com/pkg@1.0.0#/main.pkl")
```

`ModuleSource.uri` is a `urllib.parse.SplitResult`. Relative paths given to
`file_source` are resolved against the current working directory.

## Message protocol

Every outgoing message (`CreateEvaluator`, `Evaluate`, `CloseEvaluator`,
`ReadResourceResponse`, `ListModulesResponse`, …) encodes itself as
`[code, body]` with `to_msgpack()`. `decode(payload)` turns one message back
into its incoming class, and `read_messages(stream)` yields messages from a
binary stream until it ends. Unknown message codes raise `ValueError`.

## Evaluator options

Options are assembled by applying option functions in order:

```python
from pklkit.options import (
    ExternalReader,
    build_evaluator_options,
    preconfigured_options,
    with_external_resource_reader,
    with_fs,
)
from pklkit.version import parse_semver

opts = build_evaluator_options(
    parse_semver("0.27.0"),
    preconfigured_options,
    with_fs("./templates", "tmpl"),
    with_external_resource_reader("fib", ExternalReader(executable="fib-reader")),
)
payload = opts.to_message().to_msgpack()
```

`build_evaluator_options` always allows the `repl:text` module, and raises
`ValueError` when HTTP settings are used with a Pkl older than 0.26, or
external readers with a Pkl older than 0.27.

Other option functions: `with_os_env`, `with_default_allowed_resources`,
`with_default_allowed_modules`, `with_default_cache_dir` (`~/.pkl/cache`),
`with_resource_reader`, `with_module_reader`, `with_external_module_reader`,
`with_project_evaluator_settings`, `with_project_dependencies`,
`with_project`, and `maybe_preconfigured_options`, which fills in only what
is not set yet.

`with_fs` serves files under a directory: within Pkl, paths are rooted at
`/`, so `foo.txt` in the directory is `scheme:/foo.txt`. Listings are sorted
by name and skip symbolic links.

## Projects

A `Project` keeps its dependencies in `raw_dependencies`, each either another
`Project` (a local dependency) or a `ProjectRemoteDependency`.
`Project.dependencies()` splits them into a `ProjectDependencies` of local and
remote entries, and `with_project(project)` applies both its evaluator
settings and its dependencies to `EvaluatorOptions`.

## Writing an external reader

Subclass `ResourceReader` (or `ModuleReader`), provide the `scheme`,
`is_globbable` and `has_hierarchical_uris` properties (and `is_local` for
module readers), implement `read` and `list_elements`, and hand the reader to
an external reader client. The client speaks the message protocol over
standard input and output by default:

```python
from pklkit.external_reader import (
    new_external_reader_client,
    with_external_client_resource_reader,
)
from pklkit.reader import ResourceReader


class GreetingReader(ResourceReader):
    scheme = "greet"
    is_globbable = False
    has_hierarchical_uris = False

    def list_elements(self, url):
        return []

    def read(self, url):
        return f"hello, {url.path}".encode()


client = new_external_reader_client(
    with_external_client_resource_reader(GreetingReader()),
)
client.run()
```

`run()` blocks until the input ends, the evaluator asks the process to close,
or `close()` is called; it raises `ExternalReaderError` when a message cannot
be read or written. Errors raised by a reader are sent back to Pkl as the
response's error text. Use `with_external_client_streams` to talk over other
binary streams.

## Logging and debugging

`new_logger(stream)` returns a logger that writes lines of the form
`pkl: WARN: message (frame-uri)`. Setting the environment variable
`PKL_DEBUG=1` makes the library write its own debugging messages, prefixed
`[pklkit] `, to standard error.

## What this package does not do

`pklkit` does not start, manage or talk to a Pkl evaluator process itself,
and it cannot evaluate Pkl modules or load a `PklProject` file. It has no
decoder that turns evaluation results into Python objects: the
`pklkit.schema` registry records class-to-type mappings but nothing in the
package reads them back during decoding. It provides no command-line program.