# clisources

Look up values for command-line flags from an ordered series of sources.
The first source that has a value wins.

Everything lives in the module `clisources.value_source`.

## Sources

- **Environment variables**: `env_var(key)` returns an `EnvVarValueSource`;
  `env_vars(*keys)` returns a `ValueSourceChain` of them. Surrounding
  whitespace in the key is ignored when the variable is read.
- **Files**: `file(path)` returns a `FileValueSource`; `files(*paths)` returns
  a `ValueSourceChain` of them. The whole content of the file is the value; a
  file that cannot be read has no value.
- **Nested maps**: `MapSource(name, mapping)` holds a mapping, such as a parsed
  configuration document. `MapValueSource(key, source)` reads one entry out of
  it, where `key` may be a dot-separated path such as `"server.port"`.

## Installation

```
pip install clisources
```

## Usage

```python
from clisources.value_source import (
    MapSource,
    MapValueSource,
    ValueSourceChain,
    env_vars,
    files,
)

chain = env_vars("APP_PORT", "PORT")
chain.append(files("/etc/app/port"))

config = MapSource("config", {"server": {"port": 8080}})
chain.append(ValueSourceChain(MapValueSource("server.port", config)))

found = chain.lookup_with_source()
if found is not None:
    value, source = found
    print(f"port {value} taken from {source}")

print(chain.env_keys())  # ['APP_PORT', 'PORT']
```

`lookup()` on any source returns the value as a string, or `None` when the
source has no value. `ValueSourceChain.lookup_with_source()` returns a
`(value, source)` pair for the first source that resolves, or `None`.

`MapSource.lookup(name)` returns the raw value at the dotted path and raises
`KeyError` when there is none. `MapValueSource` turns that value into a
string: `8080` becomes `"8080"`, `True` becomes `"true"`, `None` becomes
`"<nil>"`, a list `[10]` becomes `"[10]"` and a mapping becomes
`"map[key:value ...]"` with its keys sorted.

Every source has a readable `str()`, for example `environment variable "PORT"`,
`file "/etc/app/port"` or `key "server.port" from map source "config"`, and a
`repr()` that describes how it was built. A chain's `str()` joins those of its
sources with commas.

To write a source of your own, subclass `ValueSource` and implement
`lookup()`. Sources that also subclass `EnvValueSource`, have a `key` and
return `True` from `is_from_env()` are listed by `ValueSourceChain.env_keys()`.

## What this package does not do

It only looks values up. It does not define flags, parse command lines, print
help or read configuration files into mappings; hand `MapSource` a mapping
that has already been loaded.

## Running the tests

```
pip install -e ".[test]"
pytest
```