# loadtestkit

Tools for describing and preparing gRPC load tests that run as `LoadTest`
custom resources (group `e2etest.grpc.io`, version `v1`) on a Kubernetes
cluster.

The package has these modules:

- **`loadtestkit.types`**: data classes for the `LoadTest` resource and its
  parts (`LoadTestSpec`, `Driver`, `Server`, `Client`, `Clone`, `Build`,
  `Container`, `EnvVar`, `Results`, `LoadTestStatus`, `LoadTestState`,
  `ObjectMeta`, `LoadTestList`, `GroupVersion`). `LoadTest` and
  `LoadTestList` convert to and from plain dictionaries with `to_dict()` and
  `from_dict()`. `LoadTest.deep_copy()` returns an independent copy.
- **`loadtestkit.defaults`**: the `Defaults` configuration. It holds the
  default clone, ready and driver images, per-language build and run images
  (`LanguageDefault`), default pool labels (`PoolLabelMap`), the default
  component namespace and the kill-after grace period. It validates itself
  and fills in missing fields of a load test. `ImageMap` looks up images by
  language.
- **`loadtestkit.clientset`**: `LoadTestClient`, a small REST client that
  creates, fetches, lists and deletes `LoadTest` resources in a namespace.
- **`loadtestkit.configure`**: renders a defaults template into a defaults
  file and can check the result. It is also available as the
  `loadtestkit-configure` command.
- **`loadtestkit.constants`**: well-known names, ports, mount paths and
  environment variable names shared by the test components, such as
  `DRIVER_PORT`, `SERVER_PORT`, `RUN_CONTAINER_NAME` and `KILL_AFTER_ENV`.

## Installation

```
pip install loadtestkit
```

## Filling defaults on a load test

```python
from loadtestkit.defaults import Defaults, DefaultsError
from loadtestkit.types import LoadTest

with open("defaults.yaml") as fh:
    defaults = Defaults.from_yaml(fh.read())
defaults.validate()

test = LoadTest.from_dict({
    "metadata": {"name": "go-ping-pong"},
    "spec": {
        "servers": [{"language": "go", "run": [{"command": ["/src/workspace/bin/worker"]}]}],
        "clients": [{"language": "go", "run": [{"command": ["/src/workspace/bin/worker"]}]}],
        "timeoutSeconds": 900,
        "ttlSeconds": 86400,
    },
})

try:
    defaults.set_load_test_defaults(test)
except DefaultsError as exc:
    print(f"cannot prepare test: {exc}")
```

`Defaults.validate()` raises `DefaultsError` when the clone, ready or driver
image is missing, when a language entry lacks a name, build image or run
image, or when `killAfter` is negative.

`set_load_test_defaults(test)` does the following:

- It sets the namespace to the default component namespace if the test has
  none.
- It adds a driver if there is none. The driver's language defaults to
  `cxx`, it gets a `main` run container if it has none, and that container
  gets the driver image if it names no image.
- It gives every driver, server and client without a name a random UUID as
  its name.
- It fills a missing clone image with the default clone image.
- It fills a missing build image with the language's build image.
- For servers and clients, it gives the first run container the language's
  run image if that container names no image. It also adds a `KILL_AFTER`
  environment variable to that container.

When no default exists for a language that needs one, it raises
`DefaultsError`. The message names the component that failed.

`LoadTestState.is_terminated()` tells whether a test has finished, which is
the case for the `Succeeded` and `Errored` states.

## Talking to the cluster

```python
from loadtestkit.clientset import LoadTestClient, ClientError

client = LoadTestClient("https://cluster.example.com", token="token")
tests = client.load_tests("default")

created = tests.create(test)
fetched = tests.get(created.name)
names = [item.name for item in tests.list().items]
tests.delete(created.name)
```

`LoadTestClient` accepts these keyword arguments:

- `token`: sent as a bearer token.
- `user_agent`
- `session`: a `requests.Session`.
- `verify`: passed to `requests`.
- `timeout`

`load_tests(namespace)` returns a `LoadTestGetter` with `create(test)`,
`get(name)`, `list()` and `delete(name)`. A failed request raises
`ClientError`, which carries `status_code` and `reason` when the server
answered.

## Generating a defaults file

A defaults template is a YAML file with placeholders of the form
`{{ .Field }}`. The fields available are:

- `Version`
- `InitImagePrefix`
- `BuildImagePrefix`
- `RunImagePrefix`
- `KillAfter`

Comments (`{{/* ... */}}`) and whitespace trimming (`{{- ... -}}`) are also
understood. Render a template with:

```
loadtestkit-configure --kill-after 20 defaults_template.yaml defaults.yaml
```

The first argument is the template and the second is the file to write. The
`--kill-after` value, in seconds, is required. The command takes these
options, each also accepted with a single dash:

- `--version`: default `latest`.
- `--init-image-prefix`
- `--build-image-prefix`
- `--run-image-prefix`
- `-validate` or `-validate=false`: turns checking of the generated file on
  or off. Checking is on by default.

From Python:

- `render_template(template, data)` renders a template string with a
  `DefaultsData` or a mapping. It raises `TemplateError` for bad templates or
  unknown fields.
- `generate_config(template, data, validate)` also parses the result as
  `Defaults` and validates it. It raises `DefaultsError` when the result is
  invalid.

## What this package does not do

This package does not run a controller that turns `LoadTest` resources into
pods, and it does not watch or update their status. It also does not read
kubeconfig files or in-cluster credentials: give `LoadTestClient` the API
server address and a token yourself.

## Running the tests

```
pip install -e ".[test]"
pytest
```