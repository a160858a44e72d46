"""Generate a defaults file for the controller from a template."""

from __future__ import annotations

import argparse
import math
import re
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TextIO

from loadtestkit.defaults import Defaults, DefaultsError


class TemplateError(ValueError):
    """Raised when a template cannot be parsed or executed."""


@dataclass
class DefaultsData:
    """Values that a defaults template may refer to."""

    version: str = "latest"
    init_image_prefix: str = ""
    build_image_prefix: str = ""
    run_image_prefix: str = ""
    kill_after: float = math.nan

    def _template_fields(self) -> dict[str, Any]:
        return {
            "Version": self.version,
            "InitImagePrefix": self.init_image_prefix,
            "BuildImagePrefix": self.build_image_prefix,
            "RunImagePrefix": self.run_image_prefix,
            "KillAfter": self.kill_after,
        }


@dataclass(frozen=True)
class _Field:
    name: str


_FIELD_RE = re.compile(r"\.([A-Za-z_][A-Za-z0-9_]*)")
_SPACE = " \t\r\n"


def _parse(template: str) -> list[str | _Field]:
    nodes: list[str | _Field] = []
    trim_next = False
    pos = 0
    while True:
        start = template.find("{{", pos)
        text = template[pos:] if start < 0 else template[pos:start]
        if trim_next:
            text = text.lstrip(_SPACE)
        if start < 0:
            if text:
                nodes.append(text)
            return nodes

        end = template.find("}}", start + 2)
        if end < 0:
            line = template.count("\n", 0, start) + 1
            raise TemplateError(f"line {line}: unclosed action")
        body = template[start + 2 : end]

        if len(body) >= 2 and body[0] == "-" and body[1] in _SPACE:
            text = text.rstrip(_SPACE)
            body = body[1:]
        trim_next = len(body) >= 2 and body[-1] == "-" and body[-2] in _SPACE
        if trim_next:
            body = body[:-1]
        if text:
            nodes.append(text)

        action = body.strip(_SPACE)
        line = template.count("\n", 0, start) + 1
        if action.startswith("/*") and action.endswith("*/") and len(action) >= 4:
            pass
        elif not action:
            raise TemplateError(f"line {line}: missing value for command")
        else:
            match = _FIELD_RE.fullmatch(action)
            if match is None:
                raise TemplateError(f"line {line}: unsupported action {{{{{action}}}}}")
            nodes.append(_Field(match.group(1)))
        pos = end + 2


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "+Inf" if value > 0 else "-Inf"
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    return str(value)


def _execute(nodes: list[str | _Field], data: DefaultsData | Mapping[str, Any]) -> str:
    if isinstance(data, DefaultsData):
        fields: Mapping[str, Any] = data._template_fields()
        type_name = type(data).__name__
    else:
        fields = data
        type_name = "map"
    parts = []
    for node in nodes:
        if isinstance(node, _Field):
            if node.name not in fields:
                raise TemplateError(
                    f"can't evaluate field {node.name} in type {type_name}"
                )
            parts.append(_format_value(fields[node.name]))
        else:
            parts.append(node)
    return "".join(parts)


def render_template(template: str, data: DefaultsData | Mapping[str, Any]) -> str:
    """Replace ``{{ .Field }}`` placeholders in ``template`` with values from ``data``."""
    return _execute(_parse(template), data)


def generate_config(
    template: str, data: DefaultsData | Mapping[str, Any], validate: bool = True
) -> str:
    """Render a defaults template and, optionally, check the result."""
    output = render_template(template, data)
    if validate:
        try:
            Defaults.from_yaml(output).validate()
        except DefaultsError as err:
            raise DefaultsError(f"generated config is invalid: {err}") from err
    return output


_DESCRIPTION = """\
Configure is an executable that generates a defaults file for the manager. It
accepts a template file and replaces placeholders with data that may change
based on where the manager and container images will live and run.

This configure tool accepts two arguments. The first is <template-file>, which
is the input YAML file with placeholders for string interpolation. The second is
<output-file>, which is the path to write the output on disk.

Placeholders have the form {{ .Field }}. All flags passed to the script (except
-validate) are accessible within the template as Version, InitImagePrefix,
BuildImagePrefix, RunImagePrefix and KillAfter.
"""

_EPILOG = """\
  -validate[=BOOL]  validate the output configuration for correctness
                    (default true)
"""

_VALIDATE_RE = re.compile(r"--?validate(?:=(.*))?")
_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="configure",
        usage="%(prog)s <template-file> <output-file>",
        description=_DESCRIPTION,
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-version", "--version", dest="version", default="latest",
        help="version of all docker images to use",
    )
    parser.add_argument(
        "-init-image-prefix", "--init-image-prefix", dest="init_image_prefix",
        default="", help="prefix to append to init container images (optional)",
    )
    parser.add_argument(
        "-build-image-prefix", "--build-image-prefix", dest="build_image_prefix",
        default="", help="prefix to append to build container images (optional)",
    )
    parser.add_argument(
        "-run-image-prefix", "--run-image-prefix", dest="run_image_prefix",
        default="", help="prefix to append to container images (optional)",
    )
    parser.add_argument(
        "-kill-after", "--kill-after", dest="kill_after", type=float,
        default=math.nan,
        help="time allowed for pod to respond after timeout, in seconds",
    )
    parser.add_argument("files", nargs="*", help=argparse.SUPPRESS)
    return parser


def _extract_validate(
    parser: argparse.ArgumentParser, argv: list[str]
) -> tuple[bool, list[str]]:
    validate = True
    rest: list[str] = []
    tokens = iter(argv)
    for token in tokens:
        if token == "--":
            rest.append(token)
            rest.extend(tokens)
            break
        match = _VALIDATE_RE.fullmatch(token)
        if match is None:
            rest.append(token)
            continue
        value = match.group(1)
        if value is None or value in _TRUE:
            validate = True
        elif value in _FALSE:
            validate = False
        else:
            parser.error(f"invalid boolean value {value!r} for -validate")
    return validate, rest


def _fail(
    parser: argparse.ArgumentParser, stream: TextIO, message: str, show_usage: bool
) -> int:
    if show_usage:
        parser.print_help(stream)
    print(message, file=stream)
    return 1


def main(argv: list[str] | None = None) -> int:
    """Run the configure command; returns the process exit code."""
    parser = _build_parser()
    args_list = list(sys.argv[1:] if argv is None else argv)
    validate, args_list = _extract_validate(parser, args_list)
    args = parser.parse_args(args_list)
    err = sys.stderr

    if len(args.files) != 2:
        return _fail(parser, err, "missing required arguments", True)
    if math.isnan(args.kill_after):
        return _fail(parser, err, "missing required flag: kill-after", True)

    data = DefaultsData(
        version=args.version,
        init_image_prefix=args.init_image_prefix,
        build_image_prefix=args.build_image_prefix,
        run_image_prefix=args.run_image_prefix,
        kill_after=args.kill_after,
    )
    template_path, output_path = args.files

    try:
        nodes = _parse(Path(template_path).read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, TemplateError) as error:
        return _fail(
            parser, err, f"could not open and parse <template-file>: {error}", True
        )

    try:
        output_file = open(output_path, "w", encoding="utf-8")
    except OSError as error:
        return _fail(parser, err, f"could not create <output-file>: {error}", True)

    with output_file:
        try:
            output = _execute(nodes, data)
        except TemplateError as error:
            return _fail(
                parser, err, f"could not generate config from template: {error}", False
            )

        if validate:
            try:
                defaults = Defaults.from_yaml(output)
            except DefaultsError as error:
                return _fail(
                    parser, err, f"generated config is not parsable as YAML: {error}",
                    False,
                )
            try:
                defaults.validate()
            except DefaultsError as error:
                return _fail(parser, err, f"generated config is invalid: {error}", False)

        try:
            output_file.write(output)
        except OSError as error:
            return _fail(
                parser, err, f"could not write config to output file: {error}", False
            )
    return 0


if __name__ == "__main__":
    sys.exit(main())