import pytest

from loadtestkit.configure import (
    DefaultsData,
    TemplateError,
    generate_config,
    main,
    render_template,
)
from loadtestkit.defaults import Defaults, DefaultsError

TEMPLATE = """\
componentNamespace: default
cloneImage: {{ .InitImagePrefix }}clone:{{ .Version }}
readyImage: {{ .InitImagePrefix }}ready:{{ .Version }}
driverImage: {{ .RunImagePrefix }}driver:{{ .Version }}
killAfter: {{ .KillAfter }}
languages:
- language: cxx
  buildImage: {{ .BuildImagePrefix }}cxx:{{ .Version }}
  runImage: {{ .RunImagePrefix }}cxx:{{ .Version }}
"""

INVALID_TEMPLATE = """\
cloneImage: ""
readyImage: ready:{{ .Version }}
driverImage: driver:{{ .Version }}
killAfter: {{ .KillAfter }}
"""


def _data():
    return DefaultsData(
        version="v1",
        init_image_prefix="init.example/",
        build_image_prefix="build.example/",
        run_image_prefix="run.example/",
        kill_after=20.0,
    )


def test_render_substitutes_fields():
    data = _data()
    output = render_template("{{ .RunImagePrefix }}go:{{.Version}}", data)
    assert output == data.run_image_prefix + "go:" + data.version


def test_render_integral_float_has_no_fraction():
    assert render_template("{{ .KillAfter }}", _data()) == "20"


def test_render_fractional_float_round_trips():
    data = DefaultsData(kill_after=2.5)
    assert float(render_template("{{ .KillAfter }}", data)) == 2.5


def test_render_trim_markers_and_comments():
    output = render_template("a  \n {{- .Version -}} \n  b{{/* note */}}", _data())
    assert output == "a" + _data().version + "b"


def test_render_accepts_mapping():
    assert render_template("x{{ .Name }}y", {"Name": "mid"}) == "xmidy"


def test_render_unknown_field_raises():
    with pytest.raises(TemplateError, match="Missing"):
        render_template("{{ .Missing }}", _data())


def test_render_unclosed_action_raises():
    with pytest.raises(TemplateError, match="unclosed"):
        render_template("image: {{ .Version", _data())


def test_render_unsupported_action_raises():
    with pytest.raises(TemplateError):
        render_template("{{ if .Version }}x{{ end }}", _data())


def test_render_empty_action_raises():
    with pytest.raises(TemplateError):
        render_template("{{ }}", _data())


def test_generate_config_produces_valid_defaults():
    data = _data()
    defaults = Defaults.from_yaml(generate_config(TEMPLATE, data, True))
    assert defaults.clone_image == data.init_image_prefix + "clone:" + data.version
    assert defaults.driver_image == data.run_image_prefix + "driver:" + data.version
    assert defaults.languages[0].build_image == data.build_image_prefix + "cxx:v1"
    assert defaults.kill_after == data.kill_after


def test_generate_config_rejects_invalid_output():
    with pytest.raises(DefaultsError, match="clone"):
        generate_config(INVALID_TEMPLATE, _data(), True)


def test_generate_config_without_validation_keeps_output():
    output = generate_config(INVALID_TEMPLATE, _data(), False)
    assert 'cloneImage: ""' in output


def test_main_writes_output(tmp_path):
    template = tmp_path / "defaults.yaml.tmpl"
    template.write_text(TEMPLATE)
    output = tmp_path / "defaults.yaml"

    code = main(["-version", "v2", "-kill-after", "30", str(template), str(output)])

    assert code == 0
    defaults = Defaults.from_yaml(output.read_text())
    assert defaults.ready_image == "ready:v2"
    assert defaults.kill_after == 30.0


def test_main_requires_kill_after(tmp_path, capsys):
    template = tmp_path / "t.tmpl"
    template.write_text(TEMPLATE)

    code = main([str(template), str(tmp_path / "out.yaml")])

    assert code == 1
    assert "missing required flag: kill-after" in capsys.readouterr().err


def test_main_requires_two_arguments(capsys):
    code = main(["-kill-after", "5"])
    assert code == 1
    assert "missing required arguments" in capsys.readouterr().err


def test_main_reports_invalid_config(tmp_path, capsys):
    template = tmp_path / "t.tmpl"
    template.write_text(INVALID_TEMPLATE)

    code = main(["-kill-after", "5", str(template), str(tmp_path / "out.yaml")])

    assert code == 1
    assert "generated config is invalid" in capsys.readouterr().err


def test_main_validate_false_skips_checks(tmp_path):
    template = tmp_path / "t.tmpl"
    template.write_text(INVALID_TEMPLATE)
    output = tmp_path / "out.yaml"

    code = main(["-validate=false", "-kill-after", "5", str(template), str(output)])

    assert code == 0
    assert "driverImage: driver:latest" in output.read_text()


def test_main_missing_template_fails(tmp_path, capsys):
    code = main(
        ["-kill-after", "5", str(tmp_path / "absent.tmpl"), str(tmp_path / "o.yaml")]
    )
    assert code == 1
    assert "could not open and parse <template-file>" in capsys.readouterr().err


def test_main_bad_validate_value_exits():
    with pytest.raises(SystemExit) as info:
        main(["-validate=maybe", "-kill-after", "5", "a", "b"])
    assert info.value.code == 2