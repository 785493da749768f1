import pytest

pytest.importorskip("pydantic")
pytest.importorskip("yaml")

from pathlib import Path

from pydantic import ValidationError

from codoncanvas.config import DEFAULTS_PATH, ConfigSchema, load_config


def test_defaults_file_matches_schema_defaults():
    assert DEFAULTS_PATH.exists()
    assert load_config(DEFAULTS_PATH) == ConfigSchema()


def test_partial_yaml_keeps_other_defaults(tmp_path):
    path = tmp_path / "cfg.yaml"
    path.write_text("vm:\n  max_instructions: 50\nrender:\n  width: 200\n")
    cfg = load_config(path)
    assert cfg.vm.max_instructions == 50
    assert cfg.render.width == 200
    assert cfg.render.height == 400
    assert cfg.outputs.run_dir == Path("runs")


def test_empty_yaml_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_config(path) == ConfigSchema()


@pytest.mark.parametrize(
    "text",
    [
        "vm:\n  max_instructions: 0\n",
        "render:\n  value_range: -1\n",
        "mutation:\n  indel_length: 0\n",
    ],
)
def test_invalid_values_are_rejected(tmp_path, text):
    path = tmp_path / "bad.yaml"
    path.write_text(text)
    with pytest.raises(ValidationError):
        load_config(path)
