import json
import sys
from pathlib import Path

import cv2
import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from glow_portrait import cli
from glow_portrait.config import DEFAULT_STYLE, ENV_KEYS


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    for key in ENV_KEYS.values():
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


def test_render_without_input_writes_png(tmp_path):
    output = tmp_path / "out.png"

    exit_code = cli.main(["render", "--output", str(output), "--size", "512", "--particles", "20"])

    assert exit_code == 0
    decoded = cv2.imread(str(output), cv2.IMREAD_UNCHANGED)
    assert decoded.shape == (512, 512, 4)


def test_render_with_input_and_config(tmp_path):
    source = tmp_path / "face.png"
    cv2.imwrite(str(source), np.full((300, 200, 3), 120, dtype=np.uint8))
    config = tmp_path / "style.json"
    config.write_text(json.dumps({"style": {"output_size": 768, "lightning": False}}), encoding="utf-8")
    output = tmp_path / "portrait.png"

    exit_code = cli.main(
        ["render", "-i", str(source), "-o", str(output), "--config", str(config), "--particles", "0"]
    )

    assert exit_code == 0
    assert cv2.imread(str(output), cv2.IMREAD_UNCHANGED).shape == (768, 768, 4)


def test_render_rejects_invalid_size(tmp_path):
    output = tmp_path / "out.png"

    assert cli.main(["render", "--output", str(output), "--size", "-5"]) == 2
    assert not output.exists()


def test_render_rejects_malformed_config(tmp_path):
    config = tmp_path / "style.json"
    config.write_text("{not json", encoding="utf-8")
    output = tmp_path / "out.png"

    assert cli.main(["render", "--config", str(config), "-o", str(output)]) == 2
    assert not output.exists()


def test_defaults_rejects_malformed_config(tmp_path, capsys):
    config = tmp_path / "style.json"
    config.write_text("{not json", encoding="utf-8")

    assert cli.main(["defaults", "--config", str(config)]) == 2
    assert capsys.readouterr().out == ""


def test_render_rejects_missing_input(tmp_path):
    assert cli.main(["render", "-i", str(tmp_path / "nope.png"), "-o", str(tmp_path / "out.png")]) == 2


def test_render_default_output_name(tmp_path):
    assert cli.main(["render", "--size", "512", "--particles", "0", "--no-lightning"]) == 0

    written = list(tmp_path.glob("spirit-pfp-*.png"))
    assert len(written) == 1


def test_defaults_prints_reset_style(capsys):
    assert cli.main(["defaults"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload == {"style": DEFAULT_STYLE.to_dict()}
    assert payload["style"]["output_size"] == 1024
    assert payload["style"]["background"] == "dark"


def test_lightning_flags_default_to_unset():
    parser = cli.build_parser()

    assert parser.parse_args(["render"]).lightning is None
    assert parser.parse_args(["render", "--no-lightning"]).lightning is False
    assert parser.parse_args(["render", "--lightning"]).lightning is True
