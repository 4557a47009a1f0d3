import logging
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from glow_portrait import cli
from glow_portrait.config import ENV_KEYS
from glow_portrait.logging_setup import configure_logging


def flush_root_handlers():
    for handler in logging.getLogger().handlers:
        handler.flush()


def test_configure_logging_writes_to_file(tmp_path):
    log_file = tmp_path / "logs" / "glow.log"

    logger = configure_logging(level=logging.DEBUG, log_file=log_file, include_stream=False)
    logger.debug("Layer %s finished", "glow")
    flush_root_handlers()

    assert logger.name == "glow_portrait"
    contents = log_file.read_text(encoding="utf-8")
    assert " - DEBUG - Layer glow finished" in contents


def test_verbose_level_stays_inside_package(tmp_path):
    log_file = tmp_path / "glow.log"

    configure_logging(level=logging.DEBUG, log_file=log_file, include_stream=False)
    logging.getLogger("glow_portrait.rendering").debug("stage timing")
    logging.getLogger("some.library").debug("library chatter")
    flush_root_handlers()

    contents = log_file.read_text(encoding="utf-8")
    assert "stage timing" in contents
    assert "library chatter" not in contents
    assert logging.getLogger().level == logging.WARNING


def test_configure_logging_named_logger():
    logger = configure_logging("glow_portrait.tests", level=logging.WARNING)

    assert logger.name == "glow_portrait.tests"
    assert logger.level == logging.WARNING


def test_unopenable_log_file_raises(tmp_path):
    with pytest.raises(OSError):
        configure_logging(log_file=tmp_path, include_stream=False)


def test_cli_falls_back_to_stderr_when_log_file_fails(tmp_path, monkeypatch):
    for key in ENV_KEYS.values():
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    output = tmp_path / "out.png"

    exit_code = cli.main(
        ["--log-file", str(tmp_path), "render", "-o", str(output), "--size", "512", "--particles", "0", "--no-lightning"]
    )

    assert exit_code == 0
    assert output.exists()
