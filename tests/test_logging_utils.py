from __future__ import annotations

import logging

from zen_decrypt.logging_utils import configure_logging


def test_configure_logging_writes_to_requested_file(tmp_path, reset_root_logging) -> None:
    log_path = tmp_path / "logs" / "zen-decrypt.log"

    actual = configure_logging(log_path=str(log_path), also_console=False)
    logging.getLogger("zen_decrypt.test").info("hello from test")
    for h in logging.getLogger().handlers:
        h.flush()

    assert actual == str(log_path)
    assert "hello from test" in log_path.read_text(encoding="utf-8")


def test_configure_logging_is_idempotent(tmp_path, reset_root_logging) -> None:
    root = logging.getLogger()
    first = configure_logging(log_path=str(tmp_path / "a.log"))
    handler_count = len(root.handlers)

    second = configure_logging(log_path=str(tmp_path / "b.log"))

    assert second == first
    assert len(root.handlers) == handler_count


def test_configure_logging_falls_back_to_cwd(tmp_path, monkeypatch, reset_root_logging) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("", encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    actual = configure_logging(log_path=str(blocker / "zen-decrypt.log"), also_console=False)

    assert actual == str(tmp_path / "zen-decrypt.log")
