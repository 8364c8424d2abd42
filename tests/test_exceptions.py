from __future__ import annotations

import logging
import sys
import threading

from notefsm.infra import FsmError, GraphDescriptionError, UnresolvedTargetError, install_exception_hook


def test_error_hierarchy():
    assert issubclass(GraphDescriptionError, ValueError)
    assert issubclass(UnresolvedTargetError, LookupError)
    error = UnresolvedTargetError("ready", "start", "runing")
    assert isinstance(error, FsmError)
    assert "runing" in str(error)


def test_exception_hook_logs_and_delegates(monkeypatch, caplog):
    seen = []
    monkeypatch.setattr(sys, "excepthook", lambda *exc_info: seen.append(exc_info[0]))
    monkeypatch.setattr(threading, "excepthook", threading.excepthook)

    install_exception_hook()
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        with caplog.at_level(logging.CRITICAL, logger="notefsm.exceptions"):
            sys.excepthook(*sys.exc_info())

    assert seen == [RuntimeError]
    assert "Unhandled exception: boom" in caplog.text
