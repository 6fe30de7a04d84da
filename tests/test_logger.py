import re
import time
from pathlib import Path

import pytest

from nhpkit import logger as log
from nhpkit.logger import AsyncLogWriter, Logger, LogLevel


def _read_log(directory: Path, name: str) -> str:
    files = sorted(directory.glob(f"{name}-????-??-??.log"))
    return "".join(f.read_text() for f in files)


@pytest.fixture
def restore_global():
    yield
    log.set_global_logger(Logger("", LogLevel.AUDIT, "", ""))


def test_info_line_format(tmp_path):
    lg = Logger("NHP", LogLevel.INFO, str(tmp_path), "app")
    lg.info("hello %d", 5)
    lg.close()
    content = _read_log(tmp_path, "app")
    match = re.fullmatch(
        r"(\d{4}/\d{2}/\d{2}) (\d{2}:\d{2}:\d{2}) (\S+):(\d+): (.*)\n",
        content,
    )
    assert match is not None and match.group(3) == "test_logger.py"
    assert int(match.group(4)) > 0
    assert match.group(5) == "NHP [Info] hello 5"
    assert content.count("\n") == 1


def test_level_filtering(tmp_path):
    lg = Logger("X", LogLevel.ERROR, str(tmp_path), "app")
    lg.info("not shown")
    lg.debug("not shown either")
    lg.error("shown %s", "err")
    lg.warning("warn")
    lg.close()
    content = _read_log(tmp_path, "app")
    assert "not shown" not in content
    assert "X [Error] shown err" in content
    assert "X [Warning] warn" in content


def test_silent_level_writes_nothing(tmp_path):
    lg = Logger("X", LogLevel.SILENT, str(tmp_path), "app")
    lg.critical("nothing")
    lg.close()
    assert _read_log(tmp_path, "app") == ""


def test_evaluate_and_audit_streams(tmp_path):
    lg = Logger("S", LogLevel.TRACE, str(tmp_path), "app")
    lg.evaluate("eval msg")
    lg.audit("audit msg")
    lg.transaction("trx msg")
    lg.trace("trace msg")
    lg.close()
    evaluate = _read_log(tmp_path, "app-evaluate")
    audit = _read_log(tmp_path, "app-audit")
    general = _read_log(tmp_path, "app")
    assert re.search(r"\d{2}:\d{2}:\d{2}\.\d{6} .*S \[Evaluate\] eval msg", evaluate)
    assert "S [Audit] audit msg" in audit
    assert "S [Transaction] trx msg" in audit
    assert "S [Trace] trace msg" in general
    assert "audit msg" not in general


def test_sub_logger_shares_writer_and_level(tmp_path):
    parent = Logger("P", LogLevel.DEBUG, str(tmp_path), "app")
    sub = parent.new_sub_logger("C", LogLevel.DEBUG)
    sub.debug("from child")
    parent.set_log_level(LogLevel.SILENT)
    sub.debug("suppressed")
    parent.close()
    content = _read_log(tmp_path, "app")
    assert "C [Debug] from child" in content
    assert "suppressed" not in content


def test_closed_logger_discards(tmp_path):
    lg = Logger("P", LogLevel.INFO, str(tmp_path), "app")
    lg.info("before")
    lg.close()
    lg.info("after")
    content = _read_log(tmp_path, "app")
    assert "before" in content
    assert "after" not in content


def test_writer_rejects_after_close(tmp_path):
    lg = Logger("P", LogLevel.INFO, str(tmp_path), "app")
    w = lg.writer()
    assert w.write(b"raw line\n") == 9
    lg.close()
    assert "raw line" in _read_log(tmp_path, "app")
    with pytest.raises(ValueError):
        w.write(b"more")


def test_stdout_writer(capsys):
    writer = AsyncLogWriter()
    writer.start()
    writer.write("to stdout\n")
    writer.close()
    assert "to stdout\n" in capsys.readouterr().out


def test_date_update_queue_receives_old_date(tmp_path):
    lg = Logger("P", LogLevel.INFO, str(tmp_path), "app")
    q = lg.date_update_queue()
    lg.writer()._curr_date = "2000-01-01"
    assert q.get(timeout=2) == "2000-01-01"
    lg.close()
    assert lg.date_update_queue() is None


def test_global_info_log(tmp_path, restore_global):
    log.set_global_logger(Logger("NHP-LogTest", LogLevel.DEBUG, str(tmp_path), "logtest"))
    for _ in range(3):
        log.info("Info log test")
        time.sleep(0.01)
    log.close()
    lines = _read_log(tmp_path, "logtest").splitlines()
    assert len(lines) == 3
    for line in lines:
        assert re.search(r"test_logger\.py:\d+: NHP-LogTest \[Info\] Info log test$", line)


def test_set_global_logger_closes_previous(tmp_path, restore_global):
    first = Logger("A", LogLevel.INFO, str(tmp_path / "a"), "first")
    log.set_global_logger(first)
    log.set_global_logger(Logger("B", LogLevel.INFO, str(tmp_path / "b"), "second"))
    first.info("ignored")
    log.info("kept")
    log.close()
    assert log.get_global_logger().log_level == LogLevel.INFO
    assert "ignored" not in _read_log(tmp_path / "a", "first")
    assert "B [Info] kept" in _read_log(tmp_path / "b", "second")


def test_log_level_values():
    assert [int(level) for level in LogLevel] == [0, 1, 2, 3, 4, 5]
    assert log.blackhole_logf("anything %s", 1) is None