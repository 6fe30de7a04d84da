"""Asynchronous, levelled logging with per-day log files."""

from __future__ import annotations

import atexit
import os
import queue
import sys
import threading
from datetime import datetime
from enum import IntEnum
from typing import Any, Optional

LOG_QUEUE_SIZE = 1024
SHOW_CALLER_FILE_LINE = True
_POLL_INTERVAL = 0.1


class LogLevel(IntEnum):
    """Log levels; a logger emits messages at its level and below."""

    SILENT = 0
    ERROR = 1
    INFO = 2
    AUDIT = 3
    DEBUG = 4
    TRACE = 5


def _today() -> str:
    return datetime.now().strftime("%Y-%m-%d")


def _format(fmt: str, args: tuple[Any, ...]) -> str:
    if not args:
        return fmt
    try:
        return fmt % args
    except (TypeError, ValueError):
        return " ".join([fmt, *map(str, args)])


class _Discard:
    """Writer that accepts everything and keeps nothing."""

    def write(self, data: str) -> int:
        return len(data)


_DISCARD = _Discard()


class AsyncLogWriter:
    """Writer that hands messages to a background thread for output.

    With neither a directory nor a name it writes to standard output;
    otherwise it appends to ``<name>-<YYYY-MM-DD>.log`` in the directory.
    """

    def __init__(
        self,
        dir_path: str = "",
        name: str = "",
        date_updated: Optional["queue.Queue[str]"] = None,
    ) -> None:
        self.dir_path = dir_path
        self.name = name
        self.date_updated = date_updated
        self._curr_date = ""
        self._queue: Optional["queue.Queue[Optional[bytes]]"] = None
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    def start(self) -> None:
        """Start the background writing thread if it is not running."""
        self._curr_date = _today()
        if self._queue is not None:
            return
        if self.dir_path:
            try:
                os.makedirs(self.dir_path, exist_ok=True)
            except OSError as exc:
                print(
                    f"Warning: AsyncLogWriter cannot create directory {self.dir_path} "
                    f"({exc}). Using current working directory instead."
                )
                self.dir_path = ""
        self._queue = queue.Queue(maxsize=LOG_QUEUE_SIZE)
        self._thread = threading.Thread(
            target=self._write_routine, args=(self._queue,), daemon=True
        )
        self._thread.start()

    def write(self, buf: bytes | str) -> int:
        """Queue a copy of ``buf`` for writing and return its length."""
        data = buf.encode("utf-8") if isinstance(buf, str) else bytes(buf)
        with self._lock:
            if self._queue is None:
                raise ValueError("log writer is not running")
            self._queue.put(data)
        return len(data)

    def _notify_date_change(self, date: str) -> None:
        if self.date_updated is None or date == self._curr_date:
            return
        try:
            self.date_updated.get_nowait()
        except queue.Empty:
            pass
        try:
            self.date_updated.put_nowait(self._curr_date)
        except queue.Full:
            pass
        self._curr_date = date

    def _flush(self, messages: list[bytes], date: str) -> None:
        if not self.dir_path and not self.name:
            out = sys.stdout
            for message in messages:
                out.write(message.decode("utf-8", errors="replace"))
            out.flush()
            return

        filename = f"{self.name}-{date}.log"
        if self.dir_path:
            filename = os.path.join(self.dir_path, filename)
        try:
            handle = open(filename, "ab")
        except OSError as exc:
            print(f"Error: AsyncLogWriter cannot open file {filename} ({exc})")
            return
        with handle:
            for message in messages:
                try:
                    handle.write(message)
                except OSError as exc:
                    print(f"Error: AsyncLogWriter failed to write file {filename} ({exc})")
                    break
            handle.flush()
            os.fsync(handle.fileno())

    def _write_routine(self, messages_in: "queue.Queue[Optional[bytes]]") -> None:
        while True:
            quit_requested = False
            batch: list[bytes] = []
            try:
                first = messages_in.get(timeout=_POLL_INTERVAL)
            except queue.Empty:
                pass
            else:
                pending = [first]
                while True:
                    try:
                        pending.append(messages_in.get_nowait())
                    except queue.Empty:
                        break
                for message in pending:
                    if message is None:
                        quit_requested = True
                    else:
                        batch.append(message)

            date = _today()
            self._notify_date_change(date)

            if batch:
                self._flush(batch, date)

            if quit_requested:
                return

    def close(self) -> None:
        """Flush pending messages and stop the background thread."""
        with self._lock:
            if self._queue is not None:
                self._queue.put(None)
                if self._thread is not None:
                    self._thread.join()
                self._queue = None
                self._thread = None
            self.date_updated = None


class Logger:
    """Logger with a general, an evaluate and an audit output stream."""

    def __init__(
        self,
        prepend: str = "",
        level: int = LogLevel.AUDIT,
        dir_path: str = "",
        filename: str = "",
        *,
        _parent: Optional["Logger"] = None,
    ) -> None:
        self._lock = threading.Lock()
        self._log_level = int(level)
        self._call_depth = 2
        self._prepend = prepend
        self._sub_loggers: list[Logger] = []
        self._is_sub_logger = _parent is not None

        if _parent is not None:
            self._lw = _parent._lw
            self._lw_evaluate = _parent._lw_evaluate
            self._lw_audit = _parent._lw_audit
        else:
            self._lw = AsyncLogWriter(dir_path, filename, queue.Queue(maxsize=1))
            self._lw.start()
            self._lw_evaluate = AsyncLogWriter(dir_path, filename + "-evaluate")
            self._lw_evaluate.start()
            self._lw_audit = AsyncLogWriter(dir_path, filename + "-audit")
            self._lw_audit.start()
        self._is_running = True

    @property
    def log_level(self) -> int:
        return self._log_level

    def _emit(
        self,
        tag: str,
        writer: AsyncLogWriter,
        threshold: int,
        microseconds: bool,
        fmt: str,
        args: tuple[Any, ...],
    ) -> None:
        if self._log_level < threshold or not self._is_running:
            return
        message = fmt % args if args else fmt
        now = datetime.now()
        header = now.strftime("%Y/%m/%d %H:%M:%S")
        if microseconds:
            header += f".{now.microsecond:06d}"
        header += " "
        if SHOW_CALLER_FILE_LINE:
            try:
                frame = sys._getframe(self._call_depth)
                header += f"{os.path.basename(frame.f_code.co_filename)}:{frame.f_lineno}: "
            except ValueError:
                header += "???:0: "
        line = f"{header}{self._prepend} [{tag}] {message}"
        if not line.endswith("\n"):
            line += "\n"
        try:
            writer.write(line)
        except ValueError:
            pass

    def warning(self, fmt: str, *args: Any) -> None:
        self._emit("Warning", self._lw, LogLevel.ERROR, False, fmt, args)

    def error(self, fmt: str, *args: Any) -> None:
        self._emit("Error", self._lw, LogLevel.ERROR, False, fmt, args)

    def critical(self, fmt: str, *args: Any) -> None:
        self._emit("Critical", self._lw, LogLevel.ERROR, False, fmt, args)

    def evaluate(self, fmt: str, *args: Any) -> None:
        self._emit("Evaluate", self._lw_evaluate, LogLevel.ERROR, True, fmt, args)

    def info(self, fmt: str, *args: Any) -> None:
        self._emit("Info", self._lw, LogLevel.INFO, False, fmt, args)

    def stats(self, fmt: str, *args: Any) -> None:
        self._emit("Stats", self._lw, LogLevel.INFO, False, fmt, args)

    def audit(self, fmt: str, *args: Any) -> None:
        self._emit("Audit", self._lw_audit, LogLevel.AUDIT, False, fmt, args)

    def transaction(self, fmt: str, *args: Any) -> None:
        self._emit("Transaction", self._lw_audit, LogLevel.AUDIT, False, fmt, args)

    def debug(self, fmt: str, *args: Any) -> None:
        self._emit("Debug", self._lw, LogLevel.DEBUG, False, fmt, args)

    def trace(self, fmt: str, *args: Any) -> None:
        self._emit("Trace", self._lw, LogLevel.TRACE, False, fmt, args)

    def verbose(self, fmt: str, *args: Any) -> None:
        self._emit("Verbose", self._lw, LogLevel.TRACE, False, fmt, args)

    def set_log_level(self, level: int) -> None:
        """Change the level; a parent logger passes it on to its sub-loggers."""
        with self._lock:
            self._log_level = int(level)
            subs = list(self._sub_loggers)
        if self._is_sub_logger:
            return
        for sub in subs:
            sub.set_log_level(level)

    def close(self) -> None:
        """Stop logging; a parent also stops its sub-loggers and writers."""
        if not self._is_running:
            return
        self._is_running = False
        if self._is_sub_logger:
            return
        with self._lock:
            subs = list(self._sub_loggers)
        for sub in subs:
            sub.close()
        self._lw.close()
        self._lw_evaluate.close()
        self._lw_audit.close()

    def writer(self) -> AsyncLogWriter:
        """Return the general log writer."""
        return self._lw

    def new_sub_logger(self, prepend: str, level: int) -> "Logger":
        """Create a logger with its own prefix that shares this logger's writers."""
        sub = Logger(prepend, level, _parent=self)
        with self._lock:
            self._sub_loggers.append(sub)
        return sub

    def date_update_queue(self) -> Optional["queue.Queue[str]"]:
        """Queue that receives the previous date whenever the day changes."""
        return self._lw.date_updated


def blackhole_logf(fmt: str, *args: Any) -> None:
    """Format a log line and write it to a sink that discards it."""
    _DISCARD.write(_format(fmt, args))


_global_logger: Optional[Logger] = None


def set_global_logger(logger: Logger) -> None:
    """Replace the module-wide logger, closing the previous one."""
    global _global_logger
    if _global_logger is not None:
        _global_logger.close()
    _global_logger = logger
    logger._call_depth += 1


def get_global_logger() -> Logger:
    return _global_logger


def warning(fmt: str, *args: Any) -> None:
    _global_logger.warning(fmt, *args)


def error(fmt: str, *args: Any) -> None:
    _global_logger.error(fmt, *args)


def critical(fmt: str, *args: Any) -> None:
    _global_logger.critical(fmt, *args)


def evaluate(fmt: str, *args: Any) -> None:
    _global_logger.evaluate(fmt, *args)


def info(fmt: str, *args: Any) -> None:
    _global_logger.info(fmt, *args)


def stats(fmt: str, *args: Any) -> None:
    _global_logger.stats(fmt, *args)


def audit(fmt: str, *args: Any) -> None:
    _global_logger.audit(fmt, *args)


def transaction(fmt: str, *args: Any) -> None:
    _global_logger.transaction(fmt, *args)


def debug(fmt: str, *args: Any) -> None:
    _global_logger.debug(fmt, *args)


def trace(fmt: str, *args: Any) -> None:
    _global_logger.trace(fmt, *args)


def verbose(fmt: str, *args: Any) -> None:
    _global_logger.verbose(fmt, *args)


def close() -> None:
    """Close the module-wide logger."""
    if _global_logger is not None:
        _global_logger.close()


set_global_logger(Logger("", LogLevel.AUDIT, "", ""))
atexit.register(close)