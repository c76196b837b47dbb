import os
import threading
import multiprocessing
import logging
import delve_config

LOGGER_NAME = "delve"

_tick_id = None
_logger = logging.getLogger(LOGGER_NAME)

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def configure(level=None):
    '''
    attach a plain stream handler to the delve logger, used by the server and
    client entry points (library code never configures logging itself)
    '''
    if level is None:
        level = getattr(delve_config, "LOG_LEVEL", "INFO")
    if not _logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        _logger.addHandler(handler)
    _logger.setLevel(_LEVELS.get(level, logging.INFO))


def set_tick(tick_id):
    global _tick_id
    _tick_id = tick_id


def log(scope, msg, level="INFO"):
    if scope == "TICK" and not getattr(delve_config, "LOG_TICK_LOOP", False):
        return
    levelno = _LEVELS.get(level, logging.INFO)
    if not _logger.isEnabledFor(levelno):
        return
    pid = os.getpid()
    proc = multiprocessing.current_process().name
    thread = threading.current_thread().name
    tick = _tick_id
    tick_tag = f" t{tick}" if tick is not None else ""
    text = f"[{level}{tick_tag} pid{pid} proc{proc} thr{thread} {scope}] {msg}"
    use_color = getattr(delve_config, "LOG_COLOR", True) and os.getenv("NO_COLOR") is None
    if use_color:
        if proc == "MainProcess" and thread != "MainThread":
            text = f"\x1b[32m{text}\x1b[0m"
        elif proc != "MainProcess":
            text = f"\x1b[33m{text}\x1b[0m"
    _logger.log(levelno, text)
