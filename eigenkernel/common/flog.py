'''
Console and file logging with verbosity control for the eigen engine.

Messages are indented by a nesting level (tabs followed by '->'), optionally
coloured on terminals, and mirrored to a log file when requested.

@note File logging is enabled only when the environment variable PYLOGFILE is set to a non-zero value.
@note Coloured output is disabled by setting PYLOGCOLORS to '0'.

-------------------------------------------------------
file        :   eigenkernel/common/flog.py
description :   Logger class, process-wide logger and timing tables.
-------------------------------------------------------
'''

__all__         = [
    "Logger",
    "Colors",
    "log_timing_summary",
    "get_global_logger"
]

import os
import re
import sys
import functools
import logging
import threading
import time
from datetime import datetime
from typing import Optional, Dict, List

import numpy as np

######################################################
#! COLOURS
######################################################

class Colors:
    """
    ANSI escape codes for terminal colours.

    Example:
        >>> Colors('red')('failed')
    """

    black   = "\033[30m"
    red     = "\033[31m"
    green   = "\033[32m"
    yellow  = "\033[33m"
    blue    = "\033[34m"
    white   = "\033[0m"     # reset

    def __init__(self, color: str):
        self.color = color

    def __str__(self) -> str:
        mapping = {
            "black" : Colors.black,
            "red"   : Colors.red,
            "green" : Colors.green,
            "yellow": Colors.yellow,
            "blue"  : Colors.blue,
        }
        return mapping.get(self.color, Colors.white)

    def __call__(self, text: str) -> str:
        return f"{self}{text}{Colors.white}"

# ANSI CSI sequences, ESC [ ... m
_ansi_escape = re.compile(r'\x1b\[[0-9;]*m')

class StripAnsiFormatter(logging.Formatter):
    ''' File formatter that removes colour codes. '''
    def format(self, record):
        return _ansi_escape.sub('', super().format(record))

######################################################
#! LOGGER
######################################################

ENV_LOGGER_FILE     = 'PYLOGFILE'
ENV_LOGGER_COLORS   = 'PYLOGCOLORS'
_DATE_FMT           = "%d_%m_%Y_%H-%M_%S"

class Logger:
    """
    Wrapper around a `logging.Logger` with indentation levels and colours.
    """

    LEVELS = {
        logging.DEBUG   : 'debug',
        logging.INFO    : 'info',
        logging.WARNING : 'warning',
        logging.ERROR   : 'error'
    }

    LEVELS_R = {v: k for k, v in LEVELS.items()}

    def __init__(self,
                name            : str           = "eigenkernel",
                logfile         : Optional[str] = None,
                lvl             : int           = logging.INFO,
                append_ts       : bool          = False,
                use_ts_in_cmd   : bool          = False):
        """
        Args:
            name (str):
                Name of the underlying `logging` logger.
            logfile (str):
                Log file name (without extension); used only when PYLOGFILE != '0'.
                An empty string means a timestamp.
            lvl (int or str):
                Logging level (default: logging.INFO).
            append_ts (bool):
                Append a timestamp to the log file name.
            use_ts_in_cmd (bool):
                Prefix console lines with a timestamp.
        """
        self.now_str            = datetime.now().strftime(_DATE_FMT)
        self.lvl                = Logger.LEVELS_R.get(lvl.lower(), logging.INFO) if isinstance(lvl, str) else lvl
        self.handler_added      = False
        self.has_colors         = sys.stdout.isatty() and os.environ.get(ENV_LOGGER_COLORS, '1') != '0'

        self.logger             = logging.getLogger(name)
        self.logger.setLevel(self.lvl)
        self.logger.propagate   = False

        # one console handler per logger name
        for h in list(self.logger.handlers):
            self.logger.removeHandler(h)
            h.close()
        console_fmt = '%(asctime)s [%(levelname)s] %(message)s' if use_ts_in_cmd else '[%(levelname)s] %(message)s'
        ch          = logging.StreamHandler(sys.stdout)
        ch.setLevel(self.lvl)
        ch.setFormatter(logging.Formatter(console_fmt, datefmt=_DATE_FMT))
        self.logger.addHandler(ch)

        if logfile is not None and os.environ.get(ENV_LOGGER_FILE, '0') != '0':
            self.logfile = (logfile[:-4] if logfile.endswith('.log') else logfile) or self.now_str
            if append_ts:
                self.logfile += f'_{self.now_str}'
            self.configure("./log")
        else:
            self.logfile = None

    # --------------------------------------------------------------

    @staticmethod
    def colorize(txt: str, color: Optional[str]) -> str:
        if not color or color.lower() == 'white':
            return str(txt)
        return Colors(color)(txt)

    def configure(self, directory: str):
        """
        Attach a file handler writing to `directory/<logfile>.log`.
        """
        base_name       = os.path.basename(self.logfile) if self.logfile else self.now_str
        if base_name.endswith('.log'):
            base_name   = base_name[:-4]
        self.logfile    = os.path.join(directory, f'{base_name}.log')
        os.makedirs(directory, exist_ok=True)

        if not self.handler_added:
            self._f_handler = logging.FileHandler(self.logfile, mode='w', encoding='utf-8')
            self._f_handler.setLevel(self.lvl)
            self._f_handler.setFormatter(StripAnsiFormatter('%(asctime)s [%(levelname)s] %(message)s', datefmt=_DATE_FMT))
            self.logger.addHandler(self._f_handler)
            self.handler_added = True
            self._log_message(logging.INFO, f"Log file created: {self.logfile}")

    # --------------------------------------------------------------

    @staticmethod
    def print_tab(lvl=0) -> str:
        return '\t' * lvl + ('->' if lvl > 0 else '')

    @staticmethod
    def print(msg: str, lvl=0) -> str:
        ''' Indent a message by lvl. '''
        return f"{Logger.print_tab(lvl)}{msg}"

    def _log_message(self, log_level, msg, lvl=0):
        getattr(self.logger, self.LEVELS.get(log_level, 'info'))(Logger.print(msg, lvl))

    def say(self, *args, end=True, log=logging.INFO, lvl=0, verbose=True, color=None):
        """
        Log several messages at once.

        Args:
            *args           : Messages.
            end (bool)      : Join with newlines (True) or spaces (False).
            log (int | str) : Log level, as a number or a name ('info', 'debug', ...).
            lvl (int)       : Indentation level.
            verbose (bool)  : Log only if True.
        """
        if isinstance(log, str):
            log = {'i': logging.INFO, 'e': logging.ERROR, 'w': logging.WARNING}.get(log.lower()[:1], logging.DEBUG)
        if not verbose or log < self.lvl:
            return
        message = ('\n' if end else ' ').join(str(arg) for arg in args)
        if color is not None and self.has_colors:
            message = self.colorize(message, color)
        self._log_message(log, message, lvl)

    # --------------------------------------------------------------

    def info(self, msg: str, lvl=0, verbose=True, color=None):
        if not verbose:
            return
        if color is not None and self.has_colors:
            msg = self.colorize(msg, color)
        self.logger.info(Logger.print(msg, lvl))

    def debug(self, msg: str, lvl=0, verbose=True, color=None):
        if not verbose:
            return
        if color is not None and self.has_colors:
            msg = self.colorize(msg, color)
        self.logger.debug(Logger.print(msg, lvl))

    def warning(self, msg: str, lvl=0, verbose=True, color='yellow'):
        if not verbose:
            return
        if self.has_colors:
            msg = self.colorize(msg, color)
        self.logger.warning(Logger.print(msg, lvl))

    def error(self, msg: str, lvl=0, verbose=True, color='red'):
        if not verbose:
            return
        if self.has_colors:
            msg = self.colorize(msg, color)
        self.logger.error(Logger.print(msg, lvl))

    # --------------------------------------------------------------

    def title(self, tail: str, desired_size: int = 50, fill: str = '=', lvl=0, verbose=True, color=None):
        """
        Log `tail` centred in a line of `fill` characters.
        """
        if not verbose:
            return
        if len(tail) + 2 + lvl * 6 > desired_size:
            self.info(tail, lvl, verbose)
            return
        side    = (desired_size - len(tail)) // (2 * len(fill))
        out     = (fill * side) + tail + (fill * side)
        out     = out.ljust(desired_size - 1, fill[0])[:desired_size]
        self.info(out, lvl, verbose, color)

    def timing(self, func, lvl=1):
        """
        Wrap `func` so that each call is timed and logged at debug level.
        The wall time of the last completed call is kept in `wrapper.elapsed`.

        Use as:
            @logger.timing
            def my_function(...):
                ...

            solve = logger.timing(general_eigen)
            solve(A)
            solve.elapsed
        """
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            self.debug(f"Starting '{func.__name__}'...", lvl=lvl)
            start           = time.perf_counter()
            result          = func(*args, **kwargs)
            wrapper.elapsed = time.perf_counter() - start
            self.debug(f"Finished '{func.__name__}' in {wrapper.elapsed:.4e} s", lvl=lvl)
            return result
        wrapper.elapsed = 0.0
        return wrapper

######################################################
#! PROCESS-WIDE LOGGER
######################################################

_G_LOGGER     = None
_G_LOGGER_PID = None
_G_LOCK       = threading.Lock()

def get_global_logger(**kwargs) -> Logger:
    """
    One Logger per process (PID), created lazily and shared between threads.

    Args:
        **kwargs: Passed to the Logger constructor on first use
            (name, lvl, append_ts, use_ts_in_cmd, logfile).

    Example
    -------
        >>> logger = get_global_logger()
        >>> logger.info("Decomposition started.")
    """
    global  _G_LOGGER, _G_LOGGER_PID
    pid     = os.getpid()

    if _G_LOGGER is not None and _G_LOGGER_PID == pid:
        return _G_LOGGER

    with _G_LOCK:
        if _G_LOGGER is not None and _G_LOGGER_PID == pid:
            return _G_LOGGER
        _G_LOGGER       = Logger(
            name            = kwargs.get("name",            "eigenkernel"),
            lvl             = kwargs.get("lvl",             logging.INFO),
            append_ts       = kwargs.get("append_ts",       True),
            use_ts_in_cmd   = kwargs.get("use_ts_in_cmd",   True),
            logfile         = kwargs.get("logfile",         "eigenkernel"),
        )
        _G_LOGGER_PID   = pid
        return _G_LOGGER

######################################################
#! TIMING TABLE
######################################################

def log_timing_summary(
    logger              : Logger,
    phase_durations     : Dict[str, float],
    total_duration      : Optional[float] = None,
    title               : str = "Timing Summary",
    phase_col_width     : int = 18,
    duration_col_width  : int = 14,
    duration_precision  : int = 4,
    lvl                 : int = 0,
    add_total_row       : bool = True,
    extra_info          : Optional[List[str]] = None
):
    """
    Log phase durations as a two-column table.

    Parameters:
    logger:
        Logger instance.
    phase_durations:
        Phase name -> duration in seconds, in display order.
    total_duration:
        Total to report in the "Total" row; the sum of the phases if None.
    extra_info:
        Lines logged between the title and the table.
    """
    phase_header        = "Phase"
    duration_header     = "Duration (s)"
    phase_col_width     = max(phase_col_width, len(phase_header))
    duration_col_width  = max(duration_col_width, len(duration_header))

    separator           = f"|{'-' * (phase_col_width + 2)}|{'-' * (duration_col_width + 2)}|"
    header_fmt          = f"| {phase_header:<{phase_col_width}} | {duration_header:>{duration_col_width}} |"
    row_fmt             = f"| {{phase_name:<{phase_col_width}}} | {{duration:>{duration_col_width}.{duration_precision}f}} |"

    logger.title(title, 50, '#', lvl)
    for info in extra_info or []:
        logger.info(info, lvl=lvl + 1)

    logger.info(separator, lvl=lvl + 1)
    logger.info(header_fmt, lvl=lvl + 1)
    logger.info(separator, lvl=lvl + 1)

    calculated_sum = 0.0
    if phase_durations:
        for name, duration in phase_durations.items():
            logger.info(row_fmt.format(phase_name=name, duration=duration), lvl=lvl + 1)
            calculated_sum += duration
    else:
        logger.info(f"| {'No phases timed':<{phase_col_width + duration_col_width + 3}} |", lvl=lvl + 1)

    if add_total_row:
        logger.info(separator, lvl=lvl + 1)
        if total_duration is not None and not np.isclose(total_duration, calculated_sum, rtol=1e-3, atol=1e-4):
            logger.warning(f"Provided total duration ({total_duration:.4f}s) differs from sum of phases "
                        f"({calculated_sum:.4f}s). Using provided total.", lvl=lvl + 2)
        actual_total = total_duration if total_duration is not None else calculated_sum
        logger.info(row_fmt.format(phase_name="Total", duration=actual_total), lvl=lvl + 1)

    logger.info(separator, lvl=lvl + 1)

######################################################
