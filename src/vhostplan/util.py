"""Utilities for all vhostplan."""
import atexit
import logging
import os
import platform
import re
import subprocess
import sys
from typing import Any
from typing import Callable
from typing import IO
from typing import List
from typing import Optional
from typing import Sequence
from typing import Tuple
from typing import Union

from vhostplan import errors

_USE_DISTRO = sys.platform.startswith('linux')
if _USE_DISTRO:
    import distro

logger = logging.getLogger(__name__)


ANSI_SGR_RED = "\033[31m"
ANSI_SGR_RESET = "\033[0m"

TRUE_STRINGS = ("true", "yes", "on", "1")
FALSE_STRINGS = ("false", "no", "off", "0")

MODE_REGEX = re.compile(r"^[0-7]{3,4}$")

PERM_ERR_FMT = os.linesep.join((
    "The following error was encountered:", "{0}",
    "Either run as root, or set --logs-dir to a writeable path."))

_INITIAL_PID = os.getpid()


def run_script(params: Sequence[str],
               log: Callable[[str], None] = logger.error) -> Tuple[str, str]:
    """Run the script with the given params.

    :param list params: List of parameters to pass to subprocess.run
    :param callable log: Logger method to use for errors

    :returns: stdout and stderr of the process
    :rtype: tuple

    :raises .errors.SubprocessError: if the command cannot be run or
        exits with a non-zero status

    """
    try:
        proc = subprocess.run(list(params),
                              check=False,
                              stdout=subprocess.PIPE,
                              stderr=subprocess.PIPE,
                              universal_newlines=True)

    except (OSError, ValueError):
        msg = "Unable to run the command: %s" % " ".join(params)
        log(msg)
        raise errors.SubprocessError(msg)

    if proc.returncode != 0:
        msg = "Error while running %s.\n%s\n%s" % (
            " ".join(params), proc.stdout, proc.stderr)
        log(msg)
        raise errors.SubprocessError(msg)

    return proc.stdout, proc.stderr


def atexit_register(func: Callable, *args: Any, **kwargs: Any) -> None:
    """Sets func to be called before the program exits.

    Special care is taken to ensure func is only called when the process
    that first imports this module exits rather than any child processes.

    :param function func: function to be called in case of an error

    """
    atexit.register(_atexit_call, func, *args, **kwargs)


def _atexit_call(func: Callable, *args: Any, **kwargs: Any) -> None:
    if _INITIAL_PID == os.getpid():
        func(*args, **kwargs)


def make_or_verify_dir(directory: str, mode: int = 0o755) -> None:
    """Make sure directory exists.

    :param str directory: Path to a directory.
    :param int mode: Directory mode.

    :raises .errors.Error: if the directory cannot be created

    """
    try:
        os.makedirs(directory, mode, exist_ok=True)
    except OSError as error:
        raise errors.Error(PERM_ERR_FMT.format(error))


def safe_open(path: str, mode: str = "w", chmod: Optional[int] = None) -> IO:
    """Safely open a file.

    :param str path: Path to a file.
    :param str mode: Same os `mode` for `open`.
    :param int chmod: Same as `mode` for `os.open`, uses Python defaults
        if ``None``.

    """
    fd = os.open(path, os.O_CREAT | os.O_EXCL | os.O_RDWR,
                 *((chmod,) if chmod is not None else ()))
    return os.fdopen(fd, mode)


def exe_exists(exe: str) -> bool:
    """Determine whether path/name refers to an executable.

    :param str exe: Executable path or name

    :returns: If exe is a valid executable
    :rtype: bool

    """
    path, _ = os.path.split(exe)
    if path:
        return os.path.isfile(exe) and os.access(exe, os.X_OK)
    for directory in os.environ.get("PATH", "").split(os.pathsep):
        if os.path.isfile(os.path.join(directory, exe)) and \
                os.access(os.path.join(directory, exe), os.X_OK):
            return True
    return False


def get_os_info() -> Tuple[str, str]:
    """
    Get OS name and version

    :returns: (os_name, os_version)
    :rtype: `tuple` of `str`
    """
    os_type = platform.system().lower()
    os_ver = platform.release()
    if os_type.startswith('linux') and _USE_DISTRO:
        distro_name, distro_version = distro.id(), distro.version()
        # distro reports empty strings on Arch Linux
        if distro_name:
            os_type = distro_name
        if distro_version:
            os_ver = distro_version
    return os_type, os_ver


def get_systemd_os_like() -> List[str]:
    """
    Get a list of strings that indicate the distribution likeness to
    other distributions.

    :returns: List of distribution acronyms
    :rtype: `list` of `str`
    """

    if _USE_DISTRO:
        return [like for like in distro.like().split(" ") if like]
    return []


def parse_bool_or_path(value: Any) -> Union[bool, str]:
    """Normalize a boolean-or-path union value.

    Booleans pass through, textual booleans ("yes", "off", ...) become
    booleans and any other string is returned stripped, unchecked.

    :raises .errors.ValidationError: if value is neither a bool nor a str

    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_STRINGS:
            return True
        if lowered in FALSE_STRINGS:
            return False
        return value.strip()
    raise errors.ValidationError(
        "Expected a boolean or a path, got {0!r}".format(value))


def parse_mode(value: Union[int, str]) -> int:
    """Convert a permission-bit representation to an int.

    Accepts an int between 0 and 0o7777 or a string of 3 or 4 octal
    digits ("755", "2570").

    :raises .errors.ValidationError: if the value is not a valid mode

    """
    if isinstance(value, bool):
        raise errors.ValidationError("Invalid mode: {0!r}".format(value))
    if isinstance(value, int):
        if 0 <= value <= 0o7777:
            return value
        raise errors.ValidationError("Invalid mode: {0:o}".format(value))
    if isinstance(value, str) and MODE_REGEX.match(value.strip()):
        return int(value.strip(), 8)
    raise errors.ValidationError("Invalid mode: {0!r}".format(value))


def format_mode(mode: Optional[int]) -> Optional[str]:
    """Format a mode as a 4-digit octal string, or None."""
    if mode is None:
        return None
    return "{0:04o}".format(mode)
