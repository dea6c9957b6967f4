"""
Host inventory collected into the beacon's answer.

An answer is built from inventory sources: the internal hostname source and
any number of external executable files whose stdout lines ``key=value`` are
turned into answer keys. A failing source contributes nothing; it never
prevents the answer from being produced.
"""

import json
import socket
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

import yaml

from ..core.codec import Answer
from ..core.data_models import INVENTORY_TIMEOUT_DEFAULT, InventoryOutput
from ..utils.error_handler import ErrorContext, ErrorHandler, ErrorSeverity, ErrorType
from ..utils.logger import Logger, get_logger

HOSTNAME_KEY = "hostname"


def get_hostname() -> str:
    return socket.gethostname()


class InventorySource(ABC):
    """
    Abstract base class for inventory sources.

    Every source produces an InventoryOutput; failures are logged and
    result in an empty output.
    """

    def __init__(self, logger: Optional[Logger] = None):
        self.logger = logger or get_logger(__name__)

    @abstractmethod
    def execute(self) -> InventoryOutput:
        """Collect the key-value pairs contributed by this source."""
        pass


class InternalInventory(InventorySource):
    """A single key whose value comes from an in-process supplier."""

    def __init__(
        self,
        key: str = HOSTNAME_KEY,
        supplier: Callable[[], str] = get_hostname,
        logger: Optional[Logger] = None,
    ):
        super().__init__(logger)
        self.key = key
        self.supplier = supplier

    def execute(self) -> InventoryOutput:
        raw_output = self.supplier()
        return InventoryOutput(raw_output=raw_output, output={self.key: raw_output})

    def __repr__(self) -> str:
        return f"InternalInventory(key={self.key!r})"


class InventoryFile(InventorySource):
    """
    An external executable run with no arguments and no stdin.

    Its stdout is parsed with parse_inventory_output(). Spawn failures,
    non-zero exit codes and timeouts yield an empty output.
    """

    def __init__(
        self,
        path: Union[str, Path],
        timeout: float = INVENTORY_TIMEOUT_DEFAULT,
        logger: Optional[Logger] = None,
        error_handler: Optional[ErrorHandler] = None,
    ):
        super().__init__(logger)
        self.path = Path(path)
        self.timeout = timeout
        self.error_handler = error_handler or ErrorHandler(self.logger)

    def __repr__(self) -> str:
        return f"InventoryFile(path={str(self.path)!r})"

    def execute(self) -> InventoryOutput:
        raw_output = self._run()
        return InventoryOutput(
            raw_output=raw_output,
            output=parse_inventory_output(raw_output, self.logger),
        )

    def _run(self) -> str:
        """Return stdout of the file, an empty string if the execution is not successful."""
        self.logger.debug("Executing inventory file", path=self.path)
        try:
            process = subprocess.run(
                [str(self.path)],
                stdin=subprocess.DEVNULL,
                capture_output=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            self._report(e, "timeout")
            return ""
        except OSError as e:
            self._report(e, "spawn")
            return ""

        if process.stderr:
            stderr = process.stderr.decode("utf-8", errors="replace").strip()
            self.logger.warning("Inventory file wrote on stderr", path=self.path, stderr=stderr)

        if process.returncode != 0:
            self.logger.error(
                "Inventory file exited with non-zero code",
                path=self.path,
                returncode=process.returncode,
            )
            return ""

        return process.stdout.decode("utf-8", errors="replace")

    def _report(self, error: Exception, operation: str) -> None:
        context = ErrorContext(
            error_type=ErrorType.SUBPROCESS_ERROR,
            severity=ErrorSeverity.HIGH,
            operation=operation,
            component=repr(self),
            additional_info={"file_path": str(self.path)},
        )
        self.error_handler.handle_error(error, context)


def coerce_value(value: str) -> Any:
    """
    Interpret an inventory value as a YAML flow scalar or collection.

    ``1`` becomes 1, ``[a, b]`` becomes ["a", "b"]. Words YAML would read as
    booleans (``yes``, ``off``...) stay strings unless they are ``true`` or
    ``false``; values that do not parse stay raw strings.
    """
    if not value:
        return value
    try:
        parsed = yaml.safe_load(value)
    except yaml.YAMLError:
        return value
    if isinstance(parsed, bool):
        return parsed if value.lower() in ("true", "false") else value
    if isinstance(parsed, (int, float, list, dict)):
        return parsed
    return value


def parse_inventory_output(text: str, logger: Optional[Logger] = None) -> Dict[str, Any]:
    """
    Parse ``key=value`` lines.

    Keys and values are stripped, the line is split on the first ``=``.
    A key repeated within the same output collapses into a list of its
    values. Blank lines are skipped, other malformed lines are logged and
    skipped.
    """
    logger = logger or get_logger(__name__)
    result: Dict[str, Any] = {}
    repeated = set()

    for line in text.splitlines():
        if not line.strip():
            continue
        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep or not key:
            logger.warning("Skipping malformed inventory line", line=line)
            continue

        value = coerce_value(value.strip())
        if key not in result:
            result[key] = value
        elif key in repeated:
            result[key].append(value)
        else:
            result[key] = [result[key], value]
            repeated.add(key)

    return result


def collect_inventory(sources: Iterable[InventorySource]) -> Dict[str, Any]:
    """Run every source in order; later keys overwrite earlier ones."""
    infos: Dict[str, Any] = {}
    for source in sources:
        infos.update(source.execute().output)
    return infos


def get_answer(
    inventory_files: Iterable[Union[str, Path]] = (),
    internal: Optional[InternalInventory] = None,
    timeout: float = INVENTORY_TIMEOUT_DEFAULT,
    logger: Optional[Logger] = None,
) -> Answer:
    """
    Build the beacon's answer: the hostname, then every inventory file.

    Args:
        inventory_files: Executables whose output is added to the answer
        internal: Internal source, defaults to the system hostname
        timeout: Seconds each inventory file may run
        logger: Logger handed to the sources

    Returns:
        Answer holding the compact JSON object
    """
    sources: List[InventorySource] = [internal or InternalInventory(logger=logger)]
    sources.extend(InventoryFile(path, timeout=timeout, logger=logger) for path in inventory_files)
    infos = collect_inventory(sources)
    return Answer.from_str(json.dumps(infos, ensure_ascii=False, separators=(",", ":"), default=str))
