"""Runs the jq binary as a subprocess.

Every call spawns exactly one process, feeds it the input text over stdin,
drains stdout and stderr concurrently and returns a :class:`JqResult`.
The executor never classifies jq failures; callers decide what a non-zero
exit status means (see :mod:`jq_mcp_server.core.operations`).
"""
import asyncio
import time
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from jq_mcp_server.config import get_config
from jq_mcp_server.exceptions import JqTimeoutError
from jq_mcp_server.utils import get_logger

logger = get_logger("jq_mcp_server.core.executor")

# Exit statuses reported when the binary cannot be spawned at all (shell conventions)
EXIT_NOT_FOUND = 127
EXIT_NOT_EXECUTABLE = 126


@dataclass(frozen=True)
class JqInvocation:
    """Arguments and optional stdin text for a single jq run."""
    args: Tuple[str, ...]
    input_text: Optional[str] = None


@dataclass(frozen=True)
class JqResult:
    """Captured output of a finished jq process."""
    stdout: str
    stderr: str
    exit_code: int

    @property
    def failed(self) -> bool:
        """True when jq exited non-zero *and* explained itself on stderr."""
        return self.exit_code != 0 and bool(self.stderr)


@dataclass(frozen=True)
class JqHealth:
    """Outcome of the startup availability probe."""
    available: bool
    binary: str
    version: Optional[str] = None
    error: Optional[str] = None


async def _feed_stdin(stdin: asyncio.StreamWriter, data: Optional[bytes]) -> None:
    """Write ``data`` to the child's stdin, then close it.

    jq may exit before consuming all of its input (for example on a parse
    error), so a closed pipe is expected and ignored.
    """
    try:
        if data:
            stdin.write(data)
            await stdin.drain()
    except (BrokenPipeError, ConnectionResetError):
        logger.debug("jq closed stdin before all input was written", emoji_key="process")
    except OSError as e:
        logger.warning(f"Error writing to jq stdin: {e}", emoji_key="process")
    finally:
        stdin.close()


async def _communicate(process: asyncio.subprocess.Process, data: Optional[bytes]) -> Tuple[bytes, bytes]:
    _, stdout_bytes, stderr_bytes = await asyncio.gather(
        _feed_stdin(process.stdin, data),
        process.stdout.read(),
        process.stderr.read(),
    )
    await process.wait()
    return stdout_bytes, stderr_bytes


async def _terminate(process: asyncio.subprocess.Process) -> None:
    """Terminate a runaway jq process, escalating to kill."""
    if process.returncode is not None:
        return
    try:
        process.terminate()
        await asyncio.sleep(0.1)
        if process.returncode is None:
            process.kill()
        await process.wait()
    except ProcessLookupError:
        pass


def _normalize_exit_code(returncode: Optional[int]) -> int:
    if returncode is None:
        return 0
    if returncode < 0:
        logger.warning(f"jq was terminated by signal {-returncode}", emoji_key="process")
        return 0
    return returncode


async def execute_jq(
    args: Sequence[str],
    input_text: Optional[str] = None,
    *,
    timeout: Optional[float] = None,
    jq_binary: Optional[str] = None,
) -> JqResult:
    """Run jq once with ``args`` and optional stdin text.

    Args:
        args: Command-line arguments passed to jq, in order.
        input_text: Text written to jq's stdin. Nothing is written when empty.
        timeout: Seconds to wait before terminating jq. ``None`` waits forever.
        jq_binary: Executable to run. Defaults to the configured binary,
            resolved from ``PATH`` on every call.

    Returns:
        JqResult with stdout/stderr stripped of surrounding whitespace.
        A binary that cannot be spawned yields exit code 127 (not found)
        or 126 (not executable) with an explanatory stderr.

    Raises:
        JqTimeoutError: ``timeout`` was given and exceeded.
    """
    invocation = JqInvocation(args=tuple(args), input_text=input_text)
    binary = jq_binary or get_config().jq.binary
    # Lone surrogates pass through as bytes; jq replaces invalid UTF-8 with U+FFFD
    data = invocation.input_text.encode("utf-8", errors="surrogatepass") if invocation.input_text else None

    logger.debug(f"Running {binary} {' '.join(invocation.args)}", emoji_key="jq")
    start_time = time.time()

    try:
        process = await asyncio.create_subprocess_exec(
            binary,
            *invocation.args,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError:
        logger.error(f"jq binary not found: {binary}", emoji_key="unavailable")
        return JqResult(stdout="", stderr=f"{binary}: command not found", exit_code=EXIT_NOT_FOUND)
    except PermissionError:
        logger.error(f"jq binary is not executable: {binary}", emoji_key="unavailable")
        return JqResult(stdout="", stderr=f"{binary}: permission denied", exit_code=EXIT_NOT_EXECUTABLE)

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(_communicate(process, data), timeout=timeout)
    except asyncio.TimeoutError as e:
        logger.error(f"jq timed out after {timeout} seconds", emoji_key="timeout")
        await _terminate(process)
        raise JqTimeoutError(timeout, invocation.args) from e
    except asyncio.CancelledError:
        await _terminate(process)
        raise

    result = JqResult(
        stdout=stdout_bytes.decode("utf-8", errors="replace").strip(),
        stderr=stderr_bytes.decode("utf-8", errors="replace").strip(),
        exit_code=_normalize_exit_code(process.returncode),
    )
    logger.debug("jq finished", emoji_key="jq", exit_code=result.exit_code, time=time.time() - start_time)
    return result


async def check_jq_available(jq_binary: Optional[str] = None, timeout: Optional[float] = None) -> bool:
    """Return True when ``jq --version`` exits with status 0."""
    health = await run_health_check(jq_binary=jq_binary, timeout=timeout)
    return health.available


async def run_health_check(jq_binary: Optional[str] = None, timeout: Optional[float] = None) -> JqHealth:
    """Probe the jq binary with ``--version``.

    The result is returned to the caller rather than stored; every call
    spawns a fresh probe.
    """
    cfg = get_config().jq
    binary = jq_binary or cfg.binary
    probe_timeout = timeout if timeout is not None else cfg.probe_timeout

    try:
        result = await execute_jq(["--version"], timeout=probe_timeout, jq_binary=binary)
    except JqTimeoutError as e:
        return JqHealth(available=False, binary=binary, error=e.message)

    if result.exit_code != 0:
        return JqHealth(
            available=False,
            binary=binary,
            error=result.stderr or f"exit code {result.exit_code}",
        )
    return JqHealth(available=True, binary=binary, version=result.stdout)
