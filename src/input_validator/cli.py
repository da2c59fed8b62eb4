from __future__ import annotations

from pathlib import Path

import typer

from . import __version__
from .config import debug_enabled, resolve_trace_log_path
from .debug_log import close_trace_log, init_trace_log, trace_log
from .logs import LogParseError
from .report import ReportWriteError, write_report, write_summary
from .session import SessionResult, validate_session_files
from .sync import SyncMismatchError
from .tally import parse_compare_mode

READ_ERROR_MESSAGE = "Error: problem reading input files."
WRITE_ERROR_MESSAGE = "Error: problem creating/saving to output file."
TRACE_ERROR_MESSAGE = "Error: problem creating trace log file."
SYNC_ERROR_MESSAGE = (
    "Error: sync problem between input and state log file. "
    "Time stamps don't match, are you sure they're matching logs?"
)

app = typer.Typer(add_completion=False)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


def _require_file(path: Path) -> None:
    if not path.is_file():
        typer.echo(f"Error: {path} not found.")
        raise typer.Exit(code=1)


def _run(
    input_log: Path,
    state_log: Path,
    output: Path,
    mode_selector: str | None,
    json_path: Path | None,
) -> SessionResult:
    mode = parse_compare_mode(mode_selector)
    try:
        result = validate_session_files(input_log, state_log, mode)
    except SyncMismatchError as exc:
        trace_log("sync_mismatch", index=exc.index, input_time=exc.input_time, state_time=exc.state_time)
        typer.echo(str(exc.index))
        typer.echo(SYNC_ERROR_MESSAGE)
        raise typer.Exit(code=1) from None
    except (LogParseError, OSError) as exc:
        trace_log("read_error", error=exc)
        if debug_enabled():
            typer.echo(f"{type(exc).__name__}: {exc}", err=True)
        typer.echo(READ_ERROR_MESSAGE)
        raise typer.Exit(code=1) from None

    written: list[Path] = []
    try:
        written.append(write_report(output, result.tally))
        trace_log("report_written", path=output, states=len(result.tally))
        if json_path is not None:
            written.append(write_summary(json_path, result))
            trace_log("json_written", path=json_path)
    except ReportWriteError as exc:
        # A failed run leaves no outputs behind.
        for path in written:
            path.unlink(missing_ok=True)
        trace_log("write_error", error=exc, removed=len(written))
        typer.echo(WRITE_ERROR_MESSAGE)
        raise typer.Exit(code=1) from None
    return result


@app.command()
def main(
    input_log: Path = typer.Argument(..., help="input command log (keyboard/controller/TCP triples)"),
    state_log: Path = typer.Argument(..., help="state log with 'Current Task Index' entries"),
    output: Path = typer.Argument(..., help="output report path (.csv); overwritten"),
    mode: str | None = typer.Argument(
        None,
        help="comparison mode: kx (keyboard/controller, default), kt (keyboard/TCP), xt (controller/TCP), all",
    ),
    json_path: Path | None = typer.Option(
        None,
        "--json",
        help="also write a JSON summary of the per-state tally",
    ),
    trace_path: Path | None = typer.Option(
        None,
        "--trace-log",
        help="write key=value trace events to this file (default: INPUT_VALIDATOR_TRACE_LOG)",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="print the package version and exit",
    ),
) -> None:
    """Tally per-state agreement between two input modalities of a recorded session."""
    _require_file(input_log)
    _require_file(state_log)

    resolved_trace = resolve_trace_log_path(trace_path)
    if resolved_trace is not None:
        try:
            init_trace_log(
                path=resolved_trace,
                input_log=input_log,
                state_log=state_log,
                output=output,
                mode=parse_compare_mode(mode).selector,
            )
        except OSError:
            typer.echo(TRACE_ERROR_MESSAGE)
            raise typer.Exit(code=1) from None
    try:
        _run(input_log, state_log, output, mode, json_path)
    finally:
        close_trace_log()


if __name__ == "__main__":
    app()
