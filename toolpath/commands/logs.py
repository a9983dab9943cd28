"""Tail the JSONL log written by ``toolpath --log-file``."""

import json
import time
from pathlib import Path

import click

from ..logging_setup import default_log_path


def _format_line(line: str) -> str:
    """Render one JSONL record as ``ts lvl logger: message``."""
    try:
        record = json.loads(line)
    except json.JSONDecodeError:
        return line.rstrip()
    return f"{record.get('ts', '')} {record.get('lvl', ''):<7} {record.get('logger', '')}: {record.get('message', '')}"


@click.command("logs")
@click.option("--path", default=None, help="Path to JSONL log file (default: $TOOLPATH_LOG_PATH or ./toolpath.log.jsonl)")
@click.option("--follow/--no-follow", default=False, help="Tail the log")
@click.option("--filter", "filter_text", default=None, help="Substring to filter lines")
@click.option("--raw", is_flag=True, help="Print records as stored")
def logs_cmd(path: str | None, follow: bool, filter_text: str | None, raw: bool):
    """Show the JSONL log."""
    p = Path(path) if path else default_log_path()
    if not p.exists():
        click.echo(f"No log file at {p}")
        return

    with p.open("r", encoding="utf-8") as f:
        if follow:
            # seek to end
            f.seek(0, 2)
        while True:
            line = f.readline()
            if not line:
                if not follow:
                    break
                time.sleep(0.25)
                continue
            if filter_text and filter_text not in line:
                continue
            click.echo(line.rstrip() if raw else _format_line(line))
