"""
TRACKER Command Line

    tracker-engine INPUT OUTPUT [--users PATH] [--debug]

Reads the roster and the command log, replays the log and writes the
results as a pretty-printed JSON array.
"""

import json
import logging
from pathlib import Path
from typing import Any, List, Optional

import click

from . import __version__
from .config import TrackerConfig
from .engine import Engine

logger = logging.getLogger(__name__)


def _load_array(path: Path) -> Optional[List[Any]]:
    """JSON array stored at `path`, or None if it cannot be read."""
    try:
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Cannot read %s: %s", path, e)
        return None
    if not isinstance(data, list):
        logger.warning("Expected a JSON array in %s", path)
        return None
    return data


def run(input_path: Path, output_path: Path, config: TrackerConfig) -> List[Any]:
    """
    Replay `input_path` and write the results to `output_path`.

    An unreadable roster or command log yields an empty result array.
    """
    users = _load_array(Path(config.users_path))
    commands = _load_array(input_path)

    results: List[Any] = []
    if users is not None and commands is not None:
        engine = Engine.from_roster(users, config)
        results = engine.replay(commands)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as f:
        json.dump(results, f, indent=config.indent)
        f.write("\n")
    return results


@click.command()
@click.version_option(version=__version__, prog_name="tracker-engine")
@click.argument("input_path", metavar="INPUT", type=click.Path(path_type=Path))
@click.argument("output_path", metavar="OUTPUT", type=click.Path(path_type=Path))
@click.option("--users", "users_path", type=click.Path(path_type=Path), default=None,
              help="Roster JSON file (defaults to input/database/users.json)")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def cli(input_path: Path, output_path: Path, users_path: Optional[Path], debug: bool) -> None:
    """Replay the command log INPUT and write results to OUTPUT."""
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s - %(levelname)s - %(message)s")

    config = TrackerConfig()
    if users_path is not None:
        config = config.model_copy(update={"users_path": str(users_path)})

    results = run(input_path, output_path, config)
    click.echo(f"{len(results)} results written to {output_path}", err=True)


def main() -> None:
    cli()
