"""CLI to fetch one day of people-counting statistics from the camera."""

import json
import sys
from datetime import date, datetime
from pathlib import Path

import click

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from peoplecount.config import (  # noqa: E402  # pylint: disable=wrong-import-position
    DeviceConfig,
    configure_logging,
)
from peoplecount.services import (  # noqa: E402  # pylint: disable=wrong-import-position
    counting_client,
)


@click.command()
@click.option(
    "--date",
    "day",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Day to report on (YYYY-MM-DD, defaults to today)",
)
@click.option("--region-id", type=int, default=None, help="Counting region ID")
@click.option("--log-level", default="INFO", show_default=True)
def poll(day: datetime | None, region_id: int | None, log_level: str) -> None:
    """Query the counting device and print the statistics as JSON."""
    configure_logging(log_level)
    config = DeviceConfig()

    query_day = day.date() if day else date.today()
    data = counting_client.poll_counting_statistics(config, query_day, region_id)

    if data is None:
        click.echo(f"Failed after {config.max_attempts} attempts.", err=True)
        sys.exit(1)

    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    poll()  # pylint: disable=no-value-for-parameter
