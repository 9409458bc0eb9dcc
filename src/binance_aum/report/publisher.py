from __future__ import annotations

import json
import logging

from ..settings import AumSettings, OutputFormat
from .formatter import format_report_table
from .generator import AumReport

logger = logging.getLogger(__name__)


async def publish_to_stdout(
    report: AumReport,
    output_format: OutputFormat = OutputFormat.TABLE,
) -> None:
    """Publish report to stdout.

    Args:
        report: The AUM report to publish
        output_format: TABLE for the rich dashboard, JSON for raw JSON
    """
    if output_format == OutputFormat.JSON:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        format_report_table(report)


async def publish_report(config: AumSettings, report: AumReport) -> None:
    """Publish the AUM report in the configured output format."""
    logger.debug("Publishing report as %s", config.output_format.value)
    await publish_to_stdout(report, config.output_format)
