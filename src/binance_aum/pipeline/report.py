"""Report generation."""

from __future__ import annotations

from ..report import generate_report
from ..report import publish_report as publish_report_impl
from .context import PipelineContext


async def build_report(ctx: PipelineContext) -> None:
    """Generate the AUM report.

    Args:
        ctx: Pipeline context containing snapshot, prices and result

    Sets the report in the context.
    """
    s = ctx.state.settings
    log = ctx.state.logger

    log.info("Generating report...")
    ctx.report = generate_report(
        ctx.snapshot_required,
        ctx.prices_required,
        ctx.result_required,
        report_decimals=s.report_decimals,
        diagnostics=ctx.diagnostics,
        allow_negative=s.allow_negative_aum,
    )


async def publish_report(ctx: PipelineContext) -> None:
    """Publish the AUM report in the configured output format."""
    await publish_report_impl(ctx.state.settings, ctx.report_required)
