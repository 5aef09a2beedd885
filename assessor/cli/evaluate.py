"""Evaluate attempts from the command line and recover stuck ones."""

from __future__ import annotations

import asyncio
import typing as t

import assessor.lib.cli as click
import assessor.lib.json as json
from assessor.core import di
from assessor.core.config.evaluation import EvaluationSettings
from assessor.evaluation import AttemptNotFound, InterviewIntelligence, Orchestrator
from assessor.evaluation.base import transaction
from assessor.evaluation.orchestrator import summarize
from assessor.evaluation.sweep import retrigger as retrigger_attempts
from assessor.evaluation.sweep import sweep as sweep_attempts
from assessor.model import AttemptID, EvaluationSummary
from assessor.storage import attempt as attempt_storage

T = t.TypeVar("T")


def run_to_completion(
    coro: t.Coroutine[t.Any, t.Any, T], orchestrator: Orchestrator, intelligence: InterviewIntelligence
) -> T:
    """Run `coro`, then wait for every background task it started."""

    async def run() -> T:
        try:
            return await coro
        finally:
            await orchestrator.drain()
            await intelligence.drain()

    return asyncio.run(run())


@click.command()
@click.argument("attempt_id", type=click.KeyParamType(AttemptID))
@click.option("--rescore", is_flag=True, default=False, help="ignore existing score records and score every answer")
@di.inject
def evaluate(
    attempt_id: AttemptID,
    rescore: bool,
    orchestrator: Orchestrator = di.Provide["evaluation.orchestrator"],
    intelligence: InterviewIntelligence = di.Provide["evaluation.intelligence"],
):
    """Evaluate one attempt and wait for background scoring to finish."""
    try:
        summary: EvaluationSummary = run_to_completion(
            orchestrator.evaluate(attempt_id, rescore=rescore), orchestrator, intelligence
        )
    except AttemptNotFound as e:
        raise click.ClickException(f"no such attempt: {attempt_id}") from e

    if summary.background_processing:
        with transaction(orchestrator.session_factory) as session:
            attempt = attempt_storage.get(attempt_id, session=session)
        assert attempt is not None
        summary = summarize(attempt, background=0)

    click.echo(json.dumps(summary.model_dump(mode="json"), indent=2))


@click.command()
@di.inject
def sweep(
    orchestrator: Orchestrator = di.Provide["evaluation.orchestrator"],
    intelligence: InterviewIntelligence = di.Provide["evaluation.intelligence"],
    settings: EvaluationSettings = di.Provide["evaluation.settings"],
):
    """Submit expired or abandoned attempts and restart stale evaluations."""
    result = run_to_completion(sweep_attempts(orchestrator, settings.sweep), orchestrator, intelligence)
    click.echo(f"submitted {len(result.submitted)}, restarted {len(result.restarted)}, failed {len(result.failed)}")
    for attempt_id in result.failed:
        click.echo(f"  failed {attempt_id}", err=True)
    if result.failed:
        raise click.ClickException(f"{len(result.failed)} attempt(s) could not be evaluated")


@click.command()
@di.inject
def retrigger(
    orchestrator: Orchestrator = di.Provide["evaluation.orchestrator"],
    intelligence: InterviewIntelligence = di.Provide["evaluation.intelligence"],
):
    """Evaluate submitted attempts that never completed and repair mismatched totals."""
    result = run_to_completion(retrigger_attempts(orchestrator), orchestrator, intelligence)
    click.echo(f"evaluated {len(result.evaluated)}, repaired {len(result.repaired)}, failed {len(result.failed)}")
    for attempt_id in result.failed:
        click.echo(f"  failed {attempt_id}", err=True)
    if result.failed:
        raise click.ClickException(f"{len(result.failed)} attempt(s) could not be evaluated")
