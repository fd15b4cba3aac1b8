from flask.cli import with_appcontext
from flask import current_app
import click
import json


@click.command('tag-trends')
@click.option('--force', is_flag=True, help='Retag trends even if content and reference are unchanged')
@with_appcontext
def tag_trends_command(force):
    """Run the tagging pass over active trends"""
    from relevance_engine.relevance.batch import build_classifier, tag_trends
    from relevance_engine.relevance.reference import load_reference_tables

    reference = load_reference_tables()
    click.echo(f"Reference snapshot {reference.version}")
    stats = tag_trends(build_classifier(reference), force=force)
    click.echo(f"Tagged {stats['tagged']}, skipped {stats['skipped']}, failed {stats['failed']}")


@click.command('refresh-relevance')
@with_appcontext
def refresh_relevance_command():
    """Tag trends and recompute relevance for every active organization"""
    from relevance_engine.relevance.batch import refresh_relevance

    run = refresh_relevance()
    click.echo(
        f"Run {run.id} {run.status}: {run.organizations_processed} organizations processed, "
        f"{run.organizations_failed} failed, {run.trends_tagged} trends tagged"
    )
    for failure in run.failures or []:
        click.echo(f"- organization {failure['organization_id']}: {failure['error']}")


@click.command('run-learning')
@click.option('--lookback-days', type=int, default=None, help='Only campaigns sent within this many days')
@click.option('--batch-size', type=int, default=None, help='Maximum campaigns to process')
@with_appcontext
def run_learning_command(lookback_days, batch_size):
    """Correlate completed campaigns with trends and update affinities"""
    from relevance_engine.relevance.feedback import run_learning_pipeline

    stats = run_learning_pipeline(
        lookback_days=lookback_days or current_app.config.get('FEEDBACK_LOOKBACK_DAYS', 7),
        batch_size=batch_size or current_app.config.get('FEEDBACK_BATCH_SIZE', 50),
    )
    click.echo(
        f"Processed {stats['campaigns_processed']} campaigns ({stats['campaigns_failed']} failed), "
        f"{stats['correlations']} correlations, {stats['affinities_updated']} affinities updated"
    )


@click.command('decay-affinities')
@with_appcontext
def decay_affinities_command():
    """Decay learned affinities not used for 30 days"""
    from relevance_engine.relevance.decay import decay_stale_affinities

    stats = decay_stale_affinities()
    click.echo(f"Decayed {stats['decayed']} affinities ({stats['failed']} failed)")


@click.command('cleanup-filter-logs')
@click.option('--days', type=int, default=None, help='Retention window in days')
@with_appcontext
def cleanup_filter_logs_command(days):
    """Delete filter-log entries older than the retention window"""
    from relevance_engine.relevance.store import cleanup_filter_logs

    deleted = cleanup_filter_logs(days or current_app.config.get('FILTER_LOG_RETENTION_DAYS', 30))
    click.echo(f"Deleted {deleted} filter log entries")


@click.command('explain-relevance')
@click.argument('organization_id', type=int)
@click.argument('trend_id', type=int)
@with_appcontext
def explain_relevance_command(organization_id, trend_id):
    """Show how a trend scores for an organization"""
    from relevance_engine.relevance.exceptions import RelevanceEngineError
    from relevance_engine.relevance.service import explain_relevance

    try:
        explanation = explain_relevance(organization_id, trend_id)
    except RelevanceEngineError as e:
        raise click.ClickException(str(e))
    click.echo(json.dumps(explanation, indent=2))


def init_commands(app):
    app.cli.add_command(tag_trends_command)
    app.cli.add_command(refresh_relevance_command)
    app.cli.add_command(run_learning_command)
    app.cli.add_command(decay_affinities_command)
    app.cli.add_command(cleanup_filter_logs_command)
    app.cli.add_command(explain_relevance_command)
