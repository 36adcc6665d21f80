"""CLI command for firing due-date automations.

Usage:
    flask sweep-due-tasks                 # Sweep every project
    flask sweep-due-tasks --project 3     # Sweep a single project
"""

from __future__ import annotations

import click
from flask.cli import with_appcontext


@click.command("sweep-due-tasks")
@click.option("--project", "-p", type=int, help="Sweep a specific project ID only")
@with_appcontext
def sweep_due_tasks_command(project: int | None):
    """Run due_date_passed automations for overdue tasks."""
    from taskboard.domains.automations.tasks import sweep_overdue_tasks

    stats = sweep_overdue_tasks(project_id=project)
    click.echo(
        f"Overdue: {stats['overdue']} | Fired: {stats['fired']}, "
        f"Finished: {stats['finished']}, Applied: {stats['applied']}, Failed: {stats['failed']}"
    )


def register_commands(app):
    """Register CLI commands with the app."""
    app.cli.add_command(sweep_due_tasks_command)
