"""
ADMIN COMMANDS
==============

    flask --app run seed-week [--week N]
    flask --app run weekly-cycle

`weekly-cycle` must be run at most once per real-world week.
"""

import click
from flask import current_app

from chitfund.services.exceptions import LedgerError
from chitfund.services.installment_service import run_weekly_cycle, seed_week_counter


def register_commands(app):

    @app.cli.command('seed-week')
    @click.option('--week', type=int, default=None,
                  help='Starting week number (defaults to INITIAL_WEEK).')
    def seed_week(week):
        """Create the chits_installment week counter if it is missing."""
        if week is None:
            week = current_app.config['INITIAL_WEEK']

        entry, created = seed_week_counter(week)
        if created:
            click.echo(f"Week counter created at week {entry.value}")
        else:
            click.echo(f"Week counter already exists at week {entry.value}")

    @app.cli.command('weekly-cycle')
    def weekly_cycle():
        """Create this week's chit installments and advance the week counter."""
        try:
            result = run_weekly_cycle()
        except LedgerError as e:
            raise click.ClickException(str(e))

        click.echo(result['message'])
