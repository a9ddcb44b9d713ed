from chitfund.models import ChitPayment, ConfigEntry


def test_seed_week_then_weekly_cycle(app, make_user):
    make_user(total_chits=2)
    runner = app.test_cli_runner()

    seeded = runner.invoke(args=['seed-week', '--week', '3'])
    assert seeded.exit_code == 0
    assert "Week counter created at week 3" in seeded.output

    reseeded = runner.invoke(args=['seed-week'])
    assert "already exists at week 3" in reseeded.output

    cycle = runner.invoke(args=['weekly-cycle'])
    assert cycle.exit_code == 0
    assert "Successfully created 1 payment records for week 3" in cycle.output
    assert ChitPayment.query.one().weekly_installment == 3
    assert ConfigEntry.query.one().value == '4'


def test_weekly_cycle_without_counter_fails(app, make_user):
    make_user()

    result = app.test_cli_runner().invoke(args=['weekly-cycle'])

    assert result.exit_code != 0
    assert "Chits installment configuration not found" in result.output
