# finote/cli.py
import logging
import os
from datetime import date

import click
from dotenv import load_dotenv

from finote.budgets import budget_report
from finote.config import default_config_path, load_config
from finote.core.categories import categorize, merge_categories
from finote.core.models import Budget, BudgetPeriod, Goal, GoalCategory, Transaction, TransactionType
from finote.goals import contribute, days_remaining, goal_progress
from finote.insights import generate_insights, health_score
from finote.recurring import candidate_to_transaction, detect_recurring, remove_candidate
from finote.reports import filter_transactions, monthly_data, summarize_by_category, summary_stats
from finote.storage import get_store
from finote.tax import calculate_tax, get_schedule

logger = logging.getLogger(__name__)

_DATE = click.DateTime(formats=['%Y-%m-%d'])
_TYPES = click.Choice([t.value for t in TransactionType])


def _as_date(value):
    return value.date() if value else None


def _store(ctx):
    try:
        return get_store(ctx.obj['config'])
    except KeyError as e:
        raise click.ClickException(str(e))


@click.group()
@click.option(
    '--config', 'config_path',
    default=None,
    type=click.Path(dir_okay=False),
    help='Path to config.yaml (default: $FINOTE_CONFIG or ./config.yaml)'
)
@click.option(
    '--env-file', 'env_file',
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help='Optional .env file with FINOTE_* settings'
)
@click.option('--verbose', '-v', is_flag=True, default=False, help='Enable debug logging.')
@click.pass_context
def main(ctx, config_path, env_file, verbose):
    """Track transactions, spot recurring payments and estimate income tax."""
    if env_file:
        load_dotenv(env_file)
    level = 'DEBUG' if verbose else os.getenv('FINOTE_LOG_LEVEL', 'WARNING').upper()
    if not isinstance(logging.getLevelName(level), int):
        raise click.ClickException(f"Unknown log level '{level}' in FINOTE_LOG_LEVEL.")
    logging.basicConfig(level=level)

    try:
        cfg = load_config(config_path)
    except ValueError as e:
        raise click.ClickException(str(e))
    logger.debug("Using config %s", config_path or default_config_path())
    ctx.obj = {'config': cfg}


@main.command()
@click.argument('tx_type', type=_TYPES)
@click.argument('amount', type=click.FloatRange(min=0))
@click.argument('description')
@click.option('--category', default=None, help='Category (guessed from keywords if omitted)')
@click.option('--date', 'tx_date', type=_DATE, default=None, help='YYYY-MM-DD (default: today)')
@click.pass_context
def add(ctx, tx_type, amount, description, category, tx_date):
    """Record a new transaction."""
    cfg = ctx.obj['config']
    category = category or categorize(description, cfg.get('categories', {})) or 'Other'
    tx = Transaction.new(
        date=_as_date(tx_date) or date.today(),
        type=tx_type,
        category=category,
        description=description,
        amount=amount,
    )
    _store(ctx).add_transaction(tx)
    click.echo(f"Added {tx.type.value} {tx.amount:.2f} '{tx.description}' [{tx.category}] ({tx.id})")


@main.command(name='list')
@click.option('--from', 'date_from', type=_DATE, default=None)
@click.option('--to', 'date_to', type=_DATE, default=None)
@click.option('--type', 'tx_type', type=_TYPES, default=None)
@click.option('--category', default=None)
@click.option('--search', default=None)
@click.pass_context
def list_transactions(ctx, date_from, date_to, tx_type, category, search):
    """List stored transactions, oldest first."""
    txs = filter_transactions(
        _store(ctx).load_transactions(),
        date_from=_as_date(date_from),
        date_to=_as_date(date_to),
        type=tx_type,
        category=category,
        search=search,
    )
    if not txs:
        click.echo("No transactions found.")
        return
    for tx in sorted(txs, key=lambda t: t.date):
        click.echo(
            f"{tx.date.isoformat()}  {tx.type.value:<7}  {tx.amount:>12.2f}  "
            f"{tx.category:<14}  {tx.description}  ({tx.id})"
        )


@main.command()
@click.argument('transaction_id')
@click.pass_context
def delete(ctx, transaction_id):
    """Delete a transaction by id."""
    if not _store(ctx).delete_transaction(transaction_id):
        raise click.ClickException(f"No transaction with id '{transaction_id}'.")
    click.echo(f"Deleted {transaction_id}.")


@main.command()
@click.pass_context
def summary(ctx):
    """Show totals, spending by category and monthly net."""
    txs = _store(ctx).load_transactions()
    stats = summary_stats(txs)
    click.echo(f"Income:       {stats.total_income:.2f}")
    click.echo(f"Expenses:     {stats.total_expenses:.2f}")
    click.echo(f"Net balance:  {stats.net_balance:.2f}")
    click.echo(f"Transactions: {stats.transaction_count}")

    by_category = summarize_by_category(txs)
    if by_category:
        click.echo("\nExpenses by category:")
        for row in by_category:
            click.echo(f"  {row['category']:<14} {row['total']:>12.2f} ({row['transactions']})")

    months = monthly_data(txs)
    if months:
        click.echo("\nMonthly:")
        for row in months:
            click.echo(
                f"  {row['month']}  income {row['income']:.2f}  "
                f"expenses {row['expenses']:.2f}  net {row['net']:.2f}"
            )


@main.command()
@click.pass_context
def categories(ctx):
    """List known categories per transaction type."""
    merged = merge_categories(_store(ctx).load_transactions())
    for kind, names in merged.items():
        click.echo(f"{kind}: {', '.join(names)}")


@main.command()
@click.option('--today', type=_DATE, default=None, help='Reference date (default: today)')
@click.option('--accept', 'accept', type=int, multiple=True, help='Add suggestion N as a transaction')
@click.pass_context
def recurring(ctx, today, accept):
    """Suggest transactions that look due soon."""
    store = _store(ctx)
    candidates = detect_recurring(store.load_transactions(), today=_as_date(today))
    if not candidates:
        click.echo("No recurring transactions detected.")
        return

    for index, c in enumerate(candidates, start=1):
        click.echo(
            f"{index}. {c.description} [{c.category}] {c.type.value} {c.amount} "
            f"{c.frequency.value}, next {c.suggested_date.isoformat()} "
            f"(last {c.last_occurrence.isoformat()}, confidence {c.confidence:.0%})"
        )

    for number in accept:
        if not 1 <= number <= len(candidates):
            raise click.BadParameter(f"No suggestion {number}.", param_hint='--accept')

    chosen = [candidates[number - 1] for number in dict.fromkeys(accept)]
    surfaced = list(candidates)
    added = []
    for candidate in chosen:
        added.append(candidate_to_transaction(candidate))
        surfaced = remove_candidate(surfaced, candidate.id)
    if not added:
        return
    store.add_transactions(added)
    for tx in added:
        click.echo(f"Added {tx.description} for {tx.date.isoformat()}")
    click.echo(f"{len(surfaced)} suggestion(s) still open.")


@main.command()
@click.argument('income')
@click.option('--currency', default=None, help='Tax schedule to use (default: config currency)')
@click.option('--post-tax', is_flag=True, default=False, help='INCOME is net; estimate the gross.')
@click.option('--details', is_flag=True, default=False, help='Show the per-bracket breakdown.')
@click.pass_context
def tax(ctx, income, currency, post_tax, details):
    """Estimate income tax for INCOME."""
    cfg = ctx.obj['config']
    try:
        schedule = get_schedule(currency or cfg.get('currency', 'THB'), cfg.get('tax_schedules'))
    except (KeyError, ValueError) as e:
        raise click.ClickException(str(e.args[0] if e.args else e))

    result = calculate_tax(income, schedule, pre_tax=not post_tax)
    if result is None:
        click.echo("No result: income must be a positive number.")
        return

    click.echo(f"Gross income:   {result.gross_income:,.2f} {schedule.currency}")
    click.echo(f"Total tax:      {result.total_tax:,.2f}")
    click.echo(f"Net income:     {result.net_income:,.2f}")
    click.echo(f"Effective rate: {result.effective_rate:.2f}%")
    if schedule.allowance:
        click.echo(f"Personal allowance of {schedule.allowance:,.0f} deducted before brackets.")
    if details:
        for row in result.brackets:
            label = row.bracket.label or f"{row.bracket.rate:g}%"
            click.echo(f"  {label}: taxable {row.taxable_amount:,.2f}, tax {row.tax_amount:,.2f}")


@main.group()
def budget():
    """Manage spending budgets."""


@budget.command(name='add')
@click.argument('category')
@click.argument('amount', type=click.FloatRange(min=0, min_open=True))
@click.option('--period', type=click.Choice([p.value for p in BudgetPeriod]), default='monthly')
@click.pass_context
def budget_add(ctx, category, amount, period):
    b = _store(ctx).add_budget(Budget(category=category, amount=amount, period=BudgetPeriod(period)))
    click.echo(f"Added {b.period.value} budget {b.amount:.2f} for {b.category} ({b.id})")


@budget.command(name='list')
@click.pass_context
def budget_list(ctx):
    budgets = _store(ctx).load_budgets()
    if not budgets:
        click.echo("No budgets.")
        return
    for b in budgets:
        click.echo(f"{b.category:<14} {b.amount:>12.2f} {b.period.value:<8} ({b.id})")


@budget.command(name='delete')
@click.argument('budget_id')
@click.pass_context
def budget_delete(ctx, budget_id):
    if not _store(ctx).delete_budget(budget_id):
        raise click.ClickException(f"No budget with id '{budget_id}'.")
    click.echo(f"Deleted {budget_id}.")


@budget.command(name='status')
@click.option('--today', type=_DATE, default=None)
@click.pass_context
def budget_status_cmd(ctx, today):
    """Show spending against each budget for the current period."""
    store = _store(ctx)
    statuses = budget_report(store.load_budgets(), store.load_transactions(), _as_date(today))
    if not statuses:
        click.echo("No budgets.")
        return
    for s in statuses:
        click.echo(
            f"{s.budget.category:<14} {s.spent:>10.2f} / {s.budget.amount:.2f} "
            f"({s.percentage:.0f}%) {s.level}"
        )


@main.group()
def goal():
    """Manage savings, debt and investment goals."""


@goal.command(name='add')
@click.argument('name')
@click.argument('target', type=click.FloatRange(min=0, min_open=True))
@click.option('--deadline', type=_DATE, required=True, help='YYYY-MM-DD')
@click.option('--current', type=click.FloatRange(min=0), default=0.0, help='Amount already saved')
@click.option('--category', type=click.Choice([c.value for c in GoalCategory]), default='savings')
@click.pass_context
def goal_add(ctx, name, target, deadline, current, category):
    g = _store(ctx).add_goal(Goal(
        name=name,
        target_amount=target,
        current_amount=current,
        deadline=_as_date(deadline),
        category=GoalCategory(category),
    ))
    click.echo(f"Added {g.category.value} goal '{g.name}' {g.target_amount:.2f} by {g.deadline.isoformat()} ({g.id})")


@goal.command(name='list')
@click.option('--today', type=_DATE, default=None)
@click.pass_context
def goal_list(ctx, today):
    goals = _store(ctx).load_goals()
    if not goals:
        click.echo("No goals.")
        return
    for g in goals:
        click.echo(
            f"{g.name:<16} {g.current_amount:>10.2f} / {g.target_amount:.2f} "
            f"({goal_progress(g):.0f}%) {days_remaining(g, _as_date(today))} days left ({g.id})"
        )


@goal.command(name='contribute')
@click.argument('goal_id')
@click.argument('amount', type=float)
@click.pass_context
def goal_contribute(ctx, goal_id, amount):
    """Add AMOUNT to a goal (use -- before a negative amount to withdraw)."""
    store = _store(ctx)
    current = next((g for g in store.load_goals() if g.id == goal_id), None)
    if current is None:
        raise click.ClickException(f"No goal with id '{goal_id}'.")
    updated = store.update_goal(goal_id, current_amount=contribute(current, amount).current_amount)
    click.echo(f"{updated.name}: {updated.current_amount:.2f} / {updated.target_amount:.2f}")


@goal.command(name='delete')
@click.argument('goal_id')
@click.pass_context
def goal_delete(ctx, goal_id):
    if not _store(ctx).delete_goal(goal_id):
        raise click.ClickException(f"No goal with id '{goal_id}'.")
    click.echo(f"Deleted {goal_id}.")


@main.command()
@click.option('--today', type=_DATE, default=None)
@click.pass_context
def insights(ctx, today):
    """Show rule-based insights for the last 30 days."""
    store = _store(ctx)
    found = generate_insights(
        store.load_transactions(), store.load_budgets(), store.load_goals(), _as_date(today)
    )
    for item in found:
        line = f"[{item.type}] {item.title} {item.message}"
        if item.action:
            line += f" -> {item.action}"
        click.echo(line)


@main.command()
@click.option('--today', type=_DATE, default=None)
@click.pass_context
def health(ctx, today):
    """Show the weighted financial health score."""
    store = _store(ctx)
    result = health_score(
        store.load_transactions(), store.load_budgets(), store.load_goals(), _as_date(today)
    )
    click.echo(f"Financial health: {result.score}/100")
    for m in result.metrics:
        click.echo(f"  {m.name:<20} {m.score:>5.0f}  {m.status:<9} {m.description}")


if __name__ == '__main__':
    main()
