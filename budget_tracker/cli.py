# budget_tracker/cli.py
import logging
import os
from contextlib import contextmanager

import click
from dotenv import load_dotenv

from budget_tracker.config import load_config, save_config
from budget_tracker.core.exceptions import BudgetError
from budget_tracker.core.models import FilterPeriod, TransactionType, format_amount
from budget_tracker.currency import CurrencyService
from budget_tracker.ledger import Ledger
from budget_tracker.outputs import get_output
from budget_tracker.statistics import category_breakdown
from budget_tracker.storage import get_store

DATE_FORMATS = ['%Y-%m-%d', '%Y-%m-%dT%H:%M:%S', '%Y-%m-%d %H:%M']
PERIODS = click.Choice([p.value for p in FilterPeriod])
TYPES = click.Choice([t.value for t in TransactionType])


@contextmanager
def domain_errors():
    """Report domain failures as click errors (exit code 1)."""
    try:
        yield
    except BudgetError as e:
        raise click.ClickException(str(e)) from e


def _ledger(ctx):
    obj = ctx.ensure_object(dict)
    if 'ledger' not in obj:
        cfg = obj['config']
        with domain_errors():
            store = get_store(cfg['store'], cfg)
        obj['ledger'] = Ledger(store)
    return obj['ledger']


def _log_level(name):
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.WARNING


def _echo_tx(tx, names):
    category = names.get(tx.category_id, '?')
    click.echo(
        f"#{tx.id:<4} {tx.date:%Y-%m-%d}  {tx.formatted_amount_with_sign:>16}  "
        f"{category:<20} {tx.description}"
    )


@click.group()
@click.option(
    '--config', 'config_path',
    default='config.yaml',
    type=click.Path(dir_okay=False),
    help='Path to config.yaml (defaults are used when it does not exist)'
)
@click.option(
    '--db', 'db_path',
    default=None,
    type=click.Path(dir_okay=False),
    help='SQLite database file (overrides config)'
)
@click.option(
    '--store', 'store_name',
    default=None,
    type=click.Choice(['sqlite', 'memory']),
    help='Storage backend (overrides config)'
)
@click.option(
    '--env-file', 'env_file',
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help='Optional .env file, e.g. with BUDGET_DB_PATH or BUDGET_LOG_LEVEL'
)
@click.pass_context
def main(ctx, config_path, db_path, store_name, env_file):
    """
    Track income and expenses in tenge: record transactions against
    categories, review balances and statistics, manage the local profile,
    and look up exchange rates.
    """
    if env_file:
        load_dotenv(env_file)
    logging.basicConfig(level=_log_level(os.getenv('BUDGET_LOG_LEVEL', 'WARNING')))

    cfg = load_config(config_path)
    if db_path:
        cfg['db_path'] = db_path
    if store_name:
        cfg['store'] = store_name
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg
    ctx.obj['config_path'] = config_path


@main.command()
@click.option('--force', is_flag=True, default=False, help='Overwrite an existing file')
@click.pass_context
def init(ctx, force):
    """Write the effective configuration to the --config path."""
    path = ctx.obj['config_path']
    if os.path.exists(path) and not force:
        raise click.ClickException(f"{path} already exists (use --force)")
    save_config(ctx.obj['config'], path)
    click.echo(f"Wrote {path}")


@main.command()
@click.argument('amount', type=float)
@click.option('--category', 'category_id', required=True, type=int, help='Category id')
@click.option('--date', 'when', type=click.DateTime(formats=DATE_FORMATS), default=None)
@click.option('--description', default='', help='Up to 100 characters')
@click.pass_context
def add(ctx, amount, category_id, when, description):
    """Record a transaction; its type follows the category."""
    ledger = _ledger(ctx)
    with domain_errors():
        tx = ledger.add_transaction(amount, category_id, when, description)
    click.echo(f"Added #{tx.id}: {tx.formatted_amount_with_sign} ({tx.description})")


@main.command()
@click.argument('transaction_id', type=int)
@click.option('--amount', type=float, default=None)
@click.option('--category', 'category_id', type=int, default=None)
@click.option('--date', 'when', type=click.DateTime(formats=DATE_FORMATS), default=None)
@click.option('--description', default=None)
@click.pass_context
def edit(ctx, transaction_id, amount, category_id, when, description):
    """Change fields of an existing transaction."""
    ledger = _ledger(ctx)
    with domain_errors():
        tx = ledger.edit_transaction(
            transaction_id,
            amount=amount,
            category_id=category_id,
            date=when,
            description=description,
        )
    click.echo(f"Updated #{tx.id}: {tx.formatted_amount_with_sign} ({tx.description})")


@main.command()
@click.argument('transaction_id', type=int)
@click.pass_context
def delete(ctx, transaction_id):
    """Delete a transaction."""
    ledger = _ledger(ctx)
    with domain_errors():
        ledger.delete_transaction(transaction_id)
    click.echo(f"Deleted #{transaction_id}")


@main.command(name='list')
@click.option('--type', 'tx_type', type=TYPES, default=None)
@click.option('--category', 'category_id', type=int, default=None)
@click.option('--search', default=None, help='Substring of the description')
@click.option('--period', type=PERIODS, default='all', show_default=True)
@click.option('--by-day', is_flag=True, default=False, help='Group rows under day headers')
@click.pass_context
def list_cmd(ctx, tx_type, category_id, search, period, by_day):
    """List transactions, newest first."""
    ledger = _ledger(ctx)
    names = ledger.category_names()
    filters = dict(tx_type=tx_type, category_id=category_id, search=search, period=period)
    if by_day:
        groups = ledger.group_by_day(ledger.list_transactions(**filters))
        for day, txs in groups.items():
            click.echo(day)
            for tx in txs:
                _echo_tx(tx, names)
        count = sum(len(txs) for txs in groups.values())
    else:
        txs = ledger.list_transactions(**filters)
        for tx in txs:
            _echo_tx(tx, names)
        count = len(txs)
    if not count:
        click.echo("No transactions.")


@main.command()
@click.option('--recent', default=5, show_default=True, type=int)
@click.pass_context
def balance(ctx, recent):
    """Show the overall balance and the latest transactions."""
    ledger = _ledger(ctx)
    data = ledger.dashboard(recent=recent)
    click.echo(f"Balance: {format_amount(data['balance'])}")
    names = ledger.category_names()
    for tx in data['recent']:
        _echo_tx(tx, names)


@main.command()
@click.option('--period', type=PERIODS, default='month', show_default=True)
@click.pass_context
def stats(ctx, period):
    """Income, expenses and category breakdown for a period."""
    s = _ledger(ctx).statistics(period)
    click.echo(f"Period:   {FilterPeriod(period).display_name} (since {s.start:%Y-%m-%d})")
    click.echo(f"Income:   {format_amount(s.total_income)}")
    click.echo(f"Expenses: {format_amount(s.total_expense)}")
    click.echo(f"Balance:  {format_amount(s.balance)}")
    for title, totals in (("Expenses", s.expenses_by_category), ("Income", s.incomes_by_category)):
        if not totals:
            continue
        click.echo(f"\n{title} by category:")
        for row in category_breakdown(totals):
            click.echo(
                f"  {row['category']:<22} {format_amount(row['total']):>14}  {row['share']:5.1f}%"
            )


@main.command()
@click.option('--type', 'tx_type', type=TYPES, default=None)
@click.pass_context
def categories(ctx, tx_type):
    """List categories with their ids."""
    store = _ledger(ctx).store
    cats = store.get_categories_by_type(tx_type) if tx_type else store.get_categories()
    for c in cats:
        marker = '' if c.is_default else ' (custom)'
        click.echo(f"{c.id:>3}  {c.type.value:<7}  {c.name} / {c.name_kz}{marker}")


@main.command(name='category-add')
@click.argument('name')
@click.option('--type', 'tx_type', type=TYPES, required=True)
@click.option('--name-kz', default='')
@click.option('--icon', default='more_horiz', show_default=True)
@click.option('--color', 'color_hex', default='#A8A8A8', show_default=True)
@click.pass_context
def category_add(ctx, name, tx_type, name_kz, icon, color_hex):
    """Create a custom category."""
    ledger = _ledger(ctx)
    with domain_errors():
        cat = ledger.add_category(name, tx_type, name_kz=name_kz, icon=icon, color_hex=color_hex)
    click.echo(f"Added category #{cat.id}: {cat.name}")


@main.command(name='category-delete')
@click.argument('category_id', type=int)
@click.pass_context
def category_delete(ctx, category_id):
    """Delete a custom category that no transaction uses."""
    ledger = _ledger(ctx)
    with domain_errors():
        deleted = ledger.store.delete_category(category_id)
    if not deleted:
        raise click.ClickException(f"Category {category_id} not found")
    click.echo(f"Deleted category #{category_id}")


@main.group()
def profile():
    """Show or change the local user profile."""


@profile.command(name='show')
@click.pass_context
def profile_show(ctx):
    p = _ledger(ctx).store.get_user_profile()
    if p is None:
        click.echo("No profile saved.")
        return
    click.echo(f"Name:     {p.name or '-'}")
    click.echo(f"Email:    {p.email or '-'}")
    click.echo(f"Currency: {p.currency}")


@profile.command(name='set')
@click.option('--name', default='')
@click.option('--email', default='')
@click.option('--currency', default='KZT', show_default=True)
@click.pass_context
def profile_set(ctx, name, email, currency):
    ledger = _ledger(ctx)
    with domain_errors():
        ledger.save_profile(name, email, currency)
    click.echo("Profile saved.")


@profile.command(name='delete')
@click.pass_context
def profile_delete(ctx):
    _ledger(ctx).store.delete_user_profile()
    click.echo("Profile deleted.")


@main.command()
@click.option('--refresh/--cached', default=False, help='Always fetch, or use a fresh cache')
@click.pass_context
def rates(ctx, refresh):
    """Exchange rates in tenge."""
    service = CurrencyService(ctx.obj['config'])
    with domain_errors():
        result = service.get_rates(refresh=refresh)
    for rate in result:
        click.echo(f"{rate}  {rate.name}")


@main.command()
@click.option(
    '--output', 'output_format',
    default='csv',
    type=click.Choice(['csv', 'excel']),
    help='Output target: csv or excel'
)
@click.option('--period', type=PERIODS, default='all', show_default=True)
@click.pass_context
def export(ctx, output_format, period):
    """Export transactions to a CSV or Excel file in output_dir."""
    ledger = _ledger(ctx)
    txs = ledger.list_transactions(period=period)
    with domain_errors():
        outputter = get_output(output_format, ctx.obj['config'])
    path = outputter.append(txs, ledger.category_names())
    if path is None:
        click.echo("No transactions to export.")
        return
    click.echo(f"Exported {len(txs)} transaction(s) to {path}.")


@main.command()
@click.option('--yes', is_flag=True, default=False, help='Skip the confirmation prompt')
@click.pass_context
def reset(ctx, yes):
    """Delete all transactions, the profile and custom categories."""
    if not yes:
        click.confirm("Delete all data? This cannot be undone", abort=True)
    _ledger(ctx).reset()
    click.echo("All data deleted.")
