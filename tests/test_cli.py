import sqlite3

from click.testing import CliRunner

from budget_tracker.cli import main as cli


def _invoke(db_path, *args, input=None):
    runner = CliRunner()
    return runner.invoke(
        cli,
        ['--config', str(db_path.parent / 'missing.yaml'), '--db', str(db_path), *args],
        input=input,
    )


def _category_id(db_path, name, tx_type):
    conn = sqlite3.connect(db_path)
    try:
        return conn.execute(
            'SELECT id FROM categories WHERE name = ? AND type = ?', (name, tx_type)
        ).fetchone()[0]
    finally:
        conn.close()


def test_cli_add_list_balance(tmp_path):
    db_path = tmp_path / 'budget.db'
    res = _invoke(db_path, 'categories', '--type', 'income')
    assert res.exit_code == 0, res.output
    assert 'Зарплата' in res.output

    salary = _category_id(db_path, 'Зарплата', 'income')
    food = _category_id(db_path, 'Еда и продукты', 'expense')

    res = _invoke(db_path, 'add', '250000', '--category', str(salary), '--date', '2025-03-01')
    assert res.exit_code == 0, res.output
    assert '+250 000 ₸' in res.output

    res = _invoke(db_path, 'add', '12500', '--category', str(food),
                  '--date', '2025-03-02', '--description', 'Magnum')
    assert res.exit_code == 0, res.output

    res = _invoke(db_path, 'list')
    assert res.exit_code == 0, res.output
    lines = res.output.strip().splitlines()
    assert 'Magnum' in lines[0]
    assert 'Зарплата' in lines[1]

    res = _invoke(db_path, 'balance')
    assert 'Balance: 237 500 ₸' in res.output

    conn = sqlite3.connect(db_path)
    rows = conn.execute('SELECT amount, type FROM transactions ORDER BY date').fetchall()
    conn.close()
    assert rows == [(250000.0, 'income'), (12500.0, 'expense')]


def test_cli_reports_validation_errors(tmp_path):
    db_path = tmp_path / 'budget.db'
    res = _invoke(db_path, 'add', '0.5', '--category', '1')
    assert res.exit_code == 1
    assert 'Amount must be at least' in res.output

    res = _invoke(db_path, 'add', 'nan', '--category', '1')
    assert res.exit_code == 1
    assert 'finite number' in res.output

    res = _invoke(db_path, 'delete', '99')
    assert res.exit_code == 1
    assert 'Transaction 99 not found' in res.output

    res = _invoke(db_path, 'category-delete', '1')
    assert res.exit_code == 1
    assert 'system category' in res.output


def test_cli_edit_and_delete(tmp_path):
    db_path = tmp_path / 'budget.db'
    food = _category_id_after_init(db_path, 'Еда и продукты', 'expense')
    _invoke(db_path, 'add', '1000', '--category', str(food), '--date', '2025-03-01')

    res = _invoke(db_path, 'edit', '1', '--amount', '1500', '--description', 'Dinner')
    assert res.exit_code == 0, res.output
    assert '-1 500 ₸ (Dinner)' in res.output

    res = _invoke(db_path, 'list', '--search', 'dinner', '--by-day')
    assert '2025-03-01' in res.output

    res = _invoke(db_path, 'delete', '1')
    assert res.exit_code == 0, res.output
    res = _invoke(db_path, 'list')
    assert 'No transactions.' in res.output


def _category_id_after_init(db_path, name, tx_type):
    _invoke(db_path, 'categories')
    return _category_id(db_path, name, tx_type)


def test_cli_profile_and_reset(tmp_path):
    db_path = tmp_path / 'budget.db'
    res = _invoke(db_path, 'profile', 'show')
    assert 'No profile saved.' in res.output

    res = _invoke(db_path, 'profile', 'set')
    assert res.exit_code == 1

    res = _invoke(db_path, 'profile', 'set', '--name', 'Aigerim', '--email', 'a@example.kz')
    assert res.exit_code == 0, res.output
    res = _invoke(db_path, 'profile', 'show')
    assert 'Aigerim' in res.output
    assert 'KZT' in res.output

    res = _invoke(db_path, 'category-add', 'Питомцы', '--type', 'expense')
    assert res.exit_code == 0, res.output

    res = _invoke(db_path, 'reset', input='n\n')
    assert res.exit_code == 1
    res = _invoke(db_path, 'reset', '--yes')
    assert res.exit_code == 0, res.output

    res = _invoke(db_path, 'profile', 'show')
    assert 'No profile saved.' in res.output
    res = _invoke(db_path, 'categories')
    assert 'Питомцы' not in res.output


def test_cli_stats_and_export(tmp_path):
    db_path = tmp_path / 'budget.db'
    food = _category_id_after_init(db_path, 'Еда и продукты', 'expense')
    _invoke(db_path, 'add', '2000', '--category', str(food))
    _invoke(db_path, 'add', '6000', '--category', str(food), '--description', 'Market')

    res = _invoke(db_path, 'stats', '--period', 'week')
    assert res.exit_code == 0, res.output
    assert 'Expenses: 8 000 ₸' in res.output
    assert '100.0%' in res.output

    config = tmp_path / 'config.yaml'
    config.write_text(f"output_dir: {tmp_path / 'exports'}\n", encoding='utf-8')
    res = CliRunner().invoke(
        cli, ['--config', str(config), '--db', str(db_path), 'export', '--output', 'csv']
    )
    assert res.exit_code == 0, res.output
    assert 'Exported 2 transaction(s)' in res.output
    assert list((tmp_path / 'exports').glob('Transactions*.csv'))


def test_cli_init_writes_config(tmp_path):
    config = tmp_path / 'config.yaml'
    runner = CliRunner()
    res = runner.invoke(cli, ['--config', str(config), '--store', 'memory', 'init'])
    assert res.exit_code == 0, res.output
    assert 'store: memory' in config.read_text(encoding='utf-8')
    res = runner.invoke(cli, ['--config', str(config), 'init'])
    assert res.exit_code == 1


def test_cli_rates_uses_cache(tmp_path, monkeypatch):
    from budget_tracker.currency import CurrencyService
    from budget_tracker.core.models import CurrencyRate

    cache = tmp_path / 'rates.json'
    config = tmp_path / 'config.yaml'
    config.write_text(f"rates_cache_path: {cache}\n", encoding='utf-8')
    CurrencyService({'rates_cache_path': str(cache)}).save_rates_to_cache(
        [CurrencyRate(code='USD', rate=505.25, flag='🇺🇸', name='Доллар США')]
    )

    res = CliRunner().invoke(cli, ['--config', str(config), '--store', 'memory', 'rates'])
    assert res.exit_code == 0, res.output
    assert 'USD: 505.25 ₸' in res.output


def test_cli_ignores_unknown_log_level(tmp_path):
    res = CliRunner().invoke(
        cli,
        ['--config', str(tmp_path / 'missing.yaml'), '--store', 'memory', 'balance'],
        env={'BUDGET_LOG_LEVEL': 'verbose'},
    )
    assert res.exit_code == 0, res.output
    assert 'Balance:' in res.output
