"""Tests for the command line front-end."""
import io
import json

import pandas as pd
import pytest

from critpath import cli
from critpath.errors import NegativeSlackInvariantViolation
from critpath.settings import Settings

pytestmark = pytest.mark.usefixtures("reset_package_logger")


@pytest.fixture
def write_request(tmp_path):
    def _write(tasks, deps, **extra):
        path = tmp_path / 'request.json'
        doc = {'tasks': tasks, 'dependencies': deps}
        doc.update(extra)
        path.write_text(json.dumps(doc), encoding='utf-8')
        return str(path)
    return _write


def _run(argv, capsys):
    code = cli.main(argv + ['--log-level', 'error'])
    return code, capsys.readouterr().out


class TestMain:

    def test_success(self, chain, write_request, capsys):
        code, out = _run([write_request(*chain)], capsys)

        assert code == cli.EXIT_OK
        data = json.loads(out)
        assert data['criticalPath'] == ['A', 'B', 'C']
        assert data['criticalPathDuration'] == 9.0

    def test_stdin(self, chain, monkeypatch, capsys):
        tasks, deps = chain
        monkeypatch.setattr('sys.stdin',
                            io.StringIO(json.dumps({'tasks': tasks, 'dependencies': deps})))
        code, out = _run(['-'], capsys)
        assert code == cli.EXIT_OK
        assert json.loads(out)['criticalPath'] == ['A', 'B', 'C']

    def test_caller_error(self, triangle_cycle, write_request, capsys):
        code, out = _run([write_request(*triangle_cycle)], capsys)

        assert code == cli.EXIT_BAD_DATA
        data = json.loads(out)
        assert data['kind'] == 'CyclicDependency'
        assert data['cycle'] == ['A', 'B', 'C']

    def test_malformed_request(self, tmp_path, capsys):
        path = tmp_path / 'bad.json'
        path.write_text('{"tasks": 5}', encoding='utf-8')
        code, out = _run([str(path)], capsys)

        assert code == cli.EXIT_BAD_DATA
        assert json.loads(out)['kind'] == 'MalformedRequest'

    def test_missing_file(self, tmp_path, capsys):
        code, out = _run([str(tmp_path / 'missing.json')], capsys)
        assert code == cli.EXIT_BAD_DATA
        assert out == ''

    def test_defect(self, chain, write_request, monkeypatch, capsys):
        def _broken(*args, **kwargs):
            raise NegativeSlackInvariantViolation('B', -1.0)

        monkeypatch.setattr(cli, 'compute_critical_path', _broken)
        code, out = _run([write_request(*chain)], capsys)

        assert code == cli.EXIT_DEFECT
        assert json.loads(out)['severity'] == 'fatal'

    def test_scope_and_size_guard(self, chain, make_task, write_request, capsys):
        tasks, deps = chain
        path = write_request(tasks + [make_task('Other', 1)], deps, taskIds=['A', 'B', 'C'])

        code, out = _run([path], capsys)
        assert code == cli.EXIT_OK
        assert 'Other' not in json.loads(out)['taskDetails']

        code, out = _run([path, '--max-tasks', '2'], capsys)
        assert code == cli.EXIT_BAD_DATA
        assert json.loads(out)['kind'] == 'InputTooLarge'

    def test_lag_unit(self, make_task, make_dep, write_request, capsys):
        path = write_request([make_task('A', 1), make_task('B', 1)],
                             [make_dep('B', 'A', lag=120)])
        code, out = _run([path, '--lag-unit', 'minutes'], capsys)
        assert code == cli.EXIT_OK
        assert json.loads(out)['criticalPathDuration'] == pytest.approx(4.0)

    def test_debug(self, chain, write_request, capsys):
        code, out = _run([write_request(*chain), '--debug'], capsys)
        assert 'slackErr' in json.loads(out)['taskDetails']['A']

    def test_bad_setting(self, chain, write_request, monkeypatch, capsys):
        monkeypatch.setattr(Settings, 'LAG_UNIT', 'days')
        code = cli.main([write_request(*chain), '--log-level', 'error'])
        captured = capsys.readouterr()

        assert code == cli.EXIT_BAD_DATA
        assert captured.out == ''
        assert 'Invalid setting: CRITPATH_LAG_UNIT' in captured.err
        assert 'Traceback' not in captured.err

    def test_bad_option(self, chain, write_request, capsys):
        code, out = _run([write_request(*chain), '--default-duration', '-1'], capsys)

        assert code == cli.EXIT_BAD_DATA
        data = json.loads(out)
        assert data['kind'] == 'InvalidConfiguration'
        assert data['option'] == 'default_duration'


class TestValidate:

    def test_valid(self, chain, write_request, capsys):
        code, out = _run([write_request(*chain), '--validate'], capsys)
        assert code == cli.EXIT_OK
        assert json.loads(out) == {'isValid': True, 'cycles': []}

    def test_cyclic(self, triangle_cycle, write_request, capsys):
        code, out = _run([write_request(*triangle_cycle), '--validate'], capsys)
        assert code == cli.EXIT_BAD_DATA
        assert json.loads(out)['cycles'] == [['A', 'B', 'C']]


class TestOutputs:

    def test_csv(self, chain_with_branch, write_request, tmp_path, capsys):
        csv_path = tmp_path / 'schedule.csv'
        code, _ = _run([write_request(*chain_with_branch), '--csv', str(csv_path)], capsys)

        assert code == cli.EXIT_OK
        df = pd.read_csv(csv_path, index_col='id')
        assert list(df.index) == ['A', 'B', 'C', 'D']
        assert df.loc['D', 'slack'] == 2.0
