"""Tests for the scheduling pipeline and its entry points."""
import json
import logging

import numpy as np
import pytest

from critpath import engine
from critpath.engine import (SchedulePipeline, Stage, check_new_dependency,
                             compute_critical_path, handle_request,
                             validate_dependencies)
from critpath.errors import (CyclicDependency, DuplicateTaskId, InputTooLarge,
                             InvalidConfiguration, InvalidDependencyType,
                             InvalidDuration, InvalidLag, MalformedRecord,
                             MalformedRequest,
                             NegativeSlackInvariantViolation, SelfDependency,
                             UnknownTaskReference, http_status)
from critpath.passes import backward_pass


def _broken_backward_pass(graph, order, finish):
    backward_pass(graph, order, finish)
    t = graph.task('B')
    t.late_start = t.late_start - np.array([1.0, 0.0])


class TestPipeline:

    def test_stages(self, chain):
        pipeline = SchedulePipeline(*chain)
        assert pipeline.stage is Stage.BUILDING

        result = pipeline.run()
        assert pipeline.stage is Stage.EXTRACTED
        assert pipeline.error is None
        assert result.critical_path == ('A', 'B', 'C')

    def test_runs_once(self, chain):
        pipeline = SchedulePipeline(*chain)
        pipeline.run()
        with pytest.raises(RuntimeError):
            pipeline.run()

    def test_failure_records_stage(self, triangle_cycle):
        pipeline = SchedulePipeline(*triangle_cycle)
        with pytest.raises(CyclicDependency) as e:
            pipeline.run()

        assert pipeline.stage is Stage.FAILED
        assert pipeline.error is e.value
        assert e.value.stage == 'cycle-checking'
        assert e.value.to_dict()['stage'] == 'cycle-checking'

    def test_build_failure_stage(self, make_task, make_dep):
        with pytest.raises(UnknownTaskReference) as e:
            compute_critical_path([make_task('A', 1)], [make_dep('A', 'B')])
        assert e.value.stage == 'building'

    def test_rejection_logged_at_info(self, triangle_cycle, caplog):
        caplog.set_level(logging.INFO, logger='critpath')
        with pytest.raises(CyclicDependency):
            compute_critical_path(*triangle_cycle)

        rejected = [r for r in caplog.records if r.name == 'critpath.engine']
        assert rejected and rejected[-1].levelno == logging.INFO
        assert 'cycle-checking' in rejected[-1].getMessage()

    def test_defect_logged_at_error(self, chain, monkeypatch, caplog):
        monkeypatch.setattr(engine, 'backward_pass', _broken_backward_pass)
        pipeline = SchedulePipeline(*chain)

        with pytest.raises(NegativeSlackInvariantViolation) as e:
            pipeline.run()

        assert e.value.task_id == 'B'
        assert e.value.stage == 'slack-computed'
        assert pipeline.stage is Stage.FAILED
        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert errors and 'defect' in errors[-1].getMessage()

    def test_size_guard(self, chain):
        with pytest.raises(InputTooLarge) as e:
            compute_critical_path(*chain, max_tasks=2)
        assert e.value.details() == {'what': 'tasks', 'count': 3, 'limit': 2}
        assert e.value.stage == 'building'

        with pytest.raises(InputTooLarge):
            compute_critical_path(*chain, max_dependencies=1)

        assert compute_critical_path(*chain, max_tasks=3, max_dependencies=2)

    def test_scope(self, chain, make_task):
        tasks, deps = chain
        result = compute_critical_path(tasks + [make_task('Other', 50)], deps,
                                       task_ids=['A', 'B', 'C'])
        assert result.critical_path_duration == 9.0
        assert result.get('Other') is None

    def test_minutes(self, make_task, make_dep):
        tasks = [make_task('A', 1), make_task('B', 1)]
        result = compute_critical_path(tasks, [make_dep('B', 'A', lag=30)], lag_unit='minutes')
        assert result.get('B').earliest_start == pytest.approx(1.5)

    def test_result_read_only(self, chain):
        result = compute_critical_path(*chain)
        with pytest.raises(TypeError):
            result.task_details['A'] = None
        with pytest.raises(AttributeError):
            result.critical_path_duration = 0.0


class TestValidation:

    def test_valid(self, chain):
        assert validate_dependencies(*chain) == {'isValid': True, 'cycles': []}

    def test_cycles_reported(self, triangle_cycle):
        assert validate_dependencies(*triangle_cycle) == {'isValid': False,
                                                          'cycles': [['A', 'B', 'C']]}

    def test_structural_errors_raised(self, make_task, make_dep):
        with pytest.raises(SelfDependency):
            validate_dependencies([make_task('A', 1)], [make_dep('A', 'A')])

    def test_check_new_dependency(self, chain):
        tasks, deps = chain
        assert check_new_dependency(tasks, deps, 'C', 'A') is None
        with pytest.raises(CyclicDependency):
            check_new_dependency(tasks, deps, 'A', 'C')
        with pytest.raises(UnknownTaskReference):
            check_new_dependency(tasks, deps, 'A', 'Z')


class TestHandleRequest:
    """Wire requests answered with success or error documents."""

    def test_success(self, chain):
        tasks, deps = chain
        body = handle_request({'tasks': tasks, 'dependencies': deps})

        assert body['criticalPath'] == ['A', 'B', 'C']
        assert body['criticalPathDuration'] == 9.0
        assert body['taskDetails']['B'] == {'earliestStart': 2.0, 'earliestFinish': 5.0,
                                            'latestStart': 2.0, 'latestFinish': 5.0,
                                            'slack': 0.0}

    def test_json_text(self, chain):
        tasks, deps = chain
        text = json.dumps({'taskIds': ['A', 'B', 'C'], 'tasks': tasks, 'dependencies': deps})
        assert handle_request(text)['criticalPath'] == ['A', 'B', 'C']
        assert handle_request(text.encode('utf-8'))['criticalPathDuration'] == 9.0

    def test_numeric_ids(self):
        body = handle_request({'tasks': [{'id': 1, 'estimatedHours': 2},
                                         {'id': 2, 'estimatedHours': 1}],
                               'dependencies': [{'taskId': 2, 'dependsOnTaskId': 1}]})
        assert body['criticalPath'] == ['1', '2']

    def test_debug(self, chain):
        tasks, deps = chain
        body = handle_request({'tasks': tasks, 'dependencies': deps}, debug=True)
        assert 'slackErr' in body['taskDetails']['A']

    def test_cycle(self, triangle_cycle):
        tasks, deps = triangle_cycle
        body = handle_request({'tasks': tasks, 'dependencies': deps})

        assert body['kind'] == 'CyclicDependency'
        assert body['severity'] == 'error'
        assert body['stage'] == 'cycle-checking'
        assert body['cycle'] == ['A', 'B', 'C']
        assert 'A -> B -> C -> A' in body['message']

    def test_invalid_duration(self, make_task):
        body = handle_request({'tasks': [make_task('A', -1)], 'dependencies': []})
        assert body['kind'] == 'InvalidDuration'
        assert 'cycle' not in body

    @pytest.mark.parametrize('tag', [True, {}, ['FS'], 7, 'finish-to-middle'])
    def test_invalid_dependency_type(self, make_task, make_dep, tag):
        body = handle_request({'tasks': [make_task('A', 1), make_task('B', 1)],
                               'dependencies': [make_dep('B', 'A', tag)]})
        assert body['kind'] == 'InvalidDependencyType'
        assert body['dependency'] == {'taskId': 'B', 'dependsOnTaskId': 'A'}

    def test_invalid_option(self, chain):
        tasks, deps = chain
        body = handle_request({'tasks': tasks, 'dependencies': deps}, lag_unit='days')

        assert body['kind'] == 'InvalidConfiguration'
        assert body['severity'] == 'fatal'
        assert body['option'] == 'lag_unit'
        assert body['stage'] == 'building'

    @pytest.mark.parametrize('payload', [{'tasks': 'nope'}, [1, 2], '{not json',
                                         {'tasks': [{'estimatedHours': 1}]}])
    def test_malformed(self, payload):
        body = handle_request(payload)
        assert body['kind'] == 'MalformedRequest'
        assert body['errors']

    def test_empty(self):
        assert handle_request({}) == {'criticalPath': [], 'criticalPathDuration': 0.0,
                                      'taskDetails': {}}


class TestHttpStatus:

    @pytest.mark.parametrize('error, status', [
        (UnknownTaskReference('X'), 422),
        (SelfDependency('A'), 422),
        (CyclicDependency(['A', 'B']), 422),
        (InvalidDuration('A', -1), 400),
        (InvalidDependencyType('XX', 'B', 'A'), 400),
        (InvalidLag('soon', 'B', 'A'), 400),
        (MalformedRecord('task', 0, 'missing id'), 400),
        (MalformedRequest([]), 400),
        (DuplicateTaskId('A'), 400),
        (InputTooLarge('tasks', 10, 5), 413),
        (InvalidConfiguration('lag_unit', 'days', 'hours'), 500),
        (NegativeSlackInvariantViolation('A', -1.0), 500),
    ])
    def test_status(self, error, status):
        assert http_status(error) == status
        assert error.to_dict()['kind'] == type(error).__name__
