"""Pytest configuration and fixtures."""
import logging

import pytest


def _task(task_id, hours, **extra):
    record = {'id': task_id, 'estimatedHours': hours}
    record.update(extra)
    return record


def _dep(task_id, depends_on_task_id, dependency_type='finish-to-start', lag=0):
    return {
        'taskId': task_id,
        'dependsOnTaskId': depends_on_task_id,
        'dependencyType': dependency_type,
        'lag': lag,
    }


@pytest.fixture
def make_task():
    """Factory of task records in wire format."""
    return _task


@pytest.fixture
def make_dep():
    """Factory of dependency records in wire format: ``task_id`` depends on ``depends_on_task_id``."""
    return _dep


@pytest.fixture
def chain():
    """Linear chain A -> B -> C, finish-to-start, no lag, 2/3/4 hours."""
    tasks = [_task('A', 2), _task('B', 3), _task('C', 4)]
    deps = [_dep('B', 'A'), _dep('C', 'B')]
    return tasks, deps


@pytest.fixture
def chain_with_branch(chain):
    """The chain plus a short parallel branch A -> D -> C."""
    tasks, deps = chain
    return tasks + [_task('D', 1)], deps + [_dep('D', 'A'), _dep('C', 'D')]


@pytest.fixture
def triangle_cycle():
    """A -> B -> C -> A."""
    tasks = [_task('A', 1), _task('B', 1), _task('C', 1)]
    deps = [_dep('B', 'A'), _dep('C', 'B'), _dep('A', 'C')]
    return tasks, deps


@pytest.fixture
def reset_package_logger():
    """Drop handlers and level the CLI attaches to the package logger."""
    yield
    logger = logging.getLogger('critpath')
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
