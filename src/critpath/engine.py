#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
CritPath - Critical Path scheduling engine
==========================================

This module runs the scheduling pipeline over one snapshot of project
tasks and dependencies:

    building -> cycle checking -> forward pass -> backward pass
             -> slack computed -> extracted

Each stage fails fast. A failure at any stage ends the computation with a
:class:`~critpath.errors.SchedulingError` that records the stage; no
partial schedule is ever returned.

The engine is stateless. Every call builds its own working structures
from the records it is given, so concurrent calls need no coordination.
Deciding when the input changed and a new computation is due is up to the
caller, see :mod:`critpath.cache`.

Usage Example
-------------
>>> tasks = [
...     {'id': 'A', 'estimatedHours': 2.0},
...     {'id': 'B', 'estimatedHours': 3.0},
...     {'id': 'C', 'estimatedHours': 4.0},
... ]
>>> deps = [
...     {'taskId': 'B', 'dependsOnTaskId': 'A', 'dependencyType': 'finish-to-start', 'lag': 0},
...     {'taskId': 'C', 'dependsOnTaskId': 'B', 'dependencyType': 'finish-to-start', 'lag': 0},
... ]
>>> result = compute_critical_path(tasks, deps)
>>> list(result.critical_path), result.critical_path_duration
(['A', 'B', 'C'], 9.0)
"""
#==============================================================================
"""
    CritPath
    Copyright (C) 2025 anonimous

    This program is free software: you can redistribute it and/or modify
    it under the terms of the GNU General Public License as published by
    the Free Software Foundation, either version 3 of the License, or
    (at your option) any later version.

    This program is distributed in the hope that it will be useful,
    but WITHOUT ANY WARRANTY; without even the implied warranty of
    MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
    GNU General Public License for more details.

    You should have received a copy of the GNU General Public License
    along with this program.  If not, see <http://www.gnu.org/licenses/>.

    Please contact with me by E-mail: shkolnick.kun@gmail.com
"""

#==============================================================================
from enum import Enum
from types import MappingProxyType
import logging

from pydantic import ValidationError

from .critical import extract_critical_path
from .cycles import check_new_dependency as _check_new_dependency
from .cycles import find_cycles, topological_order
from .errors import (InputTooLarge, InvariantViolation, MalformedRequest,
                     SchedulingError)
from .graph import build_graph
from .model import RES, CriticalPathResult, Link
from .passes import (backward_pass, compute_slack, forward_pass,
                     project_finish, schedule_entries)
from .schemas import CriticalPathRequest, CriticalPathResponse, ErrorResponse
from .settings import settings

logger = logging.getLogger(__name__)


#==============================================================================
class Stage(Enum):
    """States of the scheduling pipeline."""
    BUILDING       = 'building'
    CYCLE_CHECKING = 'cycle-checking'
    FORWARD_PASS   = 'forward-pass'
    BACKWARD_PASS  = 'backward-pass'
    SLACK_COMPUTED = 'slack-computed'
    EXTRACTED      = 'extracted'
    FAILED         = 'failed'


#==============================================================================
class SchedulePipeline:
    """
    One run of the scheduling pipeline over an input snapshot.

    Parameters
    ----------
    tasks : iterable of Mapping
        Task records, see :mod:`critpath.graph` for the accepted fields
    dependencies : iterable of Mapping
        Dependency records
    task_ids : iterable of str, optional
        Project scope
    lag_unit : str, optional
        ``'hours'`` or ``'minutes'``
    default_duration : float, optional
        Duration of tasks without an estimate
    max_tasks, max_dependencies : int, optional
        Input size guard, ``None`` means unlimited
    debug : bool
        Export computation error bounds with the result

    Attributes
    ----------
    stage : Stage
        Current pipeline state
    error : SchedulingError or None
        Failure reason once ``stage`` is FAILED
    """
    def __init__(self, tasks, dependencies, task_ids=None, lag_unit=None,
                 default_duration=None, max_tasks=None, max_dependencies=None,
                 debug=False):
        self.tasks = list(tasks) if tasks is not None else []
        self.dependencies = list(dependencies) if dependencies is not None else []
        self.task_ids = list(task_ids) if task_ids is not None else None
        self.lag_unit = lag_unit
        self.default_duration = default_duration
        self.max_tasks = max_tasks if max_tasks is not None else settings.MAX_TASKS
        self.max_dependencies = max_dependencies if max_dependencies is not None \
            else settings.MAX_DEPENDENCIES
        self.debug = debug

        self.stage = Stage.BUILDING
        self.error = None

    #--------------------------------------------------------------------------
    def _advance(self, stage):
        logger.debug("%s -> %s", self.stage.value, stage.value)
        self.stage = stage

    def _check_size(self):
        for what, items, limit in (('tasks', self.tasks, self.max_tasks),
                                   ('dependencies', self.dependencies, self.max_dependencies)):
            if limit is not None and len(items) > limit:
                raise InputTooLarge(what, len(items), limit)

    def _fail(self, error):
        error.stage = self.stage.value
        self.error = error
        self.stage = Stage.FAILED

        if isinstance(error, InvariantViolation):
            logger.exception("Scheduling defect at stage '%s': %s", error.stage, error.message)
        else:
            logger.info("Schedule rejected at stage '%s': %s", error.stage, error.message)

    #--------------------------------------------------------------------------
    def run(self):
        """
        Run all stages.

        Returns
        -------
        CriticalPathResult

        Raises
        ------
        CallerDataError
            If the input can not be scheduled
        InvariantViolation
            If the computed schedule is internally inconsistent
        InvalidConfiguration
            If an engine option is unusable
        RuntimeError
            If the pipeline was already run
        """
        if Stage.BUILDING != self.stage:
            raise RuntimeError("The pipeline can not be run more than once!!!")

        try:
            self._check_size()
            graph = build_graph(self.tasks, self.dependencies, self.task_ids,
                                self.lag_unit, self.default_duration)

            self._advance(Stage.CYCLE_CHECKING)
            order = topological_order(graph)

            self._advance(Stage.FORWARD_PASS)
            forward_pass(graph, order)

            self._advance(Stage.BACKWARD_PASS)
            finish = project_finish(graph)
            backward_pass(graph, order, finish)

            self._advance(Stage.SLACK_COMPUTED)
            compute_slack(graph)
            path = extract_critical_path(graph, order)

        except SchedulingError as e:
            self._fail(e)
            raise

        result = CriticalPathResult(
            critical_path=tuple(path),
            critical_path_duration=float(finish[RES]) + 0.0,
            task_details=MappingProxyType(schedule_entries(graph)),
            durations=MappingProxyType({t.id: float(t.duration[RES]) for t in graph}),
            links=tuple(Link(d.predecessor.id, d.successor.id, d.type, float(d.lag[RES]))
                        for d in graph.dependencies),
            debug=self.debug)

        self._advance(Stage.EXTRACTED)
        logger.info("Scheduled %d tasks: critical path of %d tasks, duration %g h",
                    len(result), len(result.critical_path), result.critical_path_duration)
        return result


#==============================================================================
def compute_critical_path(tasks, dependencies, task_ids=None, *, lag_unit=None,
                          default_duration=None, max_tasks=None, max_dependencies=None,
                          debug=False):
    """
    Compute CPM schedule and critical path of one project scope.

    Parameters
    ----------
    tasks : iterable of Mapping
        Task records: ``{'id': ..., 'estimatedHours': ...}``
    dependencies : iterable of Mapping
        Dependency records: ``{'taskId': ..., 'dependsOnTaskId': ...,
        'dependencyType': ..., 'lag': ...}``
    task_ids : iterable of str, optional
        Project scope
    lag_unit : str, optional
        ``'hours'`` (default) or ``'minutes'``
    default_duration : float, optional
        Duration of tasks without an estimate, 1 hour by default
    max_tasks, max_dependencies : int, optional
        Input size guard
    debug : bool
        Export computation error bounds with the result

    Returns
    -------
    CriticalPathResult
        Empty result (no path, zero duration) when there are no tasks

    Raises
    ------
    CallerDataError
        UnknownTaskReference, SelfDependency, InvalidDuration,
        InvalidDependencyType, InvalidLag, MalformedRecord, DuplicateTaskId,
        CyclicDependency or InputTooLarge
    InvariantViolation
        NegativeSlackInvariantViolation
    InvalidConfiguration
        If ``lag_unit`` or ``default_duration`` is unusable
    """
    return SchedulePipeline(tasks, dependencies, task_ids, lag_unit=lag_unit,
                            default_duration=default_duration, max_tasks=max_tasks,
                            max_dependencies=max_dependencies, debug=debug).run()


def validate_dependencies(tasks, dependencies, task_ids=None, *, lag_unit=None,
                          default_duration=None):
    """
    Report dependency cycles without scheduling.

    Structural errors (unknown tasks, self dependencies, bad values) are
    still raised, cycles are reported.

    Returns
    -------
    dict
        ``{'isValid': bool, 'cycles': [[task ids], ...]}``
    """
    graph = build_graph(tasks, dependencies, task_ids, lag_unit, default_duration)
    cycles = find_cycles(graph)
    return {'isValid': not cycles, 'cycles': cycles}


def check_new_dependency(tasks, dependencies, task_id, depends_on_task_id, task_ids=None):
    """
    Validate a dependency ``depends_on_task_id -> task_id`` before storing it.

    Raises
    ------
    SelfDependency, UnknownTaskReference, CyclicDependency
        If the dependency must not be added
    """
    graph = build_graph(tasks, dependencies, task_ids)
    _check_new_dependency(graph, str(task_id), str(depends_on_task_id))


#==============================================================================
def handle_request(payload, **options):
    """
    Answer one wire request.

    Parameters
    ----------
    payload : dict or str or bytes
        Request document (``taskIds``, ``tasks``, ``dependencies``), parsed
        or as JSON text
    **options
        Keyword arguments of :func:`compute_critical_path`

    Returns
    -------
    dict
        Success response, or error response with ``kind``, ``message`` and
        ``severity``
    """
    try:
        try:
            if isinstance(payload, (str, bytes)):
                request = CriticalPathRequest.model_validate_json(payload)
            else:
                request = CriticalPathRequest.model_validate(payload)
        except ValidationError as e:
            raise MalformedRequest(e.errors(include_url=False, include_context=False,
                                            include_input=False)) from None

        result = compute_critical_path(request.task_records(), request.dependency_records(),
                                       request.taskIds, **options)
    except SchedulingError as e:
        return ErrorResponse.model_validate(e.to_dict()).model_dump(exclude_none=True)

    return CriticalPathResponse.model_validate(result.to_dict()).model_dump()
