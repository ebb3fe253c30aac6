#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Graph builder
=============

Validates task and dependency records of one project scope and assembles
them into an activity-on-node :class:`TaskGraph`. Structural problems are
rejected here, before any time computation runs.

Record formats
--------------
Task records are mappings with an ``id`` and an hour estimate under
``estimatedHours`` (wire format) or ``estimated_hours``. Dependency records
are mappings with ``taskId``/``task_id`` (successor),
``dependsOnTaskId``/``depends_on_task_id`` (predecessor), optional
``dependencyType``/``dependency_type`` and optional ``lag``.

>>> tasks = [{'id': 'A', 'estimatedHours': 2}, {'id': 'B', 'estimatedHours': 3}]
>>> deps = [{'taskId': 'B', 'dependsOnTaskId': 'A', 'dependencyType': 'finish-to-start'}]
>>> graph = build_graph(tasks, deps)
>>> graph.successor_ids('A')
['B']
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
from collections.abc import Mapping
import logging
import math

import numpy as np

from .errors import (DuplicateTaskId, InvalidConfiguration,
                     InvalidDependencyType, InvalidDuration, InvalidLag,
                     MalformedRecord, SelfDependency, UnknownTaskReference)
from .model import RES, DependencyType, make_time
from .settings import LAG_UNITS, settings

logger = logging.getLogger(__name__)

_MISSING = object()

# Accepted field names, wire format first
TASK_ID_FIELDS       = ('id', 'task_id')
DURATION_FIELDS      = ('estimatedHours', 'estimated_hours')
SUCCESSOR_FIELDS     = ('taskId', 'task_id')
PREDECESSOR_FIELDS   = ('dependsOnTaskId', 'depends_on_task_id')
TYPE_FIELDS          = ('dependencyType', 'dependency_type', 'type')
LAG_FIELDS           = ('lag',)


def get_field(record, names, default=_MISSING):
    """Value of the first of ``names`` present in ``record``, else ``default``."""
    for name in names:
        if name in record:
            return record[name]
    return default


def _to_number(value):
    """
    Convert a numeric record value to float.

    Numeric strings are accepted, stores often hand decimals over as text.
    Returns None when the value is not a finite number.
    """
    if isinstance(value, bool):
        return None
    try:
        ret = float(value)
    except (TypeError, ValueError):
        return None
    return ret if math.isfinite(ret) else None


#==============================================================================
class _Task:
    """
    Task node of the network.

    Parameters
    ----------
    id : str
        Opaque task identifier
    duration : float
        Task duration in hours (>= 0)
    data : dict, optional
        Task record fields not used by the engine

    Attributes
    ----------
    duration : numpy.ndarray
        Duration as ``[value, error_bound]``
    incoming : list of _Dependency
        Edges from predecessors
    outgoing : list of _Dependency
        Edges to successors
    early_start, early_finish, late_start, late_finish, slack : numpy.ndarray
        CPM parameters, filled in by the passes
    """
    def __init__(self, id, duration, data=None):
        assert isinstance(id, str)
        assert isinstance(duration, float)
        assert duration >= 0.0
        assert data is None or isinstance(data, dict)

        self.id       = id
        self.duration = make_time(duration)
        self.data     = data if data is not None else {}
        self.incoming = []
        self.outgoing = []

        # CPM parameters
        self.early_start  = np.zeros_like(self.duration)
        self.early_finish = np.zeros_like(self.duration)
        self.late_start   = np.zeros_like(self.duration)
        self.late_finish  = np.zeros_like(self.duration)
        self.slack        = np.zeros_like(self.duration)

    @property
    def is_source(self):
        return not self.incoming

    @property
    def is_sink(self):
        return not self.outgoing

    def __repr__(self):
        return str(self.to_dict())

    def to_dict(self):
        return {
            'id'          : self.id,
            'duration'    : self.duration[RES],
            'predecessors': [d.predecessor.id for d in self.incoming],
            'successors'  : [d.successor.id for d in self.outgoing],
        }


#==============================================================================
class _Dependency:
    """
    Dependency edge ``predecessor -> successor``.

    ``lag`` is kept as ``[value, error_bound]`` in hours.
    """
    def __init__(self, predecessor, successor, type, lag):
        assert isinstance(predecessor, _Task)
        assert isinstance(successor,   _Task)
        assert isinstance(type,        DependencyType)
        assert isinstance(lag,         float)

        self.predecessor = predecessor
        self.successor   = successor
        self.type        = type
        self.lag         = make_time(lag)

    def __repr__(self):
        return str(self.to_dict())

    def to_dict(self):
        return {
            'taskId'         : self.successor.id,
            'dependsOnTaskId': self.predecessor.id,
            'dependencyType' : self.type.value,
            'lag'            : self.lag[RES],
        }


#==============================================================================
class TaskGraph:
    """
    Directed task graph of one project scope.

    Tasks keep the order they were supplied in. Neighbour queries return
    ids in sorted order so that traversals are deterministic.
    """
    def __init__(self):
        self.tasks = {}
        self.dependencies = []

    def __len__(self):
        return len(self.tasks)

    def __contains__(self, task_id):
        return task_id in self.tasks

    def __iter__(self):
        return iter(self.tasks.values())

    def __repr__(self):
        _repr = 'Tasks:{\n'
        for t in self.tasks.values():
            _repr += '        ' + str(t) + '\n'
        _repr += '}\n'
        return _repr

    @property
    def ids(self):
        return list(self.tasks)

    def task(self, task_id):
        return self.tasks[task_id]

    #--------------------------------------------------------------------------
    def _add_task(self, task_id, duration, data):
        if task_id in self.tasks:
            raise DuplicateTaskId(task_id)
        self.tasks[task_id] = _Task(task_id, duration, data)

    def _add_dependency(self, predecessor_id, successor_id, type, lag):
        pred = self.tasks[predecessor_id]
        succ = self.tasks[successor_id]
        dep = _Dependency(pred, succ, type, lag)
        pred.outgoing.append(dep)
        succ.incoming.append(dep)
        self.dependencies.append(dep)
        return dep

    #--------------------------------------------------------------------------
    def successor_ids(self, task_id):
        return sorted({d.successor.id for d in self.tasks[task_id].outgoing})

    def predecessor_ids(self, task_id):
        return sorted({d.predecessor.id for d in self.tasks[task_id].incoming})

    @property
    def sources(self):
        """Ids of tasks without predecessors."""
        return [t.id for t in self.tasks.values() if t.is_source]

    @property
    def sinks(self):
        """Ids of tasks without successors."""
        return [t.id for t in self.tasks.values() if t.is_sink]

    def dependencies_of(self, task_id):
        """
        List dependencies touching a task.

        Returns
        -------
        dict
            ``{'predecessors': [...], 'successors': [...]}`` where every item
            is a dependency record in wire format

        Raises
        ------
        UnknownTaskReference
            If the task is not in the graph
        """
        if task_id not in self.tasks:
            raise UnknownTaskReference(task_id)
        t = self.tasks[task_id]
        return {
            'predecessors': [d.to_dict() for d in t.incoming],
            'successors'  : [d.to_dict() for d in t.outgoing],
        }

    def reaches(self, start_id, target_id):
        """True when ``target_id`` is reachable from ``start_id`` along dependencies."""
        seen = {start_id}
        stack = [start_id]
        while stack:
            tid = stack.pop()
            if tid == target_id:
                return True
            for nxt in self.successor_ids(tid):
                if nxt not in seen:
                    seen.add(nxt)
                    stack.append(nxt)
        return False


#==============================================================================
def _parse_tasks(graph, tasks, scope, default_duration):
    """Validate task records and add the in-scope ones to the graph."""
    for i, record in enumerate(tasks):
        if not isinstance(record, Mapping):
            raise MalformedRecord('task', i, f"expected a mapping, got {type(record).__name__}")

        task_id = get_field(record, TASK_ID_FIELDS, None)
        if task_id is None:
            raise MalformedRecord('task', i, "missing 'id'")
        task_id = str(task_id)

        if scope is not None and task_id not in scope:
            continue

        raw = get_field(record, DURATION_FIELDS, None)
        if raw is None:
            duration = default_duration
        else:
            duration = _to_number(raw)
            if duration is None or duration < 0.0:
                raise InvalidDuration(task_id, raw)

        # Keep the rest of the record for callers
        data = {k: v for k, v in record.items()
                if k not in TASK_ID_FIELDS and k not in DURATION_FIELDS}
        graph._add_task(task_id, duration, data)


def _parse_dependencies(graph, dependencies, scope, lag_factor):
    """Validate dependency records and link the in-scope ones."""
    for i, record in enumerate(dependencies):
        if not isinstance(record, Mapping):
            raise MalformedRecord('dependency', i,
                                  f"expected a mapping, got {type(record).__name__}")

        succ_id = get_field(record, SUCCESSOR_FIELDS, None)
        pred_id = get_field(record, PREDECESSOR_FIELDS, None)
        if succ_id is None or pred_id is None:
            raise MalformedRecord('dependency', i, "missing 'taskId' or 'dependsOnTaskId'")
        succ_id = str(succ_id)
        pred_id = str(pred_id)

        # Dependencies of other scopes are not ours to judge
        if scope is not None and succ_id not in scope and pred_id not in scope:
            continue

        if succ_id == pred_id:
            raise SelfDependency(succ_id)

        for tid in (pred_id, succ_id):
            if tid not in graph:
                raise UnknownTaskReference(tid, succ_id, pred_id)

        tag = get_field(record, TYPE_FIELDS, None)
        if tag is None:
            dep_type = DependencyType.FINISH_TO_START
        else:
            try:
                dep_type = DependencyType.from_tag(tag)
            except ValueError:
                raise InvalidDependencyType(tag, succ_id, pred_id) from None

        raw = get_field(record, LAG_FIELDS, None)
        if raw is None:
            lag = 0.0
        else:
            lag = _to_number(raw)
            if lag is None:
                raise InvalidLag(raw, succ_id, pred_id)
            lag *= lag_factor

        graph._add_dependency(pred_id, succ_id, dep_type, lag)


def build_graph(tasks, dependencies, task_ids=None, lag_unit=None, default_duration=None):
    """
    Validate records and build the task graph.

    Parameters
    ----------
    tasks : iterable of Mapping
        Task records of the project scope
    dependencies : iterable of Mapping
        Dependency records
    task_ids : iterable of str, optional
        Scope. When given, task records outside it are ignored, dependencies
        with both ends outside it are dropped, and every listed id must have
        a task record.
    lag_unit : str, optional
        ``'hours'`` or ``'minutes'``, ``settings.LAG_UNIT`` by default
    default_duration : float, optional
        Duration of tasks without an estimate, ``settings.DEFAULT_DURATION``
        by default

    Returns
    -------
    TaskGraph

    Raises
    ------
    MalformedRecord, DuplicateTaskId, InvalidDuration, UnknownTaskReference,
    SelfDependency, InvalidDependencyType, InvalidLag
        On the first invalid record found
    InvalidConfiguration
        If ``lag_unit`` or ``default_duration`` is invalid
    """
    lag_unit = lag_unit if lag_unit is not None else settings.LAG_UNIT
    if lag_unit not in LAG_UNITS:
        raise InvalidConfiguration('lag_unit', lag_unit, f"one of {sorted(LAG_UNITS)}")

    default_duration = settings.DEFAULT_DURATION if default_duration is None \
        else default_duration
    duration = _to_number(default_duration)
    if duration is None or duration < 0.0:
        raise InvalidConfiguration('default_duration', default_duration,
                                   "a finite number of hours >= 0")
    default_duration = duration

    scope = None
    if task_ids is not None:
        scope = [str(tid) for tid in task_ids]

    graph = TaskGraph()
    _parse_tasks(graph, tasks, None if scope is None else set(scope), default_duration)

    if scope is not None:
        for tid in scope:
            if tid not in graph:
                raise UnknownTaskReference(tid)
        scope = set(scope)

    _parse_dependencies(graph, dependencies, scope, LAG_UNITS[lag_unit])

    logger.debug("Built graph of %d tasks and %d dependencies",
                 len(graph), len(graph.dependencies))
    return graph
