#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
CPM time passes
===============

Forward pass (earliest times), backward pass (latest times) and slack
computation over a :class:`~critpath.graph.TaskGraph` whose topological
order is already known.

Dependency semantics
--------------------
Forward pass, earliest start of the successor implied by one dependency:

==================  ==========================================
finish-to-start     pred.EF + lag
start-to-start      pred.ES + lag
finish-to-finish    pred.EF + lag - succ.duration
start-to-finish     pred.ES + lag - succ.duration
==================  ==========================================

Backward pass, latest finish of the predecessor implied by one dependency:

==================  ==========================================
finish-to-start     succ.LS - lag
start-to-start      succ.LS - lag + pred.duration
finish-to-finish    succ.LF - lag
start-to-finish     succ.LF - lag + pred.duration
==================  ==========================================

The project start (time 0) also bounds every earliest start from below,
no task is scheduled before the project begins.

Numerics
--------
Time values are ``[RES, ERR]`` vectors. Additions accumulate the error
bounds, and two candidate times closer than their joint error bound are
treated as equal. Slack below its error bound is rounded to exactly zero.
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
import logging

import numpy as np

from .errors import NegativeSlackInvariantViolation
from .model import ERR, RES, DependencyType, ScheduleEntry

logger = logging.getLogger(__name__)


#==============================================================================
def _choice(old, new, delta):
    """
    Choose between two time estimates based on certainty criteria.

    Parameters
    ----------
    old : numpy.ndarray
        Existing time estimate [value, error_bound]
    new : numpy.ndarray
        New time estimate [value, error_bound]
    delta : float
        Signed preference of ``new`` over ``old``

    Returns
    -------
    numpy.ndarray
        Selected time estimate
    """
    e = new[ERR] + old[ERR]
    if delta >= e:
        return new  # Certain result
    elif delta >= -e:
        # Uncertain result, use mixing
        ret = np.zeros((2,), dtype=float)
        ret[RES] = 0.5 * (new[RES] + old[RES])
        ret[ERR] = 0.5 * e
        return ret
    else:
        return old  # Certain result


def _choice_early(old, new):
    return _choice(old, new, new[RES] - old[RES])


def _choice_late(old, new):
    return _choice(old, new, old[RES] - new[RES])


def _neg(tm):
    ret = tm.copy()
    ret[RES] = -tm[RES]
    return ret


#==============================================================================
# Earliest start of the successor implied by a dependency
_FORWARD = {
    DependencyType.FINISH_TO_START : lambda d: d.predecessor.early_finish + d.lag,
    DependencyType.START_TO_START  : lambda d: d.predecessor.early_start + d.lag,
    DependencyType.FINISH_TO_FINISH: lambda d: (d.predecessor.early_finish + d.lag
                                                + _neg(d.successor.duration)),
    DependencyType.START_TO_FINISH : lambda d: (d.predecessor.early_start + d.lag
                                                + _neg(d.successor.duration)),
}

# Latest finish of the predecessor implied by a dependency
_BACKWARD = {
    DependencyType.FINISH_TO_START : lambda d: d.successor.late_start + _neg(d.lag),
    DependencyType.START_TO_START  : lambda d: (d.successor.late_start + _neg(d.lag)
                                                + d.predecessor.duration),
    DependencyType.FINISH_TO_FINISH: lambda d: d.successor.late_finish + _neg(d.lag),
    DependencyType.START_TO_FINISH : lambda d: (d.successor.late_finish + _neg(d.lag)
                                                + d.predecessor.duration),
}


def _check_exhaustive(table, name):
    missing = [t.name for t in DependencyType if t not in table]
    if missing:
        raise RuntimeError(f"{name} constraint table misses dependency types: {missing}")


_check_exhaustive(_FORWARD, 'Forward')
_check_exhaustive(_BACKWARD, 'Backward')


def _edge_key(d):
    return (d.predecessor.id, d.successor.id, d.type.value, float(d.lag[RES]))


#==============================================================================
def _compute_target(graph, order, target, anchor):
    """
    Compute CPM parameters of all tasks in one pass.

    Parameters
    ----------
    graph : TaskGraph
        Task graph
    order : list of str
        Topological order of the graph
    target : str
        What to compute: 'early' or 'late'
    anchor : numpy.ndarray
        Project start for 'early', project finish for 'late'

    Raises
    ------
    ValueError
        If target parameter is invalid
    """
    if 'early' == target:
        seq       = order
        edges     = 'incoming'
        table     = _FORWARD
        choice    = _choice_early
        act_base  = 'early_start'
        act_new   = 'early_finish'
        delta     = lambda t: t.duration
        anchored  = lambda t: True

    elif 'late' == target:
        seq       = order[::-1]
        edges     = 'outgoing'
        table     = _BACKWARD
        choice    = _choice_late
        act_base  = 'late_finish'
        act_new   = 'late_start'
        delta     = lambda t: _neg(t.duration)
        anchored  = lambda t: t.is_sink

    else:
        raise ValueError("Unknown 'target' value!!!")

    for tid in seq:
        t = graph.task(tid)

        base_val = anchor.copy() if anchored(t) else None
        # Mixing depends on candidate order
        for d in sorted(getattr(t, edges), key=_edge_key):
            new_val = table[d.type](d)
            base_val = new_val if base_val is None else choice(base_val, new_val)

        setattr(t, act_base, base_val)
        setattr(t, act_new, base_val + delta(t))


#==============================================================================
def forward_pass(graph, order):
    """Compute earliest start and finish of every task."""
    _compute_target(graph, order, 'early', np.zeros((2,), dtype=float))


def project_finish(graph):
    """
    Latest earliest finish over sink tasks.

    Returns
    -------
    numpy.ndarray
        ``[value, error_bound]``, zero for an empty graph
    """
    finish = np.zeros((2,), dtype=float)
    for tid in sorted(graph.sinks):
        ef = graph.task(tid).early_finish
        if ef[RES] > finish[RES]:
            finish = ef.copy()
    return finish


def backward_pass(graph, order, finish):
    """Compute latest finish and start of every task, sinks finish at ``finish``."""
    _compute_target(graph, order, 'late', finish)


def compute_slack(graph):
    """
    Compute total slack of every task.

    Raises
    ------
    NegativeSlackInvariantViolation
        If some slack is negative beyond its error bound, which means the
        passes are inconsistent
    """
    for t in graph:
        slack = np.zeros((2,), dtype=float)
        slack[ERR] = t.late_start[ERR] + t.early_start[ERR]

        r = t.late_start[RES] - t.early_start[RES]
        # Check for programming errors
        if r < -slack[ERR]:
            raise NegativeSlackInvariantViolation(t.id, r)

        # Round off insignificant values
        slack[RES] = r if abs(r) > slack[ERR] else 0.0
        t.slack = slack


def _f(tm):
    # Adding zero turns -0.0 into 0.0
    return float(tm) + 0.0


def schedule_entries(graph):
    """Export computed parameters as ``{task_id: ScheduleEntry}`` in graph order."""
    return {
        t.id: ScheduleEntry(earliest_start=_f(t.early_start[RES]),
                            earliest_finish=_f(t.early_finish[RES]),
                            latest_start=_f(t.late_start[RES]),
                            latest_finish=_f(t.late_finish[RES]),
                            slack=_f(t.slack[RES]),
                            earliest_start_err=_f(t.early_start[ERR]),
                            earliest_finish_err=_f(t.early_finish[ERR]),
                            latest_start_err=_f(t.late_start[ERR]),
                            latest_finish_err=_f(t.late_finish[ERR]),
                            slack_err=_f(t.slack[ERR]))
        for t in graph
    }
