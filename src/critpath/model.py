#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Scheduling data model
=====================

Value types shared by the engine stages and returned to callers.

Classes
-------
- :class:`DependencyType`: closed set of precedence relationship kinds
- :class:`ScheduleEntry`: computed CPM times of one task
- :class:`CriticalPathResult`: whole schedule plus the critical path

Time values are hours measured from the project start. Internally every
time value is carried as a ``[RES, ERR]`` pair: the value itself and an
upper bound of its accumulated floating point error.
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
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
import json

import graphviz
import numpy as np
import pandas as pd

# Constants for array indexing in time computations
EPS = np.finfo(float).eps
RES = 0  # Result of time computation
ERR = 1  # Computation error upper limit


def make_time(value):
    """Create a ``[RES, ERR]`` time vector for an exact input value."""
    value = float(value)
    return np.array([value, EPS * abs(value)], dtype=float)


#==============================================================================
class DependencyType(Enum):
    """
    Precedence relationship between a predecessor and a successor task.

    The value is the wire tag, ``abbr`` the usual two-letter PDM notation.
    """
    FINISH_TO_START  = 'finish-to-start'
    START_TO_START   = 'start-to-start'
    FINISH_TO_FINISH = 'finish-to-finish'
    START_TO_FINISH  = 'start-to-finish'

    @property
    def abbr(self):
        return ''.join(w[0] for w in self.value.split('-to-')).upper()

    @classmethod
    def from_tag(cls, tag):
        """
        Parse a dependency type tag.

        Accepts members, wire tags (``'finish-to-start'``), member names
        (``'FINISH_TO_START'``) and abbreviations (``'FS'``), all case
        insensitive.

        Raises
        ------
        ValueError
            If the tag names no known dependency type
        """
        if isinstance(tag, cls):
            return tag
        if not isinstance(tag, str):
            raise ValueError(f"Dependency type tag must be a string, got {type(tag).__name__}")

        key = tag.strip().lower().replace('_', '-')
        for member in cls:
            if key == member.value or key == member.abbr.lower():
                return member
        raise ValueError(f"Unknown dependency type: {tag!r}")


#==============================================================================
@dataclass(frozen=True)
class ScheduleEntry:
    """
    Computed CPM parameters of one task, in hours from project start.

    The ``*_err`` fields hold the floating point error bounds of the
    matching values and are only exported in debug mode.
    """
    earliest_start : float
    earliest_finish: float
    latest_start   : float
    latest_finish  : float
    slack          : float
    earliest_start_err : float = 0.0
    earliest_finish_err: float = 0.0
    latest_start_err   : float = 0.0
    latest_finish_err  : float = 0.0
    slack_err          : float = 0.0

    @property
    def is_critical(self):
        return 0.0 == self.slack

    def to_dict(self, debug=False):
        ret = {
            'earliestStart' : self.earliest_start,
            'earliestFinish': self.earliest_finish,
            'latestStart'   : self.latest_start,
            'latestFinish'  : self.latest_finish,
            'slack'         : self.slack,
        }

        if debug:
            # CPM computation errors
            ret['earliestStartErr' ] = self.earliest_start_err
            ret['earliestFinishErr'] = self.earliest_finish_err
            ret['latestStartErr'   ] = self.latest_start_err
            ret['latestFinishErr'  ] = self.latest_finish_err
            ret['slackErr'         ] = self.slack_err

        return ret


#==============================================================================
@dataclass(frozen=True)
class Link:
    """A resolved dependency edge, kept on the result for visualization."""
    predecessor: str
    successor  : str
    type       : DependencyType
    lag        : float


#==============================================================================
@dataclass(frozen=True)
class CriticalPathResult:
    """
    Schedule and critical path computed for one input snapshot.

    Attributes
    ----------
    critical_path : tuple of str
        Ordered task ids of the chosen zero-slack chain
    critical_path_duration : float
        Project duration, the latest earliest finish over sink tasks
    task_details : Mapping[str, ScheduleEntry]
        Read-only schedule of every task
    durations : Mapping[str, float]
        Task durations the schedule was computed with
    links : tuple of Link
        Dependency edges the schedule was computed with
    debug : bool
        Export computation error bounds too
    """
    critical_path         : tuple
    critical_path_duration: float
    task_details          : MappingProxyType = field(default_factory=lambda: MappingProxyType({}))
    durations             : MappingProxyType = field(default_factory=lambda: MappingProxyType({}))
    links                 : tuple = ()
    debug                 : bool = False

    @classmethod
    def empty(cls, debug=False):
        return cls(critical_path=(), critical_path_duration=0.0, debug=debug)

    #--------------------------------------------------------------------------
    def __len__(self):
        return len(self.task_details)

    def get(self, task_id):
        """
        Get schedule entry of a task.

        Returns
        -------
        ScheduleEntry or None
            Entry of the task or None if the task is not in the schedule
        """
        return self.task_details.get(task_id)

    def is_critical(self, task_id):
        """True when the task lies on the reported critical path."""
        return task_id in self.critical_path

    @property
    def zero_slack_tasks(self):
        """Ids of every task with zero slack, critical path or not."""
        return [tid for tid, e in self.task_details.items() if e.is_critical]

    #--------------------------------------------------------------------------
    def to_dict(self):
        """
        Convert result to the wire representation.

        Returns
        -------
        dict
            ``{'criticalPath': [...], 'criticalPathDuration': float,
            'taskDetails': {id: {...}}}``
        """
        return {
            'criticalPath'        : list(self.critical_path),
            'criticalPathDuration': self.critical_path_duration,
            'taskDetails'         : {tid: e.to_dict(self.debug)
                                     for tid, e in self.task_details.items()},
        }

    def to_json(self, indent=None):
        """Serialize :meth:`to_dict` output, identical input gives identical text."""
        return json.dumps(self.to_dict(), indent=indent)

    #--------------------------------------------------------------------------
    def to_dataframe(self):
        """
        Convert schedule to a pandas DataFrame.

        Returns
        -------
        pandas.DataFrame
            One row per task indexed by task id, with duration, CPM times,
            slack and flags for zero slack and critical path membership
        """
        rows = []
        for tid, entry in self.task_details.items():
            row = {'id': tid, 'duration': self.durations.get(tid, np.nan)}
            row.update(entry.to_dict(self.debug))
            row['zeroSlack'] = entry.is_critical
            row['critical'] = self.is_critical(tid)
            rows.append(row)

        columns = ['id', 'duration', 'earliestStart', 'earliestFinish',
                   'latestStart', 'latestFinish', 'slack', 'zeroSlack', 'critical']
        if rows:
            df = pd.DataFrame(rows)
        else:
            df = pd.DataFrame(columns=columns)
        return df.set_index('id')

    #--------------------------------------------------------------------------
    def viz(self, output_path=None):
        """
        Create Graphviz visualization of the schedule network.

        Tasks are nodes (activity-on-node), dependencies are edges labelled
        with their type and lag. The critical path is drawn red.

        Parameters
        ----------
        output_path : str, optional
            Render a PNG to this path (without extension) when given

        Returns
        -------
        graphviz.Digraph
            Graphviz object for rendering or saving
        """
        dot = graphviz.Digraph(node_attr={'shape': 'record', 'style': 'rounded'})
        dot.graph_attr['rankdir'] = 'LR'

        on_path = set(zip(self.critical_path, self.critical_path[1:]))

        # Task ids are opaque, so graphviz gets positional node names
        names = {tid: 'n%d' % i for i, tid in enumerate(self.task_details)}

        def _cl(critical):
            """Choose color based on critical path membership"""
            return '#ff0000' if critical else '#000000'

        def _esc(text):
            """Escape record label metacharacters"""
            for c in '\\{}|<>':
                text = text.replace(c, '\\' + c)
            return text

        # Add tasks/nodes
        for tid, e in self.task_details.items():
            dur = self.durations.get(tid, 0.0)
            dot.node(names[tid],
                     '{%s | t=%.1f |{%.1f|%.1f}|{%.1f|%.1f}| r=%.1f}' % (_esc(tid), dur,
                                                                      e.earliest_start,
                                                                      e.earliest_finish,
                                                                      e.latest_start,
                                                                      e.latest_finish,
                                                                      e.slack),
                     color=_cl(self.is_critical(tid)),
                     style='rounded,dashed' if 0.0 == dur else 'rounded')

        # Add dependencies/edges
        for lnk in self.links:
            lbl = lnk.type.abbr
            if lnk.lag:
                lbl += ' %+.1f' % lnk.lag
            dot.edge(names[lnk.predecessor], names[lnk.successor],
                     label=lbl,
                     color=_cl((lnk.predecessor, lnk.successor) in on_path))

        # If output path is specified, render to that location
        if output_path is not None:
            dot.render(output_path, format='png', cleanup=True)

        return dot
