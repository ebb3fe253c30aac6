#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Caller side invalidation of computed schedules.

The engine never caches. A caller that displays a schedule keeps the
version of the snapshot the schedule was computed from and recomputes as
soon as the version of the current snapshot differs:

>>> cache = ScheduleCache()
>>> result = cache.get(tasks, dependencies)       # computes
>>> result = cache.get(tasks, dependencies)       # same snapshot, reused
>>> tasks[0]['estimatedHours'] = 5
>>> result = cache.get(tasks, dependencies)       # changed, recomputes

A failed recomputation drops the cached result at once, a stale critical
path is never shown against changed data.

``ScheduleCache`` is meant to be owned by one caller and does no locking.
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
import hashlib
import json
import logging

from .engine import compute_critical_path
from .errors import SchedulingError
from .graph import (DURATION_FIELDS, LAG_FIELDS, PREDECESSOR_FIELDS,
                    SUCCESSOR_FIELDS, TASK_ID_FIELDS, TYPE_FIELDS, get_field)

logger = logging.getLogger(__name__)


def _canonical(record, fields):
    if not isinstance(record, Mapping):
        # Malformed records still get a stable version, the engine rejects them
        return {'repr': repr(record)}
    return {names[0]: get_field(record, names, None) for names in fields}


def version_of(tasks, dependencies, task_ids=None):
    """
    Content version of a scheduling snapshot.

    Only fields the engine reads take part, and record order does not
    matter. Informational fields such as ``actualHours`` or ``name`` can
    change without invalidating a schedule.

    Returns
    -------
    str
        Hex SHA-256 digest
    """
    task_part = sorted((_canonical(t, (TASK_ID_FIELDS, DURATION_FIELDS)) for t in tasks),
                       key=lambda r: json.dumps(r, sort_keys=True, default=str))
    dep_part = sorted((_canonical(d, (SUCCESSOR_FIELDS, PREDECESSOR_FIELDS,
                                      TYPE_FIELDS, LAG_FIELDS)) for d in dependencies),
                      key=lambda r: json.dumps(r, sort_keys=True, default=str))
    doc = {
        'taskIds'     : sorted(str(t) for t in task_ids) if task_ids is not None else None,
        'tasks'       : task_part,
        'dependencies': dep_part,
    }
    text = json.dumps(doc, sort_keys=True, default=str, separators=(',', ':'))
    return hashlib.sha256(text.encode('utf-8')).hexdigest()


#==============================================================================
class ScheduleCache:
    """
    Last computed schedule together with the version of its input.

    Parameters
    ----------
    **options
        Keyword arguments passed to :func:`compute_critical_path`
    """
    def __init__(self, **options):
        self.options = options
        self.version = None
        self.result = None

    def invalidate(self):
        self.version = None
        self.result = None

    def is_current(self, tasks, dependencies, task_ids=None):
        return self.result is not None and \
            self.version == version_of(tasks, dependencies, task_ids)

    def get(self, tasks, dependencies, task_ids=None):
        """
        Return the schedule of the snapshot, recomputing it when it changed.

        Raises
        ------
        SchedulingError
            When the recomputation fails; the cache is empty afterwards
        """
        tasks = list(tasks)
        dependencies = list(dependencies)
        version = version_of(tasks, dependencies, task_ids)
        if self.result is not None and version == self.version:
            logger.debug("Schedule of version %s is current", version[:12])
            return self.result

        self.invalidate()
        try:
            result = compute_critical_path(tasks, dependencies, task_ids, **self.options)
        except SchedulingError:
            logger.debug("Recomputation of version %s failed, cache cleared", version[:12])
            raise

        self.version = version
        self.result = result
        return result
