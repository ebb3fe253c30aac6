#!/usr/bin/env python3
# -*- coding: utf-8 -*-
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
class SchedulingError(Exception):
    """
    Base class of every failure the scheduling engine reports.

    Attributes
    ----------
    kind : str
        Stable machine readable error kind (wire ``kind`` field)
    severity : str
        ``'error'`` for bad caller data, ``'fatal'`` for engine defects
    message : str
        Human readable description
    stage : str or None
        Pipeline stage the error was raised in, set by the engine
    """
    kind = 'SchedulingError'
    severity = 'error'

    def __init__(self, message):
        super().__init__(message)
        self.message = message
        self.stage = None

    def details(self):
        """Structured payload specific to the error kind."""
        return {}

    def to_dict(self):
        ret = {
            'kind'    : self.kind,
            'message' : self.message,
            'severity': self.severity,
        }
        if self.stage is not None:
            ret['stage'] = self.stage
        ret.update(self.details())
        return ret


#==============================================================================
class CallerDataError(SchedulingError):
    """Raised when the supplied tasks or dependencies can not be scheduled."""
    pass


class InvariantViolation(SchedulingError):
    """Raised when the engine produced an internally inconsistent schedule."""
    severity = 'fatal'


#==============================================================================
class UnknownTaskReference(CallerDataError):
    """Raised when a dependency or scope entry names a task that is not supplied."""
    kind = 'UnknownTaskReference'

    def __init__(self, task_id, task=None, depends_on_task_id=None):
        if task is None and depends_on_task_id is None:
            msg = f"Task '{task_id}' is listed in the scope but no task record was supplied"
        else:
            msg = (f"Dependency '{depends_on_task_id}' -> '{task}' references "
                   f"unknown task '{task_id}'")
        super().__init__(msg)
        self.task_id = task_id
        self.task = task
        self.depends_on_task_id = depends_on_task_id

    def details(self):
        ret = {'taskId': self.task_id}
        if self.task is not None or self.depends_on_task_id is not None:
            ret['dependency'] = {'taskId': self.task,
                                 'dependsOnTaskId': self.depends_on_task_id}
        return ret


class SelfDependency(CallerDataError):
    """Raised when a task is declared as its own predecessor."""
    kind = 'SelfDependency'

    def __init__(self, task_id):
        super().__init__(f"Task '{task_id}' can not depend on itself")
        self.task_id = task_id

    def details(self):
        return {'taskId': self.task_id}


class InvalidDuration(CallerDataError):
    """Raised when a task duration is negative or not a finite number."""
    kind = 'InvalidDuration'

    def __init__(self, task_id, value):
        super().__init__(f"Task '{task_id}' has invalid duration {value!r}: "
                         f"expected a finite number of hours >= 0")
        self.task_id = task_id
        self.value = value

    def details(self):
        return {'taskId': self.task_id, 'value': repr(self.value)}


class InvalidDependencyType(CallerDataError):
    """Raised when a dependency carries an unrecognized type tag."""
    kind = 'InvalidDependencyType'

    def __init__(self, tag, task=None, depends_on_task_id=None):
        super().__init__(f"Dependency '{depends_on_task_id}' -> '{task}' has unknown "
                         f"type {tag!r}")
        self.tag = tag
        self.task = task
        self.depends_on_task_id = depends_on_task_id

    def details(self):
        return {'dependencyType': repr(self.tag),
                'dependency': {'taskId': self.task,
                               'dependsOnTaskId': self.depends_on_task_id}}


class InvalidLag(CallerDataError):
    """Raised when a dependency lag is not a finite number."""
    kind = 'InvalidLag'

    def __init__(self, value, task=None, depends_on_task_id=None):
        super().__init__(f"Dependency '{depends_on_task_id}' -> '{task}' has invalid "
                         f"lag {value!r}")
        self.value = value
        self.task = task
        self.depends_on_task_id = depends_on_task_id

    def details(self):
        return {'value': repr(self.value),
                'dependency': {'taskId': self.task,
                               'dependsOnTaskId': self.depends_on_task_id}}


class MalformedRecord(CallerDataError):
    """Raised when a task or dependency record is not a mapping or lacks an id field."""
    kind = 'MalformedRecord'

    def __init__(self, what, index, reason):
        super().__init__(f"{what.capitalize()} record #{index} is malformed: {reason}")
        self.what = what
        self.index = index
        self.reason = reason

    def details(self):
        return {'record': self.what, 'index': self.index}


class MalformedRequest(CallerDataError):
    """Raised when a wire request does not match the request schema."""
    kind = 'MalformedRequest'

    def __init__(self, errors):
        errors = list(errors)
        super().__init__(f"Request does not match the schema ({len(errors)} problems)")
        self.errors = errors

    def details(self):
        return {'errors': self.errors}


class DuplicateTaskId(CallerDataError):
    """Raised when two task records share one id."""
    kind = 'DuplicateTaskId'

    def __init__(self, task_id):
        super().__init__(f"Task id '{task_id}' is supplied more than once")
        self.task_id = task_id

    def details(self):
        return {'taskId': self.task_id}


class CyclicDependency(CallerDataError):
    """
    Raised when the dependency graph contains a cycle.

    ``cycle`` lists the task ids along the cycle in dependency order,
    without repeating the first id at the end.
    """
    kind = 'CyclicDependency'

    def __init__(self, cycle):
        cycle = list(cycle)
        super().__init__("Circular dependency detected: " +
                         " -> ".join(cycle + cycle[:1]))
        self.cycle = cycle

    def details(self):
        return {'cycle': list(self.cycle)}


class InputTooLarge(CallerDataError):
    """Raised when the input exceeds the configured size guard."""
    kind = 'InputTooLarge'

    def __init__(self, what, count, limit):
        super().__init__(f"Too many {what}: {count} supplied, at most {limit} allowed")
        self.what = what
        self.count = count
        self.limit = limit

    def details(self):
        return {'what': self.what, 'count': self.count, 'limit': self.limit}


class InvalidConfiguration(SchedulingError, ValueError):
    """Raised when an engine option or setting has an unusable value."""
    kind = 'InvalidConfiguration'
    severity = 'fatal'

    def __init__(self, option, value, expected):
        super().__init__(f"Option '{option}' has invalid value {value!r}: expected {expected}")
        self.option = option
        self.value = value
        self.expected = expected

    def details(self):
        return {'option': self.option, 'value': repr(self.value)}


class NegativeSlackInvariantViolation(InvariantViolation):
    """Raised when a computed slack is negative beyond round-off error."""
    kind = 'NegativeSlackInvariantViolation'

    def __init__(self, task_id, slack):
        super().__init__(f"Task '{task_id}' got negative slack {slack!r}: "
                         f"the forward and backward passes disagree")
        self.task_id = task_id
        self.slack = slack

    def details(self):
        return {'taskId': self.task_id, 'slack': float(self.slack)}


#==============================================================================
# Mapping of error kinds to HTTP status codes for RPC adapters
HTTP_STATUS = {
    UnknownTaskReference           : 422,
    SelfDependency                 : 422,
    InvalidDuration                : 400,
    InvalidDependencyType          : 400,
    InvalidLag                     : 400,
    MalformedRecord                : 400,
    MalformedRequest               : 400,
    DuplicateTaskId                : 400,
    CyclicDependency               : 422,
    InputTooLarge                  : 413,
    InvalidConfiguration           : 500,
    NegativeSlackInvariantViolation: 500,
}


def http_status(error):
    """Return the HTTP status code an RPC adapter should answer ``error`` with."""
    for cls in type(error).__mro__:
        if cls in HTTP_STATUS:
            return HTTP_STATUS[cls]
    return 500 if isinstance(error, InvariantViolation) else 400
