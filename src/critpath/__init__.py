#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
CritPath - Critical Path Method scheduling engine
=================================================

Computes earliest/latest times, total slack and the critical path of a
project from tasks with hour estimates and typed, lagged dependencies.

>>> from critpath import compute_critical_path
>>> result = compute_critical_path(tasks, dependencies)
>>> result.to_dict()
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
from .cache import ScheduleCache, version_of
from .engine import (SchedulePipeline, Stage, check_new_dependency,
                     compute_critical_path, handle_request,
                     validate_dependencies)
from .errors import (HTTP_STATUS, CallerDataError, CyclicDependency,
                     DuplicateTaskId, InputTooLarge, InvalidConfiguration,
                     InvalidDependencyType, InvalidDuration, InvalidLag,
                     InvariantViolation, MalformedRecord, MalformedRequest,
                     NegativeSlackInvariantViolation, SchedulingError,
                     SelfDependency, UnknownTaskReference, http_status)
from .graph import TaskGraph, build_graph
from .model import CriticalPathResult, DependencyType, ScheduleEntry

__version__ = '0.1.0'
