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
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# Request models
class TaskRecord(BaseModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: str
    estimatedHours: Optional[float] = None
    # Informational only, never used for scheduling
    actualHours: Optional[float] = None
    startDate: Optional[Any] = None
    dueDate: Optional[Any] = None


class DependencyRecord(BaseModel):
    """
    Dependency ``dependsOnTaskId -> taskId``.

    ``dependencyType`` is passed through untyped so that unknown tags,
    strings or not, are reported by the engine as InvalidDependencyType.
    """
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    taskId: str
    dependsOnTaskId: str
    dependencyType: Optional[Any] = None
    lag: Optional[float] = None


class CriticalPathRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    taskIds: Optional[List[str]] = None
    tasks: List[TaskRecord] = Field(default_factory=list)
    dependencies: List[DependencyRecord] = Field(default_factory=list)

    def task_records(self):
        return [t.model_dump() for t in self.tasks]

    def dependency_records(self):
        return [d.model_dump() for d in self.dependencies]


# Response models
class ScheduleEntryModel(BaseModel):
    # Debug mode adds error bound fields
    model_config = ConfigDict(extra="allow")

    earliestStart: float
    earliestFinish: float
    latestStart: float
    latestFinish: float
    slack: float = Field(ge=0.0)


class CriticalPathResponse(BaseModel):
    criticalPath: List[str]
    criticalPathDuration: float = Field(ge=0.0)
    taskDetails: Dict[str, ScheduleEntryModel]


class ErrorResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    kind: str
    message: str
    severity: str
    stage: Optional[str] = None
    cycle: Optional[List[str]] = None
