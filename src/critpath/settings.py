#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Process-wide defaults of the scheduling engine.

Values are read from environment variables, optionally loaded from a
``.env`` file in the current working directory. Every value can still be
overridden per call through keyword arguments.
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
import math
import os
from pathlib import Path

from dotenv import load_dotenv

env_file = Path.cwd() / '.env'
if env_file.exists():
    load_dotenv(env_file)

LAG_UNITS = {
    'hours'  : 1.0,
    'minutes': 1.0 / 60.0,
}

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


def _env_number(name, default, cast, problems):
    """
    Read a numeric environment variable.

    An unparsable value is reported to ``problems`` and ``default`` is used
    in its place.
    """
    value = os.getenv(name, '').strip()
    if not value:
        return default
    try:
        return cast(value)
    except ValueError:
        problems.append(f"{name} must be {'an integer' if cast is int else 'a number'}, "
                        f"got {value!r}")
        return default


#==============================================================================
class Settings:
    """Engine settings loaded from environment variables."""

    # Values that could not be parsed
    _env_problems = []

    # Logging
    LOG_LEVEL = os.getenv('CRITPATH_LOG_LEVEL', 'INFO')

    # Unit of dependency lag values: 'hours' or 'minutes'
    LAG_UNIT = os.getenv('CRITPATH_LAG_UNIT', 'hours')

    # Duration of a task whose estimatedHours is missing
    DEFAULT_DURATION = _env_number('CRITPATH_DEFAULT_DURATION', 1.0, float, _env_problems)

    # Input size guard, None means unlimited
    MAX_TASKS = _env_number('CRITPATH_MAX_TASKS', None, int, _env_problems)
    MAX_DEPENDENCIES = _env_number('CRITPATH_MAX_DEPENDENCIES', None, int, _env_problems)

    @classmethod
    def validate(cls):
        """
        Return a list of problems with the current settings.
        """
        problems = list(cls._env_problems)
        if str(cls.LOG_LEVEL).upper() not in LOG_LEVELS:
            problems.append(f"CRITPATH_LOG_LEVEL must be one of {list(LOG_LEVELS)}, "
                            f"got {cls.LOG_LEVEL!r}")
        if cls.LAG_UNIT not in LAG_UNITS:
            problems.append(f"CRITPATH_LAG_UNIT must be one of {sorted(LAG_UNITS)}, "
                            f"got {cls.LAG_UNIT!r}")
        if not (math.isfinite(cls.DEFAULT_DURATION) and cls.DEFAULT_DURATION >= 0.0):
            problems.append("CRITPATH_DEFAULT_DURATION must be a finite number >= 0")
        for name in ('MAX_TASKS', 'MAX_DEPENDENCIES'):
            value = getattr(cls, name)
            if value is not None and value < 0:
                problems.append(f"CRITPATH_{name} must be >= 0")
        return problems


settings = Settings()
