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
import argparse
import json
import logging
import sys

from pydantic import ValidationError

from .engine import compute_critical_path, validate_dependencies
from .errors import InvariantViolation, MalformedRequest, SchedulingError
from .logger import configure_logging
from .schemas import CriticalPathRequest, ErrorResponse
from .settings import LAG_UNITS, LOG_LEVELS, settings

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_BAD_DATA = 1
EXIT_DEFECT = 2


def _load_request(path):
    if '-' == path:
        text = sys.stdin.read()
    else:
        with open(path, encoding='utf-8') as f:
            text = f.read()
    try:
        return CriticalPathRequest.model_validate_json(text)
    except ValidationError as e:
        raise MalformedRequest(e.errors(include_url=False, include_context=False,
                                        include_input=False)) from None


def build_parser():
    ap = argparse.ArgumentParser(prog='critpath',
                                 description='Critical path schedule of a project snapshot')
    ap.add_argument('request', help="JSON request file with 'tasks' and 'dependencies', "
                                    "'-' for stdin")
    ap.add_argument('--lag-unit', choices=sorted(LAG_UNITS), default=settings.LAG_UNIT,
                    help='unit of dependency lag values')
    ap.add_argument('--default-duration', type=float, default=settings.DEFAULT_DURATION,
                    help='hours of tasks without estimatedHours')
    ap.add_argument('--max-tasks', type=int, default=settings.MAX_TASKS)
    ap.add_argument('--max-dependencies', type=int, default=settings.MAX_DEPENDENCIES)
    ap.add_argument('--validate', action='store_true',
                    help='only report dependency cycles')
    ap.add_argument('--csv', metavar='PATH', help='also write the schedule table as CSV')
    ap.add_argument('--viz', metavar='PATH', help='also render the network as PNG')
    ap.add_argument('--debug', action='store_true', help='export computation error bounds')
    ap.add_argument('--indent', type=int, default=2)
    ap.add_argument('--log-level', type=str.upper, choices=LOG_LEVELS,
                    default=settings.LOG_LEVEL)
    return ap


def main(argv=None):
    args = build_parser().parse_args(argv)
    problems = settings.validate()
    configure_logging(args.log_level if args.log_level in LOG_LEVELS else 'INFO')

    if problems:
        for problem in problems:
            logger.error("Invalid setting: %s", problem)
        return EXIT_BAD_DATA

    try:
        request = _load_request(args.request)
        tasks = request.task_records()
        deps = request.dependency_records()

        if args.validate:
            out = validate_dependencies(tasks, deps, request.taskIds,
                                        lag_unit=args.lag_unit,
                                        default_duration=args.default_duration)
            print(json.dumps(out, indent=args.indent))
            return EXIT_OK if out['isValid'] else EXIT_BAD_DATA

        result = compute_critical_path(tasks, deps, request.taskIds,
                                       lag_unit=args.lag_unit,
                                       default_duration=args.default_duration,
                                       max_tasks=args.max_tasks,
                                       max_dependencies=args.max_dependencies,
                                       debug=args.debug)
    except OSError as e:
        logger.error("Can not read request: %s", e)
        return EXIT_BAD_DATA
    except SchedulingError as e:
        out = ErrorResponse.model_validate(e.to_dict()).model_dump(exclude_none=True)
        print(json.dumps(out, indent=args.indent))
        return EXIT_DEFECT if isinstance(e, InvariantViolation) else EXIT_BAD_DATA

    print(result.to_json(indent=args.indent))

    if args.csv:
        result.to_dataframe().to_csv(args.csv)
        logger.info("Schedule table written to %s", args.csv)

    if args.viz:
        result.viz(output_path=args.viz)
        logger.info("Network diagram written to %s.png", args.viz)

    return EXIT_OK


if __name__ == '__main__':
    sys.exit(main())
