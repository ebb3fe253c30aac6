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
import logging
import sys

from .settings import settings

PACKAGE_LOGGER = 'critpath'


def configure_logging(level=None, stream=None):
    """
    Attach a stream handler to the package logger.

    The library modules only create loggers; applications (the CLI) call
    this once to make the messages visible.

    Parameters
    ----------
    level : str or int, optional
        Logging level, ``settings.LOG_LEVEL`` by default
    stream : file-like, optional
        Output stream, ``sys.stderr`` by default

    Returns
    -------
    logging.Logger
        The configured package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level if level is not None else settings.LOG_LEVEL)

    # Prevent duplicate handlers if configured multiple times
    if not logger.handlers:
        handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
        handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'))
        logger.addHandler(handler)

    return logger
