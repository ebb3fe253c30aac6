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
from .model import ERR, RES


#==============================================================================
def _better(ef, path, best_ef, best_path):
    """
    Rank two zero slack chains.

    A chain ending at a later earliest finish wins, finishes equal within
    their error bounds fall back to the lexicographically smaller id list.
    """
    d = ef[RES] - best_ef[RES]
    e = ef[ERR] + best_ef[ERR]
    if d > e:
        return True
    if d < -e:
        return False
    return path < best_path


def extract_critical_path(graph, order):
    """
    Pick the critical path among zero slack tasks.

    Zero slack tasks and the dependencies between them form the induced
    subgraph. Its chains run from a task with no zero slack predecessor to a
    task with no zero slack successor. The chain whose last task finishes
    latest is chosen, ties go to the lexicographically smallest id list.

    Parameters
    ----------
    graph : TaskGraph
        Graph with slack computed
    order : list of str
        Topological order of the graph

    Returns
    -------
    list of str
        Ordered task ids, empty when the graph is empty
    """
    zero = {t.id for t in graph if 0.0 == t.slack[RES]}
    succ = {tid: [s for s in graph.successor_ids(tid) if s in zero] for tid in zero}
    has_pred = {s for tid in zero for s in succ[tid]}

    # Best chain starting at every zero slack task: (final EF, ids)
    best = {}
    for tid in reversed(order):
        if tid not in zero:
            continue

        if not succ[tid]:
            best[tid] = (graph.task(tid).early_finish, [tid])
            continue

        cand = None
        for s in succ[tid]:
            ef, path = best[s]
            if cand is None or _better(ef, path, *cand):
                cand = (ef, path)
        best[tid] = (cand[0], [tid] + cand[1])

    cand = None
    for tid in sorted(zero - has_pred):
        ef, path = best[tid]
        if cand is None or _better(ef, path, *cand):
            cand = (ef, path)

    return cand[1] if cand is not None else []
