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

from .errors import CyclicDependency, SelfDependency, UnknownTaskReference

logger = logging.getLogger(__name__)

# Node states of the depth-first traversal
UNVISITED   = 0
IN_PROGRESS = 1
DONE        = 2


#==============================================================================
def _walk(graph, on_cycle):
    """
    Depth-first traversal of the whole graph.

    Roots and successors are visited in sorted id order. Reaching an
    in-progress node closes a cycle; ``on_cycle`` gets the cycle ids in
    dependency order and may raise to stop the traversal.

    The traversal keeps its own stack, long dependency chains do not hit the
    interpreter recursion limit.

    Returns
    -------
    list of str
        Reverse postorder of the visited tasks (a topological order when no
        cycle was reported)
    """
    state = {tid: UNVISITED for tid in graph.ids}
    postorder = []

    for root in sorted(state):
        if UNVISITED != state[root]:
            continue

        state[root] = IN_PROGRESS
        stack = [(root, iter(graph.successor_ids(root)))]
        while stack:
            node, children = stack[-1]
            for child in children:
                if UNVISITED == state[child]:
                    state[child] = IN_PROGRESS
                    stack.append((child, iter(graph.successor_ids(child))))
                    break
                if IN_PROGRESS == state[child]:
                    path = [n for n, _ in stack]
                    on_cycle(path[path.index(child):])
            else:
                state[node] = DONE
                postorder.append(node)
                stack.pop()

    postorder.reverse()
    return postorder


#==============================================================================
def topological_order(graph):
    """
    Prove the graph is acyclic and order its tasks.

    Parameters
    ----------
    graph : TaskGraph

    Returns
    -------
    list of str
        Task ids, every predecessor before all of its successors

    Raises
    ------
    CyclicDependency
        On the first cycle found, carrying its task ids
    """
    def _raise(cycle):
        raise CyclicDependency(cycle)

    return _walk(graph, _raise)


def find_cycles(graph):
    """
    Find the cycles closed by back edges in one full traversal.

    Every returned cycle is real, but a graph with many overlapping cycles
    is not enumerated exhaustively: each back edge yields one cycle.

    Returns
    -------
    list of list of str
        Cycles as task id lists in dependency order, empty for a DAG
    """
    cycles = []
    _walk(graph, cycles.append)
    if cycles:
        logger.debug("Found %d dependency cycles", len(cycles))
    return cycles


def would_create_cycle(graph, task_id, depends_on_task_id):
    """
    Check whether a new dependency would make the graph cyclic.

    The new edge ``depends_on_task_id -> task_id`` closes a cycle exactly
    when ``depends_on_task_id`` is already reachable from ``task_id``.

    Raises
    ------
    UnknownTaskReference
        If either task is not in the graph
    """
    for tid in (depends_on_task_id, task_id):
        if tid not in graph:
            raise UnknownTaskReference(tid, task_id, depends_on_task_id)

    if task_id == depends_on_task_id:
        return True

    return graph.reaches(task_id, depends_on_task_id)


def check_new_dependency(graph, task_id, depends_on_task_id):
    """
    Validate a dependency before it is stored.

    Raises
    ------
    SelfDependency
        If the task would depend on itself
    UnknownTaskReference
        If either task is not in the graph
    CyclicDependency
        If the edge would close a cycle; the reported cycle starts with
        ``depends_on_task_id`` followed by ``task_id``
    """
    if task_id == depends_on_task_id:
        raise SelfDependency(task_id)

    if would_create_cycle(graph, task_id, depends_on_task_id):
        raise CyclicDependency([depends_on_task_id] + _path(graph, task_id, depends_on_task_id))


def _path(graph, start_id, target_id):
    """Shortest dependency path from ``start_id`` to ``target_id``, target excluded."""
    parent = {start_id: None}
    queue = [start_id]
    i = 0
    while i < len(queue):
        tid = queue[i]
        i += 1
        if tid == target_id:
            break
        for nxt in graph.successor_ids(tid):
            if nxt not in parent:
                parent[nxt] = tid
                queue.append(nxt)

    path = []
    tid = parent[target_id]
    while tid is not None:
        path.append(tid)
        tid = parent[tid]
    path.reverse()
    return path
