"""
Field dependency graph: construction, cycle detection and ordering.

A field depends on every field referenced by its `showIf` / `hideIf`
expressions and by the `condition` of its validation rules. A field
referencing itself in a validation condition is not a dependency (it
may validate against its own value); a self-reference in branching is.

Traversals use an explicit stack bounded by `MAX_DEPENDENCY_DEPTH`
rather than Python recursion.
"""

import logging

from formrules.core.errors import DependencyDepthError
from formrules.core.expressions import ordered_field_references
from formrules.core.schema import FormDefinition, FormField

logger = logging.getLogger(__name__)

# Longest dependency chain a traversal will follow
MAX_DEPENDENCY_DEPTH = 500

DependencyGraph = dict[str, list[str]]


def get_all_fields(form: FormDefinition) -> list[FormField]:
    """Flatten a form into its fields in document order.

    Each section contributes its direct fields first, then the fields of
    each of its groups.
    """
    fields: list[FormField] = []
    for section in form.sections:
        fields.extend(section.fields)
        for group in section.groups:
            fields.extend(group.fields)
    return fields


def field_dependencies(field: FormField) -> list[str]:
    """Return the duplicate-free dependencies of one field."""
    deps: dict[str, None] = {}

    if field.branching is not None:
        for expression in (field.branching.show_if, field.branching.hide_if):
            for ref in ordered_field_references(expression):
                deps.setdefault(ref, None)

    for rule in field.validation or []:
        if not rule.condition:
            continue
        for ref in ordered_field_references(rule.condition):
            if ref != field.id:
                deps.setdefault(ref, None)

    return list(deps)


def build_dependency_graph(form: FormDefinition) -> DependencyGraph:
    """Map every field ID to the field IDs it depends on.

    Every field appears as a key, even with no dependencies. Dependency
    lists keep first-reference order so that traversals are stable.
    """
    graph: DependencyGraph = {}
    for field in get_all_fields(form):
        deps = graph.setdefault(field.id, [])
        for dep in field_dependencies(field):
            if dep not in deps:
                deps.append(dep)
    return graph


def detect_cycles(
    graph: DependencyGraph,
    max_depth: int = MAX_DEPENDENCY_DEPTH,
) -> list[list[str]]:
    """Find circular dependencies with a depth-first traversal.

    Roots are visited in graph key order (field declaration order). When
    a dependency is already on the current path, the path slice from its
    first occurrence, closed by the repeated ID, is recorded.

    Args:
        graph: Dependency graph as returned by `build_dependency_graph`.
        max_depth: Longest path the traversal may follow.

    Returns:
        A list of cycles, each a list of field IDs; empty if acyclic.

    Raises:
        DependencyDepthError: If a path grows beyond `max_depth`.
    """
    cycles: list[list[str]] = []
    visited: set[str] = set()

    for root in graph:
        if root in visited:
            continue

        visited.add(root)
        path = [root]
        on_path = {root}
        stack = [iter(graph.get(root, ()))]

        while stack:
            dep = next(stack[-1], None)
            if dep is None:
                stack.pop()
                on_path.discard(path.pop())
                continue

            if dep not in visited:
                if len(path) >= max_depth:
                    raise DependencyDepthError(dep, max_depth)
                visited.add(dep)
                on_path.add(dep)
                path.append(dep)
                stack.append(iter(graph.get(dep, ())))
            elif dep in on_path:
                start = path.index(dep)
                cycle = path[start:] + [dep]
                logger.debug("Cycle found: %s", cycle)
                cycles.append(cycle)

    return cycles


def topological_order(
    graph: DependencyGraph,
    max_depth: int = MAX_DEPENDENCY_DEPTH,
) -> list[str]:
    """Order fields so that every field comes after its dependencies.

    Post-order depth-first emission from each root in key order. IDs that
    are referenced but not keys of the graph are not emitted. On a cyclic
    graph every field is still emitted once, but the order is only
    meaningful for acyclic graphs.

    Raises:
        DependencyDepthError: If a path grows beyond `max_depth`.
    """
    order: list[str] = []
    visited: set[str] = set()

    for root in graph:
        if root in visited:
            continue

        visited.add(root)
        stack = [(root, iter(graph[root]))]

        while stack:
            node, deps = stack[-1]
            dep = next(deps, None)
            if dep is None:
                stack.pop()
                order.append(node)
                continue

            if dep in visited or dep not in graph:
                continue
            if len(stack) >= max_depth:
                raise DependencyDepthError(dep, max_depth)
            visited.add(dep)
            stack.append((dep, iter(graph[dep])))

    return order


def evaluation_order(form: FormDefinition) -> list[str]:
    """Return the field IDs of a form in dependency order."""
    return topological_order(build_dependency_graph(form))
