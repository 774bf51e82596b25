"""Load a template file and locate its skeleton regions.

A template is a valid, standalone Python module. Three statements in it are
marked with a comment and serve as skeletons for the code generator:

* the **function skeleton** -- a top-level ``def`` cloned once per test
  function;
* the **test skeleton** -- a statement inside it, cloned once per test;
* the **subtest skeleton** -- a statement inside it, cloned once per
  subtest group.

Markers are recognised in two spellings::

    # apitestgen: function-skeleton      # Atgen TestFunc block
    # apitestgen: test-skeleton          # Atgen Test block
    # apitestgen: subtest-skeleton       # Atgen Subtest block

The right-hand column is the legacy wording and is matched as a substring
of the comment. Because the test and subtest skeletons sit inside the
function skeleton only to keep the template runnable, :class:`Template`
exposes an *expansion skeleton*: the function skeleton with those nested
statements removed.

The parsed module is treated as read-only. Every consumer works on a copy
obtained from :meth:`Template.clone`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence, Union

import libcst as cst

from apitestgen.exceptions import ConfigError
from apitestgen.generator.sentinels import RegionRole, validate_region

logger = logging.getLogger(__name__)

REGION_MARKERS: dict[RegionRole, tuple[str, ...]] = {
    RegionRole.FUNCTION: ("apitestgen: function-skeleton", "Atgen TestFunc block"),
    RegionRole.TEST: ("apitestgen: test-skeleton", "Atgen Test block"),
    RegionRole.SUBTEST: ("apitestgen: subtest-skeleton", "Atgen Subtest block"),
}

Statement = Union[cst.SimpleStatementLine, cst.BaseCompoundStatement]


def marker_role(comment: str) -> Optional[RegionRole]:
    """Return the region role a comment marks, or ``None``."""
    for role, markers in REGION_MARKERS.items():
        if any(marker in comment for marker in markers):
            return role
    return None


# ---------------------------------------------------------------------------
# Comment index
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CommentEntry:
    """A comment and the statement it is attached to."""

    text: str
    node: Statement


class _CommentCollector(cst.CSTVisitor):
    def __init__(self) -> None:
        self.entries: list[CommentEntry] = []

    def on_visit(self, node: cst.CSTNode) -> bool:
        if isinstance(node, (cst.SimpleStatementLine, cst.BaseCompoundStatement)):
            self._collect(node)
        elif isinstance(node, cst.IndentedBlock) and node.body:
            # Comments closing a block belong to its last statement.
            self.attach(node.footer, node.body[-1])
        return True

    def attach(self, lines: Sequence[cst.EmptyLine], node: Statement) -> None:
        for line in lines:
            if line.comment is not None:
                self.entries.append(CommentEntry(line.comment.value, node))

    def _collect(self, node: Statement) -> None:
        self.attach(node.leading_lines, node)
        if isinstance(node, (cst.FunctionDef, cst.ClassDef)):
            self.attach(node.lines_after_decorators, node)

        trailing: Optional[cst.TrailingWhitespace] = None
        body = getattr(node, "body", None)
        if isinstance(node, cst.SimpleStatementLine):
            trailing = node.trailing_whitespace
        elif isinstance(body, cst.IndentedBlock):
            trailing = body.header
        elif isinstance(body, cst.SimpleStatementSuite):
            trailing = body.trailing_whitespace
        if trailing is not None and trailing.comment is not None:
            self.entries.append(CommentEntry(trailing.comment.value, node))


class CommentIndex:
    """Maps every comment of a module to the statement it annotates.

    Leading comment lines, same-line trailing comments and comments after a
    compound statement's colon are all attributed to that statement. libcst
    moves the comments above the first statement of a file into
    ``Module.header``; those go to the first statement, and comments after
    the last statement of a block or file go to that last statement.
    """

    def __init__(self, entries: list[CommentEntry]) -> None:
        self._entries = entries

    @classmethod
    def build(cls, module: cst.Module) -> "CommentIndex":
        collector = _CommentCollector()
        if module.body:
            collector.attach(module.header, module.body[0])
        module.visit(collector)
        if module.body:
            collector.attach(module.footer, module.body[-1])
        return cls(collector.entries)

    def __iter__(self):
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def comments_for(self, node: cst.CSTNode) -> list[str]:
        return [entry.text for entry in self._entries if entry.node is node]

    def regions(self) -> dict[RegionRole, Statement]:
        """Locate the statement marked for each role.

        Raises:
            ConfigError: If two different statements claim the same role.
        """
        found: dict[RegionRole, Statement] = {}
        for entry in self._entries:
            role = marker_role(entry.text)
            if role is None:
                continue
            previous = found.get(role)
            if previous is not None and previous is not entry.node:
                raise ConfigError(f"Template marks more than one {role.value} skeleton")
            found[role] = entry.node
        return found


# ---------------------------------------------------------------------------
# Tree helpers
# ---------------------------------------------------------------------------


class _RemoveStatements(cst.CSTTransformer):
    def __init__(self, targets: list[cst.CSTNode]) -> None:
        self._targets = targets

    def on_leave(self, original_node, updated_node):
        if any(original_node is target for target in self._targets):
            return cst.RemoveFromParent()
        return updated_node


class _StripMarkers(cst.CSTTransformer):
    def leave_EmptyLine(self, original_node, updated_node):
        if updated_node.comment is not None and marker_role(updated_node.comment.value):
            return cst.RemoveFromParent()
        return updated_node

    def leave_TrailingWhitespace(self, original_node, updated_node):
        if updated_node.comment is not None and marker_role(updated_node.comment.value):
            return updated_node.with_changes(
                whitespace=cst.SimpleWhitespace(""), comment=None
            )
        return updated_node


def remove_statements(node: cst.CSTNode, targets: list[cst.CSTNode]) -> cst.CSTNode:
    """Return a copy of *node* without the statements in *targets* (matched by identity)."""
    return node.visit(_RemoveStatements(targets))


def strip_markers(node: cst.CSTNode) -> cst.CSTNode:
    """Return a copy of *node* with every region-marker comment removed."""
    return node.visit(_StripMarkers())


# ---------------------------------------------------------------------------
# Template
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TemplateRegion:
    """A marked, reusable subtree of the template."""

    role: RegionRole
    node: Statement


@dataclass
class Template:
    """A parsed template and its regions.

    Attributes:
        name: Base name of the template file, used to name generated files.
        module: The parsed template module. Never modified.
        regions: Region descriptors keyed by role.
        skeleton: The expansion skeleton (function skeleton minus the nested
            test and subtest skeletons).
        comments: Comment index of :attr:`module`.
    """

    name: str
    module: cst.Module
    regions: dict[RegionRole, TemplateRegion]
    skeleton: cst.FunctionDef
    comments: CommentIndex = field(repr=False)

    def has_region(self, role: RegionRole) -> bool:
        return role in self.regions

    def region(self, role: RegionRole) -> TemplateRegion:
        """Return the region for *role*.

        Raises:
            ConfigError: If the template has no such region.
        """
        region = self.regions.get(role)
        if region is None:
            markers = " or ".join(repr(m) for m in REGION_MARKERS[role])
            raise ConfigError(
                f"Template {self.name!r} has no {role.value} skeleton "
                f"(mark one with a {markers} comment)"
            )
        return region

    @property
    def function_node(self) -> cst.FunctionDef:
        """The function skeleton as it appears in :attr:`module`."""
        return self.region(RegionRole.FUNCTION).node  # type: ignore[return-value]

    def clone(self, role: RegionRole) -> cst.CSTNode:
        """Return an independent deep copy of a region, without marker comments.

        For :attr:`RegionRole.FUNCTION` the expansion skeleton is cloned.
        """
        if role is RegionRole.FUNCTION:
            source: cst.CSTNode = self.skeleton
        else:
            source = self.region(role).node
        return strip_markers(source.deep_clone())


def parse_template(source: str, name: str) -> Template:
    """Parse template *source* and locate its regions.

    Args:
        source: Python source text of the template.
        name: Base name used for generated files (usually the file stem).

    Raises:
        ConfigError: If the source is not valid Python, the function skeleton
            marker is missing or not on a top-level ``def``, a role is marked
            twice, or a region lacks a required sentinel.
    """
    try:
        module = cst.parse_module(source)
    except cst.ParserSyntaxError as exc:
        raise ConfigError(f"Template {name!r} is not valid Python: {exc}") from exc

    comments = CommentIndex.build(module)
    found = comments.regions()

    function_node = found.get(RegionRole.FUNCTION)
    if function_node is None:
        raise ConfigError(
            f"Template {name!r} has no function skeleton "
            "(mark a top-level def with '# apitestgen: function-skeleton')"
        )
    if not isinstance(function_node, cst.FunctionDef) or not any(
        stmt is function_node for stmt in module.body
    ):
        raise ConfigError(
            f"The function skeleton of template {name!r} must be a top-level function definition"
        )

    nested = [found[role] for role in (RegionRole.TEST, RegionRole.SUBTEST) if role in found]
    skeleton = remove_statements(function_node, nested)
    if not isinstance(skeleton, cst.FunctionDef):
        raise ConfigError(f"Template {name!r} function skeleton cannot also be a test skeleton")

    validate_region(RegionRole.FUNCTION, skeleton)
    for role in (RegionRole.TEST, RegionRole.SUBTEST):
        if role in found:
            validate_region(role, found[role])
        else:
            logger.debug("Template %s has no %s skeleton", name, role.value)

    regions = {role: TemplateRegion(role, node) for role, node in found.items()}
    return Template(
        name=name,
        module=module,
        regions=regions,
        skeleton=skeleton,
        comments=comments,
    )


def load_template(path: str | Path) -> Template:
    """Read and parse the template at *path*.

    I/O errors propagate unchanged.
    """
    template_path = Path(path)
    source = template_path.read_text(encoding="utf-8")
    logger.debug("Loaded template %s (%d bytes)", template_path, len(source))
    return parse_template(source, template_path.stem)
