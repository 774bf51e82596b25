"""The sentinel contract between templates and the rewriter.

A template is ordinary, runnable Python. The rewriter finds the places it
must fill in by looking for fixed tokens, the *sentinels*: string literals
(``"AtgenMethod"``), called names (``atgen_request_body()``), assignment
targets (``atgen_req_headers = {}``) and bare ``pass`` statements that mark
where generated statements are spliced in.

Every token the engine knows about lives in :data:`SENTINELS`, keyed by the
closed :class:`Slot` enumeration. :func:`validate_region` checks at load
time that a region carries every slot marked as required for its role, so
a broken template fails before any file is written.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

import libcst as cst

from apitestgen.exceptions import ConfigError

CONTRACT_VERSION = 1
"""Bumped whenever a token is renamed or a slot changes meaning."""


class RegionRole(str, enum.Enum):
    """The three reusable regions of a template."""

    FUNCTION = "function"
    TEST = "test"
    SUBTEST = "subtest"


class SlotKind(str, enum.Enum):
    """Syntactic role of a sentinel token."""

    STRING = "string"  # a string literal whose value is the token
    CALL = "call"  # a call whose callee is the bare name
    ASSIGN = "assign"  # a single-name assignment target
    PLACEHOLDER = "placeholder"  # a statement consisting only of ``pass``


class Slot(str, enum.Enum):
    ROUTER_CALL = "router_call"
    VARS = "vars"
    PLACEHOLDER = "placeholder"
    METHOD = "method"
    PATH = "path"
    STATUS = "status"
    REGISTER_KEY = "register_key"
    REQUEST_BODY = "request_body"
    REQ_HEADERS = "req_headers"
    REQ_PARAMS = "req_params"
    RES_HEADERS = "res_headers"
    RES_PARAMS = "res_params"
    RES_PARAMS_ARRAY = "res_params_array"
    TEST_VARS = "test_vars"
    SUBTEST_NAME = "subtest_name"


@dataclass(frozen=True)
class Sentinel:
    token: str
    kind: SlotKind
    roles: tuple[RegionRole, ...]
    required: bool = False


SENTINELS: dict[Slot, Sentinel] = {
    Slot.ROUTER_CALL: Sentinel(
        "atgen_router_func", SlotKind.CALL, (RegionRole.FUNCTION,), required=True
    ),
    Slot.VARS: Sentinel("atgen_vars", SlotKind.ASSIGN, (RegionRole.FUNCTION,)),
    Slot.PLACEHOLDER: Sentinel(
        "pass",
        SlotKind.PLACEHOLDER,
        (RegionRole.FUNCTION, RegionRole.SUBTEST),
        required=True,
    ),
    Slot.METHOD: Sentinel(
        "AtgenMethod", SlotKind.STRING, (RegionRole.TEST,), required=True
    ),
    Slot.PATH: Sentinel("AtgenPath", SlotKind.STRING, (RegionRole.TEST,), required=True),
    Slot.STATUS: Sentinel(
        "atgenStatus", SlotKind.STRING, (RegionRole.TEST,), required=True
    ),
    Slot.REGISTER_KEY: Sentinel("atgenRegisterKey", SlotKind.STRING, (RegionRole.TEST,)),
    Slot.REQUEST_BODY: Sentinel("atgen_request_body", SlotKind.CALL, (RegionRole.TEST,)),
    Slot.REQ_HEADERS: Sentinel("atgen_req_headers", SlotKind.ASSIGN, (RegionRole.TEST,)),
    Slot.REQ_PARAMS: Sentinel("atgen_req_params", SlotKind.ASSIGN, (RegionRole.TEST,)),
    Slot.RES_HEADERS: Sentinel("atgen_res_headers", SlotKind.ASSIGN, (RegionRole.TEST,)),
    Slot.RES_PARAMS: Sentinel("atgen_res_params", SlotKind.ASSIGN, (RegionRole.TEST,)),
    Slot.RES_PARAMS_ARRAY: Sentinel(
        "atgen_res_params_array", SlotKind.ASSIGN, (RegionRole.TEST,)
    ),
    Slot.TEST_VARS: Sentinel("atgen_test_vars", SlotKind.ASSIGN, (RegionRole.TEST,)),
    Slot.SUBTEST_NAME: Sentinel(
        "AtgenSubtestName", SlotKind.STRING, (RegionRole.SUBTEST,), required=True
    ),
}

# Names referenced by generated interpolation expressions.
VARS_STORE = SENTINELS[Slot.VARS].token
REGISTER_STORE = "atgen_register"
TYPE_ASSERTION_MODULE = "apitestgen.runtime"
TYPE_ASSERTION_HELPER = "expect_type"


def token(slot: Slot) -> str:
    return SENTINELS[slot].token


def slot_for(kind: SlotKind, value: str) -> Slot | None:
    """Return the slot whose token of *kind* equals *value*, if any."""
    for slot, sentinel in SENTINELS.items():
        if sentinel.kind is kind and sentinel.token == value:
            return slot
    return None


def is_placeholder(node: cst.CSTNode) -> bool:
    """True for a statement line holding nothing but ``pass``."""
    return (
        isinstance(node, cst.SimpleStatementLine)
        and len(node.body) == 1
        and isinstance(node.body[0], cst.Pass)
    )


def assign_slot(node: cst.Assign) -> Slot | None:
    """Return the ASSIGN slot targeted by *node*, if it assigns a single sentinel name."""
    if len(node.targets) != 1:
        return None
    target = node.targets[0].target
    if not isinstance(target, cst.Name):
        return None
    return slot_for(SlotKind.ASSIGN, target.value)


def call_slot(node: cst.Call) -> Slot | None:
    """Return the CALL slot invoked by *node*, if its callee is a bare sentinel name."""
    if not isinstance(node.func, cst.Name):
        return None
    return slot_for(SlotKind.CALL, node.func.value)


def string_value(node: cst.SimpleString) -> str | None:
    """Evaluated text of a string literal, or ``None`` for bytes literals."""
    value = node.evaluated_value
    return value if isinstance(value, str) else None


class _SlotScanner(cst.CSTVisitor):
    def __init__(self) -> None:
        self.found: set[Slot] = set()
        self._depth = 0

    def visit_IndentedBlock(self, node: cst.IndentedBlock) -> None:
        self._depth += 1

    def leave_IndentedBlock(self, original_node: cst.IndentedBlock) -> None:
        self._depth -= 1

    def visit_SimpleString(self, node: cst.SimpleString) -> None:
        value = string_value(node)
        if value is not None:
            slot = slot_for(SlotKind.STRING, value)
            if slot is not None:
                self.found.add(slot)

    def visit_Call(self, node: cst.Call) -> None:
        slot = call_slot(node)
        if slot is not None:
            self.found.add(slot)

    def visit_Assign(self, node: cst.Assign) -> None:
        slot = assign_slot(node)
        if slot is not None:
            self.found.add(slot)

    def visit_SimpleStatementLine(self, node: cst.SimpleStatementLine) -> None:
        if self._depth == 1 and is_placeholder(node):
            self.found.add(Slot.PLACEHOLDER)


def find_slots(node: cst.CSTNode) -> set[Slot]:
    """Return every slot whose token occurs under *node*.

    The placeholder only counts as a direct statement of *node*'s body,
    which is where :mod:`~apitestgen.generator.rewriter` splices.
    """
    scanner = _SlotScanner()
    node.visit(scanner)
    return scanner.found


def validate_region(role: RegionRole, node: cst.CSTNode) -> None:
    """Check that *node* carries every slot required for *role*.

    Raises:
        ConfigError: Listing the missing slots and their expected tokens.
    """
    found = find_slots(node)
    missing = [
        slot
        for slot, sentinel in SENTINELS.items()
        if sentinel.required and role in sentinel.roles and slot not in found
    ]
    if missing:
        names = ", ".join(f"{slot.value} ({SENTINELS[slot].token!r})" for slot in missing)
        raise ConfigError(
            f"Template {role.value} skeleton is missing required sentinel(s): {names}"
        )
