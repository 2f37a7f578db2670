#!/usr/bin/env python3

"""DWARF location expression evaluation.

Expressions are decoded with pyelftools' DWARFExprParser and reduced on a
small stack machine. Only operations that can be computed offline are
supported: there is no memory, no register file and no frame base, so
anything that would read one is reported as UnsupportedAttributeShape.

Two uses matter here:
- DW_AT_data_member_location, evaluated with 0 pushed first, usually
  ``DW_OP_plus_uconst n`` and yielding a plain ADDRESS of n.
- DW_AT_location of a global, usually ``DW_OP_addr a`` and yielding a
  RELOCATED_ADDRESS. Addresses are taken as written in the object file; no
  relocation is applied.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from elftools.common.exceptions import DWARFError, ELFError
from elftools.construct.core import ConstructError
from elftools.dwarf.dwarf_expr import DWARFExprOp, DWARFExprParser
from elftools.dwarf.structs import DWARFStructs

from ...errors import UnsupportedAttributeShape

_LITERAL_OP = re.compile(r"^DW_OP_lit(\d+)$")
_REGISTER_OP = re.compile(r"^DW_OP_reg(\d+)$")
_CONSTANT_OPS = frozenset(
    {
        "DW_OP_const1u",
        "DW_OP_const1s",
        "DW_OP_const2u",
        "DW_OP_const2s",
        "DW_OP_const4u",
        "DW_OP_const4s",
        "DW_OP_const8u",
        "DW_OP_const8s",
        "DW_OP_constu",
        "DW_OP_consts",
    }
)


class LocationKind(Enum):
    """What an evaluated expression describes."""

    ADDRESS = "address"
    RELOCATED_ADDRESS = "relocated_address"
    REGISTER = "register"
    IMPLICIT_VALUE = "implicit_value"
    STACK_VALUE = "stack_value"


@dataclass(frozen=True)
class Location:
    """Result of an evaluation. ``value`` is an address, register number or literal."""

    kind: LocationKind
    value: int


class LocationEvaluator:
    """Evaluates location expressions for one unit encoding."""

    def __init__(self, structs: DWARFStructs):
        self.address_size: int = structs.address_size
        self._bits = 8 * self.address_size
        self._mask = (1 << self._bits) - 1
        self._parser = DWARFExprParser(structs)

    @classmethod
    def for_encoding(
        cls, address_size: int = 4, little_endian: bool = True, dwarf_version: int = 4
    ) -> "LocationEvaluator":
        """Build an evaluator without a parsed unit at hand."""
        structs = DWARFStructs(
            little_endian=little_endian,
            dwarf_format=32,
            address_size=address_size,
            dwarf_version=dwarf_version,
        )
        return cls(structs)

    def decode(self, expression: bytes | list[int]) -> list[DWARFExprOp]:
        """Split an encoded expression into operations."""
        try:
            return list(self._parser.parse_expr(list(expression)))
        except (DWARFError, ELFError, ConstructError, KeyError, IndexError, ValueError) as e:
            raise UnsupportedAttributeShape(f"Cannot decode expression {list(expression)}: {e}") from e

    def evaluate(self, expression: bytes | list[int], initial_value: int | None = None) -> Location:
        """Reduce an expression to a Location.

        Args:
            expression: Encoded expression bytes
            initial_value: Pushed before the first operation (0 for member offsets)

        Raises:
            UnsupportedAttributeShape: for operations that need runtime state,
                composite locations, or a malformed stack
        """
        ops = self.decode(expression)
        stack: list[int] = [] if initial_value is None else [initial_value & self._mask]
        relocated = False

        for index, op in enumerate(ops):
            name = op.op_name
            last = index == len(ops) - 1

            if name == "DW_OP_addr":
                relocated = True
                stack.append(int(op.args[0]) & self._mask)
                continue

            terminal = self._terminal_location(op, stack)
            if terminal is not None:
                if not last:
                    raise UnsupportedAttributeShape(
                        f"{name} followed by further operations (composite location)"
                    )
                return terminal

            try:
                self._apply(name, op.args, stack)
            except IndexError as e:
                raise UnsupportedAttributeShape(f"Stack underflow at {name}") from e
            except ZeroDivisionError as e:
                raise UnsupportedAttributeShape(f"Division by zero at {name}") from e

        if not stack:
            raise UnsupportedAttributeShape("Expression leaves an empty stack")

        kind = LocationKind.RELOCATED_ADDRESS if relocated else LocationKind.ADDRESS
        return Location(kind, stack[-1])

    def _terminal_location(self, op: DWARFExprOp, stack: list[int]) -> Location | None:
        name = op.op_name
        match = _REGISTER_OP.match(name)
        if match:
            return Location(LocationKind.REGISTER, int(match.group(1)))
        if name == "DW_OP_regx":
            return Location(LocationKind.REGISTER, int(op.args[0]))
        if name == "DW_OP_implicit_value":
            return Location(LocationKind.IMPLICIT_VALUE, self._block_value(op.args[-1]))
        if name == "DW_OP_stack_value":
            if not stack:
                raise UnsupportedAttributeShape("DW_OP_stack_value on an empty stack")
            return Location(LocationKind.STACK_VALUE, stack[-1])
        return None

    @staticmethod
    def _block_value(block: Any) -> int:
        if isinstance(block, int):
            return block
        return int.from_bytes(bytes(block), "little")

    def to_signed(self, value: int) -> int:
        if value & (1 << (self._bits - 1)):
            return value - (1 << self._bits)
        return value

    def _apply(self, name: str, args: list[Any], stack: list[int]) -> None:
        mask = self._mask

        match = _LITERAL_OP.match(name)
        if match:
            stack.append(int(match.group(1)))
        elif name in _CONSTANT_OPS:
            stack.append(int(args[0]) & mask)
        elif name == "DW_OP_nop":
            pass
        elif name == "DW_OP_dup":
            stack.append(stack[-1])
        elif name == "DW_OP_drop":
            stack.pop()
        elif name == "DW_OP_over":
            stack.append(stack[-2])
        elif name == "DW_OP_pick":
            stack.append(stack[-1 - int(args[0])])
        elif name == "DW_OP_swap":
            stack[-1], stack[-2] = stack[-2], stack[-1]
        elif name == "DW_OP_rot":
            stack[-1], stack[-2], stack[-3] = stack[-2], stack[-3], stack[-1]
        elif name == "DW_OP_plus_uconst":
            stack.append((stack.pop() + int(args[0])) & mask)
        elif name == "DW_OP_neg":
            stack.append(-self.to_signed(stack.pop()) & mask)
        elif name == "DW_OP_not":
            stack.append(~stack.pop() & mask)
        elif name == "DW_OP_abs":
            stack.append(abs(self.to_signed(stack.pop())) & mask)
        elif name in _BINARY_OPS:
            rhs = stack.pop()
            lhs = stack.pop()
            stack.append(_BINARY_OPS[name](self, lhs, rhs) & mask)
        else:
            raise UnsupportedAttributeShape(f"Operation {name} cannot be evaluated offline")


def _div(evaluator: LocationEvaluator, lhs: int, rhs: int) -> int:
    # DWARF division is signed and truncates toward zero
    a, b = evaluator.to_signed(lhs), evaluator.to_signed(rhs)
    quotient = abs(a) // abs(b)
    return quotient if (a < 0) == (b < 0) else -quotient


def _shra(evaluator: LocationEvaluator, lhs: int, rhs: int) -> int:
    return evaluator.to_signed(lhs) >> rhs


_BINARY_OPS = {
    "DW_OP_plus": lambda ev, a, b: a + b,
    "DW_OP_minus": lambda ev, a, b: a - b,
    "DW_OP_mul": lambda ev, a, b: a * b,
    "DW_OP_div": _div,
    "DW_OP_mod": lambda ev, a, b: a % b,
    "DW_OP_and": lambda ev, a, b: a & b,
    "DW_OP_or": lambda ev, a, b: a | b,
    "DW_OP_xor": lambda ev, a, b: a ^ b,
    "DW_OP_shl": lambda ev, a, b: a << b if b < ev.address_size * 8 else 0,
    "DW_OP_shr": lambda ev, a, b: a >> b,
    "DW_OP_shra": _shra,
}
