"""Elementary row and column operations.

Each operation is a small frozen dataclass. Row operations act on the
left (``E @ A``), column operations on the right (``A @ E``):

* ``AddRow(src, dst, mult)``: row ``dst`` += ``mult`` * row ``src``.
* ``ScaleRow(row, factor)``: row ``row`` *= ``factor`` (a unit).
* ``SwapRows(a, b)``: exchange rows ``a`` and ``b``.

``AddCol``, ``ScaleCol`` and ``SwapCols`` are the column duals. Every
operation knows its inverse, its determinant and its transpose, which is
all the elimination result needs to replay a log.
"""

from dataclasses import dataclass
from typing import Any, Union

from .exceptions import ContractViolationError
from .ring import Ring


@dataclass(frozen=True)
class AddRow:
    src: int
    dst: int
    mult: Any

    is_row_operation = True

    def inverse(self, ring: Ring) -> "AddRow":
        return AddRow(self.src, self.dst, ring.neg(self.mult))

    def transposed(self) -> "AddCol":
        return AddCol(self.src, self.dst, self.mult)

    def determinant(self, ring: Ring):
        return ring.one


@dataclass(frozen=True)
class ScaleRow:
    row: int
    factor: Any

    is_row_operation = True

    def inverse(self, ring: Ring) -> "ScaleRow":
        return ScaleRow(self.row, _unit_inverse(ring, self.factor))

    def transposed(self) -> "ScaleCol":
        return ScaleCol(self.row, self.factor)

    def determinant(self, ring: Ring):
        return self.factor


@dataclass(frozen=True)
class SwapRows:
    a: int
    b: int

    is_row_operation = True

    def inverse(self, ring: Ring) -> "SwapRows":
        return self

    def transposed(self) -> "SwapCols":
        return SwapCols(self.a, self.b)

    def determinant(self, ring: Ring):
        return ring.neg(ring.one)


@dataclass(frozen=True)
class AddCol:
    src: int
    dst: int
    mult: Any

    is_row_operation = False

    def inverse(self, ring: Ring) -> "AddCol":
        return AddCol(self.src, self.dst, ring.neg(self.mult))

    def transposed(self) -> AddRow:
        return AddRow(self.src, self.dst, self.mult)

    def determinant(self, ring: Ring):
        return ring.one


@dataclass(frozen=True)
class ScaleCol:
    col: int
    factor: Any

    is_row_operation = False

    def inverse(self, ring: Ring) -> "ScaleCol":
        return ScaleCol(self.col, _unit_inverse(ring, self.factor))

    def transposed(self) -> ScaleRow:
        return ScaleRow(self.col, self.factor)

    def determinant(self, ring: Ring):
        return self.factor


@dataclass(frozen=True)
class SwapCols:
    a: int
    b: int

    is_row_operation = False

    def inverse(self, ring: Ring) -> "SwapCols":
        return self

    def transposed(self) -> SwapRows:
        return SwapRows(self.a, self.b)

    def determinant(self, ring: Ring):
        return ring.neg(ring.one)


RowOperation = Union[AddRow, ScaleRow, SwapRows]
ColOperation = Union[AddCol, ScaleCol, SwapCols]
ElementaryOperation = Union[RowOperation, ColOperation]


def _unit_inverse(ring: Ring, factor):
    inv = ring.inverse(factor)
    if inv is None:
        raise ContractViolationError(f"scale factor {factor} is not a unit of {ring}")
    return inv
