"""
Exception hierarchy for ringelim.

Only contract violations are exceptions. Mathematical non-results such as a
singular matrix or an unsolvable system are reported as ``None`` by the
result objects.
"""


class RingElimError(Exception):
    """Base exception for all ringelim errors."""
    pass


class ContractViolationError(RingElimError):
    """
    A caller broke the contract of an operation.

    Raised before any state is mutated, so no partially eliminated
    matrix is ever observable.
    """
    pass


class DimensionError(ContractViolationError, ValueError):
    """
    Matrix or vector sizes are inconsistent.

    Raised on mismatched shapes, duplicated sparse positions, or
    square-only quantities requested for rectangular input.
    """
    pass


class IndexOutOfRangeError(ContractViolationError, IndexError):
    """A row or column index lies outside the matrix."""
    pass


class UnsupportedRingError(ContractViolationError, TypeError):
    """
    The ring lacks an operation the computation needs.

    Raised e.g. when a normal form is requested over a ring that is not
    Euclidean.
    """
    pass


class FormError(ContractViolationError, ValueError):
    """
    A derived quantity is not defined for the computed normal form.

    Kernel, image, determinant and solutions are read off a diagonal
    form; asking for them from an echelon result raises this.
    """
    pass
