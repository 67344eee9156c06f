"""
Global configuration settings for roiclust.
"""

from __future__ import annotations

__all__ = ["get_explicit_zeros", "set_explicit_zeros", "use_explicit_zeros"]

from typing import Any, Literal, TypeAlias, get_args

ExplicitZeros: TypeAlias = Literal["edge", "absent"]

### GLOBALS ###

_explicit_zeros: ExplicitZeros = "edge"

### CONSTS ###

DEFAULT_EXPLICIT_ZEROS: ExplicitZeros = "edge"

### FUNCS ###


def set_explicit_zeros(policy: ExplicitZeros | None) -> None:
    """
    Sets how structurally stored zeros in a sparse distance matrix are treated.

    Parameters
    ----------
    policy : {"edge", "absent"} or None
        With "edge", a stored zero is a candidate merge at distance zero. With
        "absent", a stored zero is dropped as if it were not stored at all.
        None restores the default ("edge").

    Raises
    ------
    ValueError
        If `policy` is not one of the supported values.

    Notes
    -----
    Dense inputs cannot store zeros explicitly, so zero entries of a dense
    matrix are always absent regardless of this setting.
    """
    if policy is not None and policy not in get_args(ExplicitZeros):
        raise ValueError(f"Explicit zeros policy must be one of {get_args(ExplicitZeros)}; got {policy!r}.")
    global _explicit_zeros
    _explicit_zeros = DEFAULT_EXPLICIT_ZEROS if policy is None else policy


def get_explicit_zeros() -> ExplicitZeros:
    """
    Returns how structurally stored zeros in a sparse distance matrix are treated.

    Returns
    -------
    {"edge", "absent"}
    """
    global _explicit_zeros
    return _explicit_zeros


class ExplicitZerosContextManager:
    def __init__(self, policy: ExplicitZeros) -> None:
        self._policy = policy

    def __enter__(self) -> None:
        global _explicit_zeros
        self._old = _explicit_zeros
        set_explicit_zeros(self._policy)

    def __exit__(self, *args: tuple[Any, ...]) -> None:
        global _explicit_zeros
        _explicit_zeros = self._old


def use_explicit_zeros(policy: ExplicitZeros) -> ExplicitZerosContextManager:
    return ExplicitZerosContextManager(policy)
