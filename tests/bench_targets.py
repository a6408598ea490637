"""Importable workloads for resolving ``module:callable`` bench targets."""

from __future__ import annotations

items: list[int] = []
setup_calls = 0

NOT_CALLABLE = 42


def noop() -> None:
    return None


def prepare() -> None:
    global setup_calls
    setup_calls += 1
    items.clear()


def append_item() -> None:
    items.append(1)
    assert len(items) == 1, "clean did not run before this iteration"


def clear_items() -> None:
    items.clear()


def divide_by_zero() -> float:
    return 1 / 0


class Workloads:
    @staticmethod
    def sort_small() -> list[int]:
        return sorted(range(100, 0, -1))
