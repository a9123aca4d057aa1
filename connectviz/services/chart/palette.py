"""Deterministic color swatches for chart series."""

from collections.abc import Sequence

from connectviz.config.constants import DEFAULT_COLOR_PALETTE


def get_swatch(
    colors: Sequence[str] | None = None,
    size: int | None = None,
    *,
    default: Sequence[str] | None = None,
) -> list[str]:
    """Return the ordered colors for a chart.

    Explicit ``colors`` win over ``default`` (the settings palette), which wins
    over the built-in palette. With ``size`` the swatch wraps around instead of
    running out: series 11 and 12 of a ten-color palette reuse colors 1 and 2.
    """
    base = list(colors or default or DEFAULT_COLOR_PALETTE)
    if size is None:
        return base
    return [base[i % len(base)] for i in range(size)]


def color_for_series(index: int, swatch: Sequence[str]) -> str:
    """Color of the series at ``index``, wrapping around ``swatch``."""
    if index < 0:
        index = 0
    return swatch[index % len(swatch)]
