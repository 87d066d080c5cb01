"""Fatal error conditions raised while loading, modelling and rendering."""

from __future__ import annotations


class ChartError(ValueError):
    """Base class for every condition that aborts a chart run."""


class MalformedRecord(ChartError):
    def __init__(self, lineno: int, field: str, reason: str) -> None:
        self.lineno = lineno
        self.field = field
        self.reason = reason
        super().__init__(f"line {lineno}: bad {field!r}: {reason}")


class PaletteExhausted(ChartError):
    def __init__(self, variants: list[str], palette_size: int) -> None:
        self.variants = variants
        self.palette_size = palette_size
        super().__init__(
            f"{len(variants)} variants ({', '.join(variants)}) "
            f"but only {palette_size} palette colors"
        )


class EmptyInput(ChartError):
    """No group survived loading and filtering."""


class NoData(ChartError):
    """Groups exist but there is no positive bar value to scale against."""


class DegenerateLayout(ChartError):
    def __init__(self, width: float, height: float) -> None:
        self.width = width
        self.height = height
        super().__init__(
            f"canvas too small: available graph area is {width:g} x {height:g}"
        )


class UnsupportedFormat(ChartError):
    def __init__(self, path: object, supported: list[str]) -> None:
        self.path = path
        self.supported = supported
        super().__init__(
            f"cannot write {str(path)!r}: image format not one of {', '.join(supported)}"
        )
