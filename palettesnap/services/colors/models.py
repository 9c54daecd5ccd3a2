"""
Result containers shared by the quantizer strategies.
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class ColorCount:
    """One palette color and how many sampled pixels it represents."""
    hex: str
    count: int


@dataclass
class PaletteResult:
    """Output of one quantization run."""
    strategy: str
    entries: List[ColorCount] = field(default_factory=list)
    pixel_count: int = 0
    requested_colors: Optional[int] = None
    iterations: int = 0
    converged: bool = True

    @property
    def colors(self) -> List[str]:
        """Hex strings in result order."""
        return [entry.hex for entry in self.entries]

    @property
    def is_empty(self) -> bool:
        """True when no pixels survived filtering."""
        return self.pixel_count == 0

    @property
    def is_degenerate(self) -> bool:
        """True when fewer colors were produced than requested."""
        if self.requested_colors is None or self.is_empty:
            return False
        return len(self.entries) < self.requested_colors

    def palette(self, k: Optional[int] = None) -> List[str]:
        """First ``k`` hex colors, or all of them when k is None."""
        if k is None:
            return self.colors
        return self.colors[:max(0, k)]

