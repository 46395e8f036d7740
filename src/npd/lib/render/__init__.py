"""Console rendering for npd events."""

from npd.lib.render.standard import StandardRenderer
from npd.lib.render.writer import OutputWriter, strip_color

__all__ = ["OutputWriter", "StandardRenderer", "strip_color"]
