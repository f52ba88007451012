"""Longitudinal road markers.

A RoadMarkerAlong is a stripe that runs along a CrossSectionElement at
a fixed lateral position, measured in metres from the left edge of
that element.  Its type token (for example ``|`` for a solid edge
line or ``:`` for a dashed lane line) selects a template that supplies
the stripe width.  Lanes are synthesized between consecutive markers.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import numpy as np

from .alignment import offset_alignment
from .typology import MarkerTemplateRegistry
from .errors import ConfigurationError


@dataclass(eq=False)
class RoadMarkerAlong:
    """A longitudinal marking at a lateral position within its element."""

    marker_type: str
    lateral_position: float
    width: float = float("nan")
    """Stripe width in metres, set by :meth:`bind_template`."""

    lateral_offset: Optional[float] = None
    """Offset from the design line (positive left), set with the vertices."""

    vertices: np.ndarray = field(default_factory=lambda: np.zeros((0, 3)), repr=False)

    def bind_template(self, templates: MarkerTemplateRegistry) -> None:
        """Resolve the stripe width from the template with the same type.

        Raises
        ------
        ConfigurationError
            If no template has this type or the width stays unset.
        """
        template = templates.lookup(self.marker_type)
        if template is None:
            raise ConfigurationError(f"No road marker template for roadMarkerAlong type \"{self.marker_type}\"")
        self.width = template.width
        if self.width is None or math.isnan(self.width):
            raise ConfigurationError(f"Road marker template \"{self.marker_type}\" leaves the width unset")

    def create_vertices(self, reference: np.ndarray, element_left_offset: float) -> None:
        """Lay the marker along the reference line of its CrossSection.

        Parameters
        ----------
        reference : numpy.ndarray
            Stretch of the Link's roadway line covered by the
            CrossSection, shape (N, 3).
        element_left_offset : float
            Lateral offset of the owning element's left edge.
        """
        self.lateral_offset = element_left_offset - self.lateral_position
        self.vertices = offset_alignment(reference, self.lateral_offset)

    def to_record(self) -> Dict[str, Any]:
        return {"type": self.marker_type, "lateralPosition": self.lateral_position}

    def __repr__(self) -> str:
        return f"RoadMarkerAlong({self.marker_type!r}, {self.lateral_position}, width={self.width})"
