"""Checks for values entered through an editing interface."""

import re
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class InputValidator:
    """Validate text against a pattern and, optionally, a numeric range.

    When a range is given the text must also be a number (a comma is
    accepted as decimal separator) within ``[minimum, maximum]``.
    """

    pattern: str
    minimum: Optional[float] = None
    maximum: Optional[float] = None

    @property
    def numeric(self) -> bool:
        return self.minimum is not None or self.maximum is not None

    def validate(self, text: Optional[str]) -> bool:
        if text is None or not re.fullmatch(self.pattern, text):
            return False
        if not self.numeric:
            return True
        try:
            value = float(text.replace(",", "."))
        except ValueError:
            return False
        if self.minimum is not None and value < self.minimum:
            return False
        if self.maximum is not None and value > self.maximum:
            return False
        return True

    def parse(self, text: str) -> float:
        """Return the numeric value of ``text``.

        Raises
        ------
        ValueError
            If the text does not validate.
        """
        if not self.validate(text):
            raise ValueError(f"Invalid value {text!r}")
        return float(text.replace(",", "."))


NAME_VALIDATOR = InputValidator(r"[a-zA-Z_][a-zA-Z_0-9]*")
"""Acceptable Link names."""

MAX_SPEED_VALIDATOR = InputValidator(r"[.,0-9].*", 5, 200)
"""Acceptable speed limits in km/h."""
