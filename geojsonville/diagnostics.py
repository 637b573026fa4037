# This file is part of GeoJSONville, an ArcGIS to GeoJSON conversion toolkit.
# Copyright (C) 2024  GEOACE

# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.

# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

# You can contact the developer via email or using the contact form provided at https://geoace.net
"""Non-fatal findings collected while converting ESRI JSON.

The converter never raises on odd input. Anything worth telling the caller
about ends up here, and the caller decides whether to log, keep or drop it.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Iterator, List

NON_STANDARD_CRS = "non_standard_crs"
MISSING_ID = "missing_id"


@dataclass(frozen=True)
class Diagnostic:
    code: str
    message: str
    detail: Any = None


@dataclass
class Diagnostics:
    """Ordered collection of diagnostics for one conversion call."""

    items: List[Diagnostic] = field(default_factory=list)

    def add(self, code: str, message: str, detail: Any = None) -> Diagnostic:
        diagnostic = Diagnostic(code, message, detail)
        self.items.append(diagnostic)
        return diagnostic

    def extend(self, other: "Diagnostics") -> None:
        self.items.extend(other.items)

    def codes(self) -> List[str]:
        return [diagnostic.code for diagnostic in self.items]

    def log(self, logger: logging.Logger, prefix: str = "") -> None:
        """Write every diagnostic to the given logger at WARNING level."""
        for diagnostic in self.items:
            if prefix:
                logger.warning("%s: %s", prefix, diagnostic.message)
            else:
                logger.warning("%s", diagnostic.message)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __bool__(self) -> bool:
        return bool(self.items)
