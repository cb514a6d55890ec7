import logging
from typing import Dict, List, Tuple

import zipcodes
from haversine import Unit, haversine

from careshare.core.errors import InvalidZipError

logger = logging.getLogger(__name__)


class ZipRadiusService:
    """Find US zip codes within a radius using the bundled zipcodes dataset"""

    def __init__(self):
        self._coordinates: Dict[str, Tuple[float, float]] = {}
        for entry in zipcodes.list_all():
            try:
                self._coordinates[entry["zip_code"]] = (float(entry["lat"]), float(entry["long"]))
            except (KeyError, TypeError, ValueError):
                continue
        logger.info(f"Zip radius index loaded with {len(self._coordinates)} zip codes")

    def lookup(self, zip_code: str) -> Tuple[float, float]:
        try:
            matches = zipcodes.matching(zip_code)
        except (TypeError, ValueError) as e:
            raise InvalidZipError(details=str(e))

        if not matches or matches[0]["zip_code"] not in self._coordinates:
            raise InvalidZipError()
        return self._coordinates[matches[0]["zip_code"]]

    def radius(self, zip_code: str, miles: float) -> List[str]:
        """All known zips whose centroid is within `miles` of `zip_code`, nearest first"""
        origin = self.lookup(zip_code)
        nearby = []
        for candidate, point in self._coordinates.items():
            distance = haversine(origin, point, unit=Unit.MILES)
            if distance <= miles:
                nearby.append((distance, candidate))
        nearby.sort()
        return [candidate for _, candidate in nearby]
