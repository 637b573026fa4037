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
"""Convert ESRI JSON (ArcGIS REST geometry and feature objects) to GeoJSON.

An ESRI object carries no reliable type tag, its kind follows from which
fields are present. :func:`classify` decides that once and :func:`convert`
dispatches on the result. More than one kind can match the same object, the
usual case being a feature wrapper (``geometry``/``attributes``) that also
carries geometry fields of its own. The branches then run in priority order
against one output dict, so later branches win on ``type``.
"""
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Union

from geojsonville.diagnostics import MISSING_ID, NON_STANDARD_CRS, Diagnostics
from geojsonville.rings import HoleAssigner, rings_to_geojson

logger = logging.getLogger(__name__)

STANDARD_WKID = 4326
DEFAULT_ID_ATTRIBUTES = ["OBJECTID", "FID"]


class Kind(Enum):
    """ESRI object kinds, in the order their branches are applied."""
    FEATURE_COLLECTION = "features"
    POINT = "point"
    MULTI_POINT = "points"
    POLYLINE = "paths"
    POLYGON = "rings"
    ENVELOPE = "envelope"
    FEATURE = "feature"


@dataclass
class ConversionResult:
    geojson: dict
    diagnostics: Diagnostics


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _has(esri_json: dict, field: str) -> bool:
    return esri_json.get(field) is not None


def _has_list(esri_json: dict, field: str) -> bool:
    return isinstance(esri_json.get(field), list)


def classify(esri_json: Any) -> List[Kind]:
    """Return every kind the object matches, in dispatch order."""
    if not isinstance(esri_json, dict):
        return []

    kinds = []

    if _has_list(esri_json, "features"):
        kinds.append(Kind.FEATURE_COLLECTION)

    if _is_number(esri_json.get("x")) and _is_number(esri_json.get("y")):
        kinds.append(Kind.POINT)

    if _has_list(esri_json, "points"):
        kinds.append(Kind.MULTI_POINT)

    if _has_list(esri_json, "paths"):
        kinds.append(Kind.POLYLINE)

    if _has_list(esri_json, "rings"):
        kinds.append(Kind.POLYGON)

    if all(_is_number(esri_json.get(field)) for field in ("xmin", "ymin", "xmax", "ymax")):
        kinds.append(Kind.ENVELOPE)

    if _has(esri_json, "geometry") or _has(esri_json, "attributes"):
        kinds.append(Kind.FEATURE)

    return kinds


def get_id(attributes: Any,
           key: Optional[str] = None,
           diagnostics: Optional[Diagnostics] = None) -> Union[str, int, float, None]:
    """Pick the feature id from its attributes.

    Tries ``key`` first when given, then OBJECTID and FID. Only string and
    numeric values qualify. Returns None and records a diagnostic otherwise.
    """
    valid_keys = [key] + DEFAULT_ID_ATTRIBUTES if key else list(DEFAULT_ID_ATTRIBUTES)

    if isinstance(attributes, dict):
        for current_key in valid_keys:
            value = attributes.get(current_key)
            if isinstance(value, str) or _is_number(value):
                return value

    if diagnostics is not None:
        diagnostics.add(MISSING_ID, "No valid id attribute found", valid_keys)
    return None


def _check_spatial_reference(esri_json: dict, diagnostics: Diagnostics) -> None:
    spatial_reference = esri_json.get("spatialReference")
    if not isinstance(spatial_reference, dict):
        return

    wkid = spatial_reference.get("wkid")
    if wkid and wkid != STANDARD_WKID:
        diagnostics.add(NON_STANDARD_CRS,
                        "Object converted in non-standard crs - " + json.dumps(spatial_reference),
                        spatial_reference)


def _convert(esri_json: Any,
             id_attribute: Optional[str],
             assigner: Optional[HoleAssigner],
             diagnostics: Diagnostics) -> dict:
    geojson: dict = {}
    if not isinstance(esri_json, dict):
        return geojson

    for kind in classify(esri_json):
        if kind is Kind.FEATURE_COLLECTION:
            geojson["type"] = "FeatureCollection"
            geojson["features"] = [_convert(feature, id_attribute, assigner, diagnostics)
                                   for feature in esri_json["features"]]

        elif kind is Kind.POINT:
            geojson["type"] = "Point"
            geojson["coordinates"] = [esri_json["x"], esri_json["y"]]
            if _is_number(esri_json.get("z")):
                geojson["coordinates"].append(esri_json["z"])

        elif kind is Kind.MULTI_POINT:
            geojson["type"] = "MultiPoint"
            geojson["coordinates"] = list(esri_json["points"])

        elif kind is Kind.POLYLINE:
            paths = esri_json["paths"]
            if len(paths) == 1:
                geojson["type"] = "LineString"
                geojson["coordinates"] = list(paths[0]) if isinstance(paths[0], list) else []
            else:
                geojson["type"] = "MultiLineString"
                geojson["coordinates"] = list(paths)

        elif kind is Kind.POLYGON:
            # Replaces whatever the earlier branches produced
            geojson = rings_to_geojson(esri_json["rings"], assigner)

        elif kind is Kind.ENVELOPE:
            xmin, ymin = esri_json["xmin"], esri_json["ymin"]
            xmax, ymax = esri_json["xmax"], esri_json["ymax"]
            geojson["type"] = "Polygon"
            geojson["coordinates"] = [[
                [xmax, ymax],
                [xmin, ymax],
                [xmin, ymin],
                [xmax, ymin],
                [xmax, ymax]
            ]]

        elif kind is Kind.FEATURE:
            geometry = esri_json.get("geometry")
            attributes = esri_json.get("attributes")

            geojson["type"] = "Feature"
            geojson["geometry"] = (_convert(geometry, id_attribute, assigner, diagnostics)
                                   if geometry is not None else None)
            geojson["properties"] = dict(attributes) if isinstance(attributes, dict) else None
            if attributes is not None:
                feature_id = get_id(attributes, id_attribute, diagnostics)
                if feature_id is not None:
                    geojson["id"] = feature_id

    # Geometry-less features
    if geojson.get("geometry") == {}:
        geojson["geometry"] = None

    _check_spatial_reference(esri_json, diagnostics)

    return geojson


def convert(esri_json: Any,
            id_attribute: Optional[str] = None,
            assigner: Optional[HoleAssigner] = None) -> ConversionResult:
    """Convert one parsed ESRI JSON object.

    Args:
        esri_json (Any): Parsed ESRI JSON, a geometry, a feature or a feature set.
        id_attribute (str, optional): Attribute to use as feature id before OBJECTID and FID.
        assigner (HoleAssigner, optional): Hole assignment strategy for polygons.

    Returns:
        ConversionResult: The GeoJSON dict and the diagnostics raised while building it.
    """
    diagnostics = Diagnostics()
    geojson = _convert(esri_json, id_attribute, assigner, diagnostics)
    return ConversionResult(geojson, diagnostics)


def esri_to_geojson(esri_json: Any, id_attribute: Optional[str] = None) -> dict:
    """Convert ESRI JSON to GeoJSON, logging any diagnostics as warnings."""
    result = convert(esri_json, id_attribute)
    result.diagnostics.log(logger)
    return result.geojson
