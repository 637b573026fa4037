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
import logging
import os
import traceback
from typing import Any, Optional, Tuple, Union

import requests
from flask import Blueprint, abort, jsonify, request

from geojsonville.diagnostics import Diagnostics
from geojsonville.esri_to_geojson import convert

agol_to_geojson = Blueprint('agol_to_geojson', __name__)

logger = logging.getLogger(__name__)

DEFAULT_PORTAL_URL = 'https://www.arcgis.com'
DEFAULT_BATCH_SIZE = 1000
REQUEST_TIMEOUT = 60


class FetchError(RuntimeError):
    """Raised when the ArcGIS REST API does not return usable feature data."""


def get_token(portal_url: Optional[str] = None) -> Union[str, None]:
    """Authenticate with ArcGIS and return a token using client credentials.

    Returns None when no client credentials are configured, which is fine for
    public services.
    """
    client_id = os.getenv('ARCGIS_CLIENT_ID')
    client_secret = os.getenv('ARCGIS_CLIENT_SECRET')
    if not client_id or not client_secret:
        return None

    portal_url = portal_url or os.getenv('ARCGIS_PORTAL_URL', DEFAULT_PORTAL_URL)
    url = f"{portal_url}/sharing/rest/oauth2/token/"
    data = {
        'f': 'json',
        'client_id': client_id,
        'client_secret': client_secret,
        'grant_type': 'client_credentials'
    }
    response = requests.post(url, data=data, timeout=REQUEST_TIMEOUT)
    response_json = response.json()
    if 'error' in response_json:
        logger.error("Error obtaining token: %s", response_json['error'])
        return None
    return response_json.get("access_token")


def fetch_features(url: str, start: int, count: int, token: Optional[str] = None) -> dict:
    """Fetch one page of features from the ArcGIS REST API.

    Args:
        url (str): Url of the layer, without the trailing /query.
        start (int): offset to start fetching data from.
        count (int): number of records to fetch.
        token (str, optional): ArcGIS token for secured services.

    Raises:
        FetchError: The service answered with an HTTP or ArcGIS error.

    Returns:
        dict: The ESRI JSON feature set.
    """
    params = {
        'f': 'json',
        'where': '1=1',  # A condition that's always true
        'outFields': '*',  # Fetch all fields
        'resultOffset': start,
        'resultRecordCount': count
    }
    if token:
        params['token'] = token

    response = requests.get(f"{url.rstrip('/')}/query", params=params, timeout=REQUEST_TIMEOUT)
    if response.status_code != 200:
        raise FetchError(f"Failed to fetch data from {url}. {response.text}")

    esri_json = response.json()
    if 'error' in esri_json:
        raise FetchError(f"Failed to fetch data from {url}. {esri_json['error']}")

    return esri_json


def download_geojson(url: str,
                     batch_size: int = DEFAULT_BATCH_SIZE,
                     id_attribute: Optional[str] = None,
                     token: Optional[str] = None) -> Tuple[dict, Diagnostics]:
    """Page through a layer and convert every batch into one FeatureCollection.

    Returns:
        tuple[dict, Diagnostics]: The merged FeatureCollection and all diagnostics.
    """
    geojson = {
        "type": "FeatureCollection",
        "features": []
    }
    diagnostics = Diagnostics()

    start = 0
    while True:
        esri_json = fetch_features(url, start, batch_size, token)
        if not esri_json.get('features'):
            logger.debug("No more data.")
            break

        logger.info("Processing batch from offset %s, size %s.", start, batch_size)

        result = convert(esri_json, id_attribute)
        diagnostics.extend(result.diagnostics)

        processed_features = len(result.geojson.get('features', []))
        geojson['features'].extend(result.geojson.get('features', []))
        logger.debug("Processed %d features in current batch.", processed_features)

        start += processed_features

        if processed_features < batch_size:
            logger.debug("Last batch processed, terminating loop.")
            break

    logger.info("Total features converted: %d", len(geojson['features']))
    return geojson, diagnostics


def _get_args() -> Any:
    return request.args if request.method == 'GET' else request.values


@agol_to_geojson.route('/esri2geojson', methods=['POST'])
def convert_esri_json():
    """Convert the ESRI JSON posted in the request body."""
    esri_json = request.get_json(silent=True)
    if esri_json is None:
        abort(400, 'Request body must be ESRI JSON')

    result = convert(esri_json, request.args.get('id_attribute'))
    result.diagnostics.log(logger)

    return jsonify(result.geojson)


@agol_to_geojson.route('/agol2geojson', methods=['GET', 'POST'])
def run_agol_to_geojson():
    """Download a feature layer and return it as a GeoJSON FeatureCollection."""
    args = _get_args()

    if args.get('loglevel', 'info') == 'debug':
        logger.setLevel(logging.DEBUG)

    url = args.get('url')
    if not url:
        abort(400, 'Missing required parameter (url)')

    try:
        batch_size = int(args.get('batch', DEFAULT_BATCH_SIZE))
    except ValueError:
        abort(400, 'Parameter batch must be an integer')
    if batch_size < 1:
        abort(400, 'Parameter batch must be positive')

    try:
        geojson, diagnostics = download_geojson(
            url,
            batch_size=batch_size,
            id_attribute=args.get('id_attribute'),
            token=get_token())
    except (FetchError, requests.exceptions.RequestException) as e:
        logger.error("An error occurred: %s", e)
        logger.error(traceback.format_exc())
        abort(502, f"Failed to download features: {e}")

    diagnostics.log(logger, prefix=url)
    return jsonify(geojson)
