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
import sys

from flask import Flask, abort, render_template, request

from geojsonville.agol_to_geojson import agol_to_geojson

# Configure logging to output to stdout immediately
logging.basicConfig(
    level=logging.DEBUG,  # Adjust the log level as needed
    format="%(asctime)s [%(levelname)s] %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)]
)

# Ensure real-time flushing


class FlushHandler(logging.StreamHandler):
    def emit(self, record):
        super().emit(record)
        self.flush()


# Apply the flush handler to the root logger
logging.getLogger().handlers = [FlushHandler(sys.stdout)]

API_KEY = os.getenv('API_KEY')
if not API_KEY:
    logging.error('API_KEY not set in environment variables')
    sys.exit(1)

app = Flask(__name__)
app.register_blueprint(agol_to_geojson)


@app.before_request
def validate_api_key():
    """ Validate that the API key in the request arguments matches the expected API key. """
    api_key = request.args.get(
        'api_key') if request.method == 'GET' else request.values.get('api_key')

    if api_key != API_KEY:
        logging.debug("Rejected request with invalid API key")
        abort(403)


@app.route('/')
def home():
    return render_template("index.html")


if __name__ == '__main__':
    app.run(host='0.0.0.0', port=8080)
