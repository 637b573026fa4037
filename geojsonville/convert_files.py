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
"""Convert a directory of ESRI JSON files to GeoJSON.

Usage:
    python -m geojsonville.convert_files --input ./input --output ./output
"""
import argparse
import json
import logging
import os
import sys

from geojsonville.esri_to_geojson import convert

LOG_LEVELS = {
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'warning': logging.WARNING
}


# Apply the flush handler to ensure immediate output
class FlushHandler(logging.StreamHandler):
    def emit(self, record):
        super().emit(record)
        self.flush()


def configure_logging(loglevel='info'):
    logging.basicConfig(
        level=LOG_LEVELS.get(loglevel, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )
    logging.getLogger().handlers = [FlushHandler(sys.stdout)]
    logging.getLogger().setLevel(LOG_LEVELS.get(loglevel, logging.INFO))


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Convert ESRI JSON files to GeoJSON.')
    parser.add_argument('--input', default='./input', help='Directory holding the ESRI JSON files')
    parser.add_argument('--output', default='./output', help='Directory to write the GeoJSON files to')
    parser.add_argument('--id_attribute', default=None, help='Attribute used as feature id before OBJECTID and FID')
    parser.add_argument('--loglevel', choices=list(LOG_LEVELS), default='info', help='Logging level')
    return parser.parse_args(argv)


def validate_directory(path):
    """Create the directory if it does not exist yet and return its path."""
    os.makedirs(path, exist_ok=True)
    return path


def save_geojson_file(geojson, output_path, file_name):
    target = os.path.join(output_path, file_name)
    with open(target, 'w', encoding='utf-8') as f:
        json.dump(geojson, f, ensure_ascii=False)
    return target


def convert_file(input_path, output_path, file_name, id_attribute=None):
    """Convert one ESRI JSON file and write the result under the same name.

    Returns:
        str: Path of the written GeoJSON file.
    """
    with open(os.path.join(input_path, file_name), 'r', encoding='utf-8') as f:
        esri_json = json.load(f)

    result = convert(esri_json, id_attribute)
    result.diagnostics.log(logging.getLogger(__name__), prefix=file_name)

    return save_geojson_file(result.geojson, output_path, file_name)


def convert_files(input_path, output_path, id_attribute=None):
    """Convert every .json file in input_path.

    Files that fail to read, parse or convert are logged and skipped.

    Returns:
        tuple[list[str], list[str]]: Converted and failed file names.
    """
    validate_directory(input_path)
    validate_directory(output_path)

    converted = []
    failed = []

    file_names = sorted(name for name in os.listdir(input_path)
                        if name.lower().endswith('.json') and os.path.isfile(os.path.join(input_path, name)))
    logging.info("Found %d ESRI JSON files in %s", len(file_names), input_path)

    for file_name in file_names:
        try:
            target = convert_file(input_path, output_path, file_name, id_attribute)
            logging.debug("Wrote %s", target)
            converted.append(file_name)
        except Exception as e:
            logging.error("Failed to convert %s: %s", file_name, e, exc_info=True)
            failed.append(file_name)

    logging.info("Converted %d files, %d failed", len(converted), len(failed))
    return converted, failed


def main(argv=None):
    args = parse_args(argv)
    configure_logging(args.loglevel)

    _, failed = convert_files(args.input, args.output, args.id_attribute)
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
