#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Project configuration file.
This file contains the default settings for the package, like the logging
format, the geometry engine defaults and the export defaults.
"""

# %% === Default parameters and configurations
# Name of the geometry engine used when none is explicitly set.
# This is used by vectortools.engine.get_engine() on first access.
DEFAULT_ENGINE_NAME = 'shapely'

# Engine configuration
# This dictionary contains the defaults used by the geometry wrappers when the
# caller does not provide a value.
ENGINE_CONFIG = {
    'engine': DEFAULT_ENGINE_NAME,
    'buffer_quad_segments': 30,
    'wkb_byte_order': 'xdr',
    'gml_format': 'GML2',
    'srs_wkt_version': 'WKT1_GDAL',
    'transform_always_xy': True,
}

# Messages of the engine that identify a malformed topology.
# Errors carrying one of these markers are raised as TopologyError.
TOPOLOGY_ERROR_MARKERS = [
    'IllegalArgumentException',
    'TopologyException'
]

# Namespaces used when reading GML fragments without declarations
GML_NAMESPACES = {
    'gml': 'http://www.opengis.net/gml'
}

# Logging configuration
# This dictionary contains default settings for logging.
LOG_CONFIG = {
    'level': 'INFO',
    'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    'date_format': '%Y-%m-%d %H:%M:%S',
}
