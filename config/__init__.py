#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Installation file for package config.
"""

from .default_params import (
    DEFAULT_ENGINE_NAME,
    ENGINE_CONFIG,
    TOPOLOGY_ERROR_MARKERS,
    GML_NAMESPACES,
    LOG_CONFIG
)

__all__ = [
    'DEFAULT_ENGINE_NAME',
    'ENGINE_CONFIG',
    'TOPOLOGY_ERROR_MARKERS',
    'GML_NAMESPACES',
    'LOG_CONFIG'
]
