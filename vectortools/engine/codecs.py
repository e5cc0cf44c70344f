"""
Text codecs used by the engine: WKT writer, GML reader and writer, KML
writer, GeoJSON mapping helpers.

WKT and WKB parsing, as well as GeoJSON parsing, are left to shapely; the
writers here work directly on geometry handles so that linear rings, 25D flags
and empty parts are written exactly as the handle stores them.
"""

# %% === Import necessary modules
import re
import xml.etree.ElementTree as ET  # nosec B405 - parsing geometry fragments passed by the caller

from config.default_params import GML_NAMESPACES
from .geometry_types import GeometryType, geometry_name
from .handles import GeometryHandle, is_empty_handle, set_3d, has_3d_parts

_XML_DECLARATION = re.compile(r'^\s*<\?xml[^>]*\?>')

_CURVE_TYPES = (GeometryType.POINT, GeometryType.LINE_STRING, GeometryType.LINEAR_RING)

# %% === Helper functions for coordinates
def format_number(value: float) -> str:
    """
    Format a coordinate with the shortest text that reads back to the same float.

    Args:
        value (float): The coordinate.

    Returns:
        str: Integral values without decimals (ex: '1'), the others as repr (ex: '0.1').
    """
    value = float(value)
    if value.is_integer() and abs(value) < 1e15:
        return str(int(value))
    return repr(value)

def _point_text(point: list[float], is_3d: bool, separator: str = ' ') -> str:
    values = point[:3] if is_3d else point[:2]
    return separator.join(format_number(v) for v in values)

def _points_text(points: list[list[float]], is_3d: bool, separator: str = ' ', tuple_separator: str = ',') -> str:
    return tuple_separator.join(_point_text(p, is_3d, separator) for p in points)

# %% === WKT writer
def write_wkt(
        handle: GeometryHandle,
        iso: bool = False
    ) -> str:
    """
    Write the WKT of a geometry handle.

    Args:
        handle (GeometryHandle): The geometry to write.
        iso (bool, optional): Write ISO WKT (ex: 'POINT Z (1 2 3)') instead of the classic form (ex: 'POINT (1 2 3)'). Defaults to False.

    Returns:
        str: The WKT text.
    """
    keyword = geometry_name(handle.kind)
    body = _wkt_body(handle, iso)
    # Without coordinates, only the keyword can tell a 3D empty geometry apart
    if handle.is_3d and (iso or body == 'EMPTY'):
        keyword = f"{keyword} Z"
    return f"{keyword} {body}"

def _wkt_body(handle: GeometryHandle, iso: bool) -> str:
    kind = handle.kind
    if kind in _CURVE_TYPES:
        if not handle.points:
            return 'EMPTY'
        return f"({_points_text(handle.points, handle.is_3d)})"
    # A polygon can't hold interior rings without an exterior one
    if not handle.children or (kind == GeometryType.POLYGON and is_empty_handle(handle.children[0])):
        return 'EMPTY'

    if kind == GeometryType.MULTI_POINT:
        members = [_wkt_body(child, iso) for child in handle.children]
        if iso or 'EMPTY' in members:
            return '(' + ','.join(members) + ')'
        return '(' + ','.join(m.strip('()') for m in members) + ')'
    if kind in (GeometryType.POLYGON, GeometryType.MULTI_LINE_STRING, GeometryType.MULTI_POLYGON):
        return '(' + ','.join(_wkt_body(child, iso) for child in handle.children) + ')'
    if kind == GeometryType.GEOMETRY_COLLECTION:
        return '(' + ','.join(write_wkt(child, iso) for child in handle.children) + ')'

    raise ValueError(f"Can't write WKT for geometry kind: {kind.name}")

# %% === GML writer
_GML2_MEMBERS = {
    GeometryType.MULTI_POINT: ('gml:MultiPoint', 'gml:pointMember'),
    GeometryType.MULTI_LINE_STRING: ('gml:MultiLineString', 'gml:lineStringMember'),
    GeometryType.MULTI_POLYGON: ('gml:MultiPolygon', 'gml:polygonMember'),
    GeometryType.GEOMETRY_COLLECTION: ('gml:MultiGeometry', 'gml:geometryMember')
}

_GML3_MEMBERS = {
    GeometryType.MULTI_POINT: ('gml:MultiPoint', 'gml:pointMember'),
    GeometryType.MULTI_LINE_STRING: ('gml:MultiCurve', 'gml:curveMember'),
    GeometryType.MULTI_POLYGON: ('gml:MultiSurface', 'gml:surfaceMember'),
    GeometryType.GEOMETRY_COLLECTION: ('gml:MultiGeometry', 'gml:geometryMember')
}

def write_gml(
        handle: GeometryHandle,
        gml_format: str = 'GML2',
        gml3_linestring_element: str = None,
        gml3_longsrs: bool = True,
        gmlid: str = None,
        srs_code: int = None
    ) -> str:
    """
    Write a geometry handle as a GML fragment.

    Args:
        handle (GeometryHandle): The geometry to write.
        gml_format (str, optional): 'GML2' or 'GML3'. Defaults to 'GML2'.
        gml3_linestring_element (str, optional): 'curve' to write GML3 line strings as gml:Curve. Defaults to None.
        gml3_longsrs (bool, optional): With GML3, write the srsName as 'urn:ogc:def:crs:EPSG::<code>' instead of 'EPSG:<code>'. Defaults to True.
        gmlid (str, optional): Value of the gml:id attribute of the top level element. Defaults to None.
        srs_code (int, optional): EPSG code written in the srsName attribute. Defaults to None.

    Returns:
        str: The GML fragment (without namespace declaration).
    """
    is_gml3 = gml_format.upper().startswith('GML3')
    as_curve = is_gml3 and (gml3_linestring_element or '').lower() == 'curve'
    element = _gml_element(handle, is_gml3, as_curve)

    if srs_code is not None:
        if is_gml3 and gml3_longsrs:
            element.set('srsName', f"urn:ogc:def:crs:EPSG::{srs_code}")
        else:
            element.set('srsName', f"EPSG:{srs_code}")
    if gmlid:
        element.set('gml:id', gmlid)

    return ET.tostring(element, encoding='unicode')

def _gml_positions(parent: ET.Element, handle: GeometryHandle, is_gml3: bool, single: bool = False) -> None:
    if not handle.points:
        return
    if not is_gml3:
        coordinates = ET.SubElement(parent, 'gml:coordinates')
        coordinates.text = _points_text(handle.points, handle.is_3d, separator=',', tuple_separator=' ')
        return
    if single:
        pos = ET.SubElement(parent, 'gml:pos')
        pos.text = _point_text(handle.points[0], handle.is_3d)
        return
    pos_list = ET.SubElement(parent, 'gml:posList')
    if handle.is_3d:
        pos_list.set('srsDimension', '3')
    pos_list.text = _points_text(handle.points, handle.is_3d, tuple_separator=' ')

def _gml_element(handle: GeometryHandle, is_gml3: bool, as_curve: bool) -> ET.Element:
    kind = handle.kind
    if kind == GeometryType.POINT:
        element = ET.Element('gml:Point')
        _gml_positions(element, handle, is_gml3, single=True)
        return element

    if kind == GeometryType.LINE_STRING:
        if as_curve:
            element = ET.Element('gml:Curve')
            segment = ET.SubElement(ET.SubElement(element, 'gml:segments'), 'gml:LineStringSegment')
            _gml_positions(segment, handle, is_gml3)
            return element
        element = ET.Element('gml:LineString')
        _gml_positions(element, handle, is_gml3)
        return element

    if kind == GeometryType.LINEAR_RING:
        element = ET.Element('gml:LinearRing')
        _gml_positions(element, handle, is_gml3)
        return element

    if kind == GeometryType.POLYGON:
        element = ET.Element('gml:Polygon')
        for idx, ring in enumerate(handle.children):
            if is_gml3:
                boundary = ET.SubElement(element, 'gml:exterior' if idx == 0 else 'gml:interior')
            else:
                boundary = ET.SubElement(element, 'gml:outerBoundaryIs' if idx == 0 else 'gml:innerBoundaryIs')
            boundary.append(_gml_element(ring, is_gml3, as_curve))
        return element

    members = _GML3_MEMBERS if is_gml3 else _GML2_MEMBERS
    if kind in members:
        container_tag, member_tag = members[kind]
        element = ET.Element(container_tag)
        for child in handle.children:
            ET.SubElement(element, member_tag).append(_gml_element(child, is_gml3, as_curve))
        return element

    raise ValueError(f"Can't write GML for geometry kind: {kind.name}")

# %% === GML reader
_GML_COLLECTIONS = {
    'MultiPoint': GeometryType.MULTI_POINT,
    'MultiLineString': GeometryType.MULTI_LINE_STRING,
    'MultiCurve': GeometryType.MULTI_LINE_STRING,
    'MultiPolygon': GeometryType.MULTI_POLYGON,
    'MultiSurface': GeometryType.MULTI_POLYGON,
    'MultiGeometry': GeometryType.GEOMETRY_COLLECTION
}

def _local_name(tag: str) -> str:
    return tag.rsplit('}', 1)[-1].split(':')[-1]

def read_gml(gml_data: str) -> GeometryHandle:
    """
    Read a GML geometry fragment into a geometry handle.

    Args:
        gml_data (str): The GML fragment (namespace declarations are optional).

    Returns:
        GeometryHandle: The geometry read.

    Raises:
        ValueError: If the fragment is not a single supported GML geometry.
        xml.etree.ElementTree.ParseError: If the fragment is not well formed XML.
    """
    text = _XML_DECLARATION.sub('', gml_data)
    wrapped = f'<root xmlns:gml="{GML_NAMESPACES["gml"]}">{text}</root>'
    root = ET.fromstring(wrapped)  # nosec B314
    elements = list(root)
    if len(elements) != 1:
        raise ValueError(f"GML fragment must contain exactly one geometry element, found {len(elements)}.")

    return _read_gml_element(elements[0])

def _read_gml_positions(element: ET.Element) -> tuple[list[list[float]], bool]:
    points, is_3d = [], False
    for item in element.iter():
        name = _local_name(item.tag)
        if name == 'coordinates':
            decimal = item.get('decimal', '.')
            cs = item.get('cs', ',')
            ts = item.get('ts', None)
            for tuple_text in (item.text or '').strip().split(ts):
                if not tuple_text:
                    continue
                values = [float(v.replace(decimal, '.')) for v in tuple_text.split(cs)]
                points.append(values)
        elif name == 'pos':
            points.append([float(v) for v in (item.text or '').split()])
        elif name == 'posList':
            dimension = int(item.get('srsDimension', element.get('srsDimension', 2)))
            if dimension not in (2, 3):
                raise ValueError(f"posList srsDimension must be 2 or 3, got {dimension}.")
            values = [float(v) for v in (item.text or '').split()]
            if len(values) % dimension:
                raise ValueError(f"posList has {len(values)} values, not a multiple of its dimension ({dimension}).")
            points.extend(values[i:i + dimension] for i in range(0, len(values), dimension))
        elif name == 'coord':
            values = {}
            for ordinate in item:
                if not (ordinate.text or '').strip():
                    raise ValueError(f"GML coord ordinate {_local_name(ordinate.tag)} has no value.")
                values[_local_name(ordinate.tag)] = float(ordinate.text)
            points.append([values[k] for k in ('X', 'Y', 'Z') if k in values])

    out_points = []
    for values in points:
        if len(values) not in (2, 3):
            raise ValueError(f"GML position must have 2 or 3 values, got {len(values)}.")
        if len(values) == 3:
            is_3d = True
        out_points.append([values[0], values[1], values[2] if len(values) == 3 else 0.0])
    return out_points, is_3d

def _read_gml_element(element: ET.Element) -> GeometryHandle:
    name = _local_name(element.tag)

    if name in ('Point', 'LineString', 'Curve', 'LinearRing'):
        kind = {
            'Point': GeometryType.POINT,
            'LineString': GeometryType.LINE_STRING,
            'Curve': GeometryType.LINE_STRING,
            'LinearRing': GeometryType.LINEAR_RING
        }[name]
        points, is_3d = _read_gml_positions(element)
        handle = GeometryHandle(kind, is_3d)
        handle.points = points[:1] if kind == GeometryType.POINT else points
        return handle

    if name == 'Polygon':
        handle = GeometryHandle(GeometryType.POLYGON)
        for boundary in element:
            if _local_name(boundary.tag) not in ('outerBoundaryIs', 'exterior', 'innerBoundaryIs', 'interior'):
                continue
            for ring in boundary:
                ring_handle = _read_gml_element(ring)
                ring_handle.kind = GeometryType.LINEAR_RING
                ring_handle.owner = handle
                handle.children.append(ring_handle)
        set_3d(handle, has_3d_parts(handle))
        return handle

    if name in _GML_COLLECTIONS:
        handle = GeometryHandle(_GML_COLLECTIONS[name])
        for member in element:
            member_name = _local_name(member.tag)
            if not (member_name.endswith('Member') or member_name.endswith('Members')):
                continue
            for part in member:
                part_handle = _read_gml_element(part)
                part_handle.owner = handle
                handle.children.append(part_handle)
        set_3d(handle, has_3d_parts(handle))
        return handle

    raise ValueError(f"Unsupported GML geometry element: {name}")

# %% === KML writer
def write_kml(
        handle: GeometryHandle,
        altitude_mode: str = None
    ) -> str:
    """
    Write a geometry handle as a KML fragment.

    Args:
        handle (GeometryHandle): The geometry to write.
        altitude_mode (str, optional): Value of the altitudeMode element (ex: 'absolute'). Defaults to None.

    Returns:
        str: The KML fragment.
    """
    return ET.tostring(_kml_element(handle, altitude_mode), encoding='unicode')

def _kml_coordinates(parent: ET.Element, handle: GeometryHandle) -> None:
    coordinates = ET.SubElement(parent, 'coordinates')
    coordinates.text = _points_text(handle.points, handle.is_3d, separator=',', tuple_separator=' ')

def _kml_element(handle: GeometryHandle, altitude_mode: str) -> ET.Element:
    kind = handle.kind
    if kind in _CURVE_TYPES:
        tag = {GeometryType.POINT: 'Point', GeometryType.LINE_STRING: 'LineString', GeometryType.LINEAR_RING: 'LinearRing'}[kind]
        element = ET.Element(tag)
        if altitude_mode:
            ET.SubElement(element, 'altitudeMode').text = altitude_mode
        _kml_coordinates(element, handle)
        return element

    if kind == GeometryType.POLYGON:
        element = ET.Element('Polygon')
        if altitude_mode:
            ET.SubElement(element, 'altitudeMode').text = altitude_mode
        for idx, ring in enumerate(handle.children):
            boundary = ET.SubElement(element, 'outerBoundaryIs' if idx == 0 else 'innerBoundaryIs')
            _kml_coordinates(ET.SubElement(boundary, 'LinearRing'), ring)
        return element

    if kind in (GeometryType.MULTI_POINT, GeometryType.MULTI_LINE_STRING, GeometryType.MULTI_POLYGON, GeometryType.GEOMETRY_COLLECTION):
        element = ET.Element('MultiGeometry')
        for child in handle.children:
            element.append(_kml_element(child, altitude_mode))
        return element

    raise ValueError(f"Can't write KML for geometry kind: {kind.name}")

# %% === GeoJSON helpers
def _round_value(value: float, coordinate_precision: int = None, significant_figures: int = None) -> float:
    if coordinate_precision is not None:
        value = round(value, coordinate_precision)
    if significant_figures is not None:
        value = float(f"{value:.{significant_figures}g}")
    return value

def clean_geojson_mapping(
        mapping: dict,
        coordinate_precision: int = None,
        significant_figures: int = None
    ) -> dict:
    """
    Adapt a shapely mapping to GeoJSON: linear rings become line strings and coordinates are rounded.

    Args:
        mapping (dict): The mapping returned by shapely.geometry.mapping.
        coordinate_precision (int, optional): Maximum number of decimals. Defaults to None (no rounding).
        significant_figures (int, optional): Maximum number of significant figures. Defaults to None.

    Returns:
        dict: A new GeoJSON geometry dictionary, with lists instead of tuples.
    """
    def _convert(coordinates):
        if isinstance(coordinates, (int, float)):
            return _round_value(float(coordinates), coordinate_precision, significant_figures)
        return [_convert(c) for c in coordinates]

    geometry_type = mapping['type']
    if geometry_type == 'LinearRing':
        geometry_type = 'LineString'
    if geometry_type == 'GeometryCollection':
        return {
            'type': geometry_type,
            'geometries': [clean_geojson_mapping(g, coordinate_precision, significant_figures) for g in mapping['geometries']]
        }
    return {'type': geometry_type, 'coordinates': _convert(mapping['coordinates'])}
