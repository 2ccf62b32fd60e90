"""Atlasify - Convert vector line-art maps to geographic polygons.

Atlasify reads an SVG world map drawn in the Winkel Tripel projection,
flattens every country outline into closed rings, inverts the projection to
longitude/latitude and rebuilds correctly nested polygons (shells, holes and
islands inside holes) per country.

Example:
    $ atlasify world.svg -o world.geojson

This will create world.geojson with one feature per named region.
"""

__version__ = "0.1.0"
__author__ = "Frank Hambach"

__all__ = ["__author__", "__version__"]
