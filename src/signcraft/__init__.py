"""SignCraft - Turn fonts, images and shapes into printable STL meshes.

SignCraft is a 2D-to-3D geometry pipeline for sign making. It samples vector
outlines, thins and traces raster images, stitches stroke paths together and
synthesizes triangle meshes (plates, extrusions, tubes and lithophane
heightfields) that are written out as binary or ASCII STL.

Example:
    $ signcraft plate --width 200 --height 120 --holes corners

This will create plate.stl with four mounting holes.
"""

__version__ = "0.1.0"
__author__ = "SignCraft Contributors"

__all__ = ["__author__", "__version__"]
