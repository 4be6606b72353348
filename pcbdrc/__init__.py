"""Read, edit and write KiCad PCB board files and check them for overlapping copper."""

__version__ = "0.1.0"
__all__ = ["board", "drc", "footprints", "geometry", "report", "sexpr", "shapes"]