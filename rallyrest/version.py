__version__ = "2.1.0"

DESCRIPTION = "Rally REST Toolkit for Python"
VENDOR = "Rally Software, Inc."
