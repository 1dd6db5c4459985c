"""exifmv - rename, copy or link media files from a template of EXIF and filesystem properties."""

__version__ = "0.1.0"
