"""Spreadsheet input and output.

Sub-modules:
- ``uploads``: scoped temp-file staging of multipart uploads
- ``decoder``: URL extraction from the first column of an xlsx upload
- ``encoder``: xlsx generation for result downloads and the import template
"""
