"""
Statement upload → Text extraction → Transaction extraction → Normalized candidates

A deterministic, testable pipeline that turns uploaded bank statements
(PDF, CSV, TXT, XLS, XLSX) into normalized transaction candidates, using a
provider-assisted structured extraction with a regex fallback.
"""

__version__ = "0.1.0"
