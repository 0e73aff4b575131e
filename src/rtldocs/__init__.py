"""rtldocs: right-to-left business document generation.

Renders contracts and estimates (Persian text, Jalali dates) into
paginated PDF and DOCX files from a single layout pass.
"""

__version__ = "0.1.0"
