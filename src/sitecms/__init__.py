"""
sitecms - section content for the corporate site.

Two halves share this package:
- sitecms.client: cached content coordinator used by page renderers and
  admin forms (remote first, local cache fallback, update broadcasts)
- sitecms.server: Flask content store exposing the /api/admin/cms API
"""

__version__ = "0.1.0"
