"""
Content Store Routes Package

Blueprint registration for the API route modules:
- Admin CMS: section content read, upsert, bulk update and delete
"""

# Import Admin CMS blueprint from its module
from sitecms.server.routes.admin_cms import admin_cms_bp

__all__ = ['admin_cms_bp']
