"""
Content store service.

Flask application over a single ``cms_content`` table keyed by
``(page, section)``. See sitecms.server.app.create_app.
"""
