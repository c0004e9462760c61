"""
Admin CMS Routes

Blueprint for section content API endpoints:
- GET /: All content grouped by page and section
- GET /page/<page>: All sections of a page
- GET /page/<page>/section/<section>: One section with updatedAt
- POST|PUT /page/<page>/section/<section>: Create or update a section
- POST|PUT /page/<page>/bulk: Create or update several sections
- DELETE /page/<page>/section/<section>: Delete a section

All endpoints are prefixed with /api/admin/cms when registered with the app.
Every response carries ``success`` so clients can tell application
failures from transport failures.
"""

import functools

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from sitecms.server.models import db, CmsContent


# Create admin CMS blueprint
admin_cms_bp = Blueprint('admin_cms', __name__)


def _response(status_code, message, data=None, **extra):
    """
    Build the standard JSON envelope.

    Args:
        status_code: HTTP status code
        message: Human readable message
        data: Optional payload placed under ``data``

    Returns:
        tuple: (response, status_code)
    """
    body = {
        'success': 200 <= status_code < 300,
        'message': message,
    }
    if data is not None:
        body['data'] = data
    body.update(extra)
    return jsonify(body), status_code


def handle_db_errors(view):
    """Roll back and answer 500 when a view hits a database error."""
    @functools.wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f'CMS database error in {view.__name__}: {e}')
            return _response(500, 'Internal error', error=str(e))
    return wrapper


def _section_payload():
    """
    Read the section data from the request body.

    JSON objects and form posts are used as-is, minus ``page`` and
    ``section`` keys (those come from the URL). Other JSON values are
    wrapped as ``{"value": ...}``. A missing body is an empty object.

    Returns:
        dict: Section data
    """
    payload = request.get_json(silent=True)
    if payload is None and request.form:
        payload = request.form.to_dict()

    if payload is None:
        return {}

    if not isinstance(payload, dict):
        return {'value': payload}

    data = dict(payload)
    data.pop('page', None)
    data.pop('section', None)
    return data


@admin_cms_bp.route('', methods=['GET'])
@handle_db_errors
def get_all_content():
    """
    Get all content grouped by page (admin overview).

    Returns:
        200: {"success": true, "message": "OK", "data": {page: {section: data}}}
    """
    return _response(200, 'OK', CmsContent.grouped(CmsContent.all_ordered()))


@admin_cms_bp.route('/page/<string:page>', methods=['GET'])
@handle_db_errors
def get_page_content(page):
    """
    Get all sections of one page.

    Args:
        page: Page identifier

    Returns:
        200: {"success": true, "message": "OK", "data": {section: data}}
    """
    contents = CmsContent.for_page(page)
    return _response(200, 'OK', {content.section: content.data for content in contents})


@admin_cms_bp.route('/page/<string:page>/section/<string:section>', methods=['GET'])
@handle_db_errors
def get_section_content(page, section):
    """
    Get one section with its updatedAt for cache comparison.

    Returns:
        200: {"success": true, "data": {...}, "updatedAt": "2024-01-01T00:00:00.000Z"}
        404: {"success": false, "message": "Content not found"}
    """
    content = CmsContent.get_section(page, section)

    if not content:
        return _response(404, 'Content not found')

    return jsonify({
        'success': True,
        'data': content.data,
        'updatedAt': content.updated_at_iso,
    }), 200


@admin_cms_bp.route('/page/<string:page>/section/<string:section>', methods=['POST', 'PUT'])
@handle_db_errors
def save_section_content(page, section):
    """
    Create or update one section (upsert).

    Request body: section data as a JSON object or a form post.

    Returns:
        201: Created  {"success": true, "data": {...}, "updatedAt": ..., "message": "Created"}
        200: Updated  {"success": true, "data": {...}, "updatedAt": ..., "message": "Updated"}
    """
    data = _section_payload()

    content, created = CmsContent.upsert(page, section, data)
    db.session.commit()

    current_app.logger.info(f"CMS content {'created' if created else 'updated'}: {page}/{section}")

    return jsonify({
        'success': True,
        'data': content.data,
        'updatedAt': content.updated_at_iso,
        'message': 'Created' if created else 'Updated',
    }), 201 if created else 200


@admin_cms_bp.route('/page/<string:page>/bulk', methods=['POST', 'PUT'])
@handle_db_errors
def bulk_update_sections(page):
    """
    Create or update several sections of a page.

    Request body: {"section1": {...}, "section2": {...}}

    Returns:
        200: {"success": true, "message": "Bulk update completed",
              "data": [{"section": ..., "created": ..., "data": {...}}]}
        400: Body is not an object
    """
    sections = request.get_json(silent=True)

    if not isinstance(sections, dict):
        return _response(400, 'Invalid request body. Expected object with section keys.')

    results = []
    for section, data in sections.items():
        content, created = CmsContent.upsert(page, section, data or {})
        results.append({
            'section': section,
            'created': created,
            'data': content.data,
        })
    db.session.commit()

    current_app.logger.info(f'CMS bulk update for {page}: {len(results)} section(s)')
    return _response(200, 'Bulk update completed', results)


@admin_cms_bp.route('/page/<string:page>/section/<string:section>', methods=['DELETE'])
@handle_db_errors
def delete_section_content(page, section):
    """
    Delete one section.

    Returns:
        200: {"success": true, "message": "Deleted"}
        404: {"success": false, "message": "Content not found"}
    """
    content = CmsContent.get_section(page, section)

    if not content:
        return _response(404, 'Content not found')

    db.session.delete(content)
    db.session.commit()

    current_app.logger.info(f'CMS content deleted: {page}/{section}')
    return _response(200, 'Deleted')
