from flask import request, g, jsonify
from pagebuilder.models.site import Site

# Endpoints served without a site context
PUBLIC_ENDPOINTS = {"v1.health_check", "openapi_pages", "static"}
PUBLIC_BLUEPRINTS = {"swagger_ui"}

def site_middleware(app):
    @app.before_request
    def load_site():
        if request.endpoint in PUBLIC_ENDPOINTS or request.blueprint in PUBLIC_BLUEPRINTS:
            return None

        raw_site_id = request.headers.get('X-Site-ID')
        if not raw_site_id:
            return jsonify({"error": "X-Site-ID header is missing"}), 400

        try:
            site_id = int(raw_site_id)
        except ValueError:
            return jsonify({"error": "X-Site-ID must be an integer"}), 400

        site = Site.query.filter_by(id=site_id, is_active=True).first()
        if not site:
            return jsonify({"error": "Invalid site"}), 404

        # Attach site to global context
        g.current_site = site
