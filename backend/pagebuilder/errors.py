from flask import current_app, jsonify
from sqlalchemy.exc import SQLAlchemyError
from pagebuilder.domain.invariants.exceptions import InvariantViolation

def register_error_handlers(app):
    @app.errorhandler(InvariantViolation)
    def handle_invariant_violation(error):
        response = jsonify({
            "error": "InvariantViolation",
            "message": str(error)
        })
        response.status_code = 400
        return response

    @app.errorhandler(SQLAlchemyError)
    def handle_store_failure(error):
        current_app.logger.exception("Database operation failed")
        response = jsonify({
            "error": "StoreFailure",
            "message": "The database rejected the operation."
        })
        response.status_code = 500
        return response
