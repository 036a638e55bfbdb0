"""
Flask extensions initialization and shutdown
"""
from flask_sqlalchemy import SQLAlchemy
from flask_jwt_extended import JWTManager
from flask_cors import CORS
from flask_migrate import Migrate

# Initialize extensions
db = SQLAlchemy()
jwt = JWTManager()
cors = CORS()
migrate = Migrate()


def init_extensions(app):
    """Initialize all Flask extensions"""
    db.init_app(app)
    jwt.init_app(app)
    cors.init_app(
        app,
        resources={r"/api/*": {"origins": app.config.get('CORS_ORIGINS', '*')}},
        allow_headers=["Content-Type", "Authorization"],
        methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    )
    migrate.init_app(app, db)

    # Tokens are minted from a Principal; the subject is the string id and
    # email/role travel as extra claims.
    @jwt.user_identity_loader
    def principal_identity(principal):
        return str(principal.id)

    @jwt.additional_claims_loader
    def principal_claims(principal):
        return {'email': principal.email, 'role': principal.role}

    return app


def shutdown_extensions(app):
    """Drain the connection pool.

    Safe to call more than once; the engine reconnects lazily if the app
    keeps serving afterwards.
    """
    with app.app_context():
        db.session.remove()
        db.engine.dispose()
    app.logger.info('Database connection pool disposed')
