from flask import Flask, jsonify
from flask_login import LoginManager
from werkzeug.exceptions import HTTPException


def create_app(config_object=None, **overrides):
    # Create the main app
    app = Flask(__name__)

    from quizapp.config import Config
    app.config.from_object(config_object or Config)
    app.config.update(overrides)
    app.json.sort_keys = False

    # Flat JSON files for users, questions, history and violations
    from quizapp.storage import StorageError, init_storage
    storage = init_storage(app)

    # Bearer-token identity through Flask-Login
    from quizapp.auth.guards import load_user_from_request, unauthorized
    from quizapp.auth.models import User

    login_manager = LoginManager()
    login_manager.init_app(app)
    login_manager.request_loader(load_user_from_request)
    login_manager.unauthorized_handler(unauthorized)

    @login_manager.user_loader
    def load_user(user_id):
        return User.get_by_id(user_id)

    # Register the blueprints at the root and again under /api
    from quizapp.auth.routes import bp as auth_bp
    from quizapp.questions.routes import bp as questions_bp
    from quizapp.users.routes import bp as users_bp

    for prefix, suffix in (('', ''), ('/api', '_api')):
        app.register_blueprint(auth_bp, url_prefix=prefix or None, name=f'auth{suffix}')
        app.register_blueprint(questions_bp, url_prefix=f'{prefix}/questions', name=f'questions{suffix}')
        app.register_blueprint(users_bp, url_prefix=prefix or None, name=f'users{suffix}')

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({'error': e.description}), e.code

    @app.errorhandler(StorageError)
    def handle_storage_error(e):
        app.logger.error(f"Storage failure: {e}")
        return jsonify({'error': 'Internal server error'}), 500

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        app.logger.exception(f"Unhandled error: {e}")
        return jsonify({'error': 'Internal server error'}), 500

    @app.route("/healthz")
    def healthz():
        return "ok"

    # Register CLI commands
    from quizapp.tasks import register_cli_commands
    register_cli_commands(app)

    app.logger.info(f"Quiz API created with data directory {storage.storage_dir}")
    return app
