import secrets
from flask import Flask
from flask_wtf.csrf import CSRFProtect
from config import Config
from models import CorruptRecordError
from routes.dashboard import dashboard_bp
from routes.transactions import transactions_bp
from routes.settings import settings_bp
from routes.auth import auth_bp
from routes.chat import chat_bp

csrf = CSRFProtect()


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    if not app.config.get("SECRET_KEY"):
        app.config["SECRET_KEY"] = secrets.token_hex(32)

    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    config_class.init_db(app)
    csrf.init_app(app)

    app.register_blueprint(auth_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(transactions_bp)
    app.register_blueprint(settings_bp)
    app.register_blueprint(chat_bp)

    app.jinja_env.filters['money'] = money_filter

    @app.after_request
    def set_security_headers(response):
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'SAMEORIGIN'
        response.headers['X-XSS-Protection'] = '1; mode=block'
        response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
        return response

    @app.errorhandler(CorruptRecordError)
    def handle_corrupt_record(error):
        app.logger.error("Stored data failed validation: %s", error)
        return "Stored data is corrupt; please contact support", 500

    return app


def money_filter(value):
    try:
        return f"{int(value):,}"
    except (ValueError, TypeError):
        return "0"


if __name__ == '__main__':
    create_app().run(debug=True)
