from functools import wraps
from flask import session, redirect, url_for, request, jsonify


def wants_json():
    return request.path.startswith('/api/') or request.accept_mimetypes.best == 'application/json'


def login_required(fn):
    """Redirect anonymous users to the login page; JSON callers get a 401."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if 'user_id' not in session:
            if wants_json():
                return jsonify(error="authentication required"), 401
            return redirect(url_for('auth.login'))
        return fn(*args, **kwargs)
    return wrapper
