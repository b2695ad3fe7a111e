"""
Admin module for the game server dashboard.

Provides:
- Flask Blueprint for /admin routes
- AdminUser class for Flask-Login session management
- Admin namespace for real-time SocketIO updates
"""
from flask import Blueprint

admin_bp = Blueprint('admin', __name__, url_prefix='/admin')


class AdminUser:
    """
    Simple admin user class for Flask-Login.

    Single-user authentication, there is only ever one admin.
    """

    def __init__(self, id='admin'):
        self.id = id
        self.is_authenticated = True
        self.is_active = True
        self.is_anonymous = False

    def get_id(self):
        return self.id


from . import routes  # Import routes after blueprint creation
