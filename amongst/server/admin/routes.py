"""
Admin routes for the game server.

Provides:
- /admin/login - Password login
- /admin/logout - Session logout
- /admin/state - JSON snapshot of the running game
"""
from __future__ import annotations

import hmac
import logging

from flask import current_app, jsonify, request
from flask_login import login_required, login_user, logout_user

from . import AdminUser, admin_bp

logger = logging.getLogger(__name__)


@admin_bp.route('/login', methods=['POST'])
def login():
    """Log in with the configured admin password."""
    data = request.get_json(silent=True) or request.form
    password = data.get('password', '') if data else ''
    expected = current_app.config.get('ADMIN_PASSWORD')

    if not expected or not hmac.compare_digest(str(password), expected):
        logger.warning("Rejected admin login attempt")
        return jsonify({'success': False, 'message': 'Invalid password'}), 401

    login_user(AdminUser(), remember=True)
    return jsonify({'success': True})


@admin_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({'success': True})


@admin_bp.route('/state')
@login_required
def state():
    """Current session snapshot."""
    session = current_app.config['GAME_SESSION']
    return jsonify(session.snapshot())
