from functools import wraps
from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user
from gamezone import db
from gamezone.models import User


admin = Blueprint('admin', __name__)


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if not current_user.is_authenticated or not current_user.is_admin:
            return jsonify({'error': 'Admin access required'}), 403
        return view(*args, **kwargs)
    return wrapper


@admin.route('/users', methods=['GET'])
@login_required
@admin_required
def list_users():
    users = User.query.order_by(User.id).all()
    return jsonify([dict(u.to_dict(), **u.stats_dict()) for u in users])


@admin.route('/users/<int:user_id>', methods=['PUT'])
@login_required
@admin_required
def update_user(user_id):
    user = db.session.get(User, user_id)
    if not user:
        return jsonify({'error': 'User not found'}), 404
    data = request.get_json(silent=True) or {}
    if 'display_name' in data:
        display_name = str(data['display_name'] or '').strip()
        if not display_name:
            return jsonify({'error': 'Display name cannot be empty'}), 400
        user.display_name = display_name
    if 'is_admin' in data:
        user.is_admin = bool(data['is_admin'])
    db.session.commit()
    current_app.logger.info(f"[admin-update] user={user_id} by={current_user.id}")
    return jsonify(user.to_dict())


@admin.route('/users/<int:user_id>', methods=['DELETE'])
@login_required
@admin_required
def delete_user(user_id):
    user = db.session.get(User, user_id)
    if not user:
        return jsonify({'error': 'User not found'}), 404
    if user.id == current_user.id:
        return jsonify({'error': 'Use the profile endpoint to delete your own account'}), 400
    db.session.delete(user)
    db.session.commit()
    current_app.logger.info(f"[admin-delete] user={user_id} by={current_user.id}")
    return jsonify({'message': 'User deleted'})
