from flask import Blueprint, request, jsonify, current_app
from flask_login import login_user, logout_user, login_required, current_user
from gamezone import db
from gamezone.models import User

main = Blueprint('main', __name__)


@main.route('/signup', methods=['POST', 'OPTIONS'])
def signup():
    if request.method == 'OPTIONS':
        return jsonify({'status': 'ok'}), 200
    data = request.get_json(silent=True) or {}
    username = (data.get('username') or '').strip()
    password = data.get('password')
    if not username or not password:
        return jsonify({'error': 'Missing username or password'}), 400
    if User.query.filter_by(username=username).first():
        return jsonify({'error': 'Username already exists'}), 400

    display_name = (data.get('display_name') or '').strip() or username
    new_user = User(username=username, display_name=display_name)
    new_user.set_password(password)
    db.session.add(new_user)
    db.session.commit()
    login_user(new_user)
    current_app.logger.info(f"[signup] user={new_user.id} username={username}")
    return jsonify({'message': 'Account created successfully', 'user': new_user.to_dict()}), 201


@main.route('/login', methods=['POST', 'OPTIONS'])
def login():
    if request.method == 'OPTIONS':
        return jsonify({'status': 'ok'}), 200
    data = request.get_json(silent=True) or {}
    user = User.query.filter_by(username=data.get('username')).first()
    if user and data.get('password') and user.check_password(data['password']):
        login_user(user, remember=True)
        return jsonify({'message': 'Login successful', 'user': user.to_dict()})
    return jsonify({'error': 'Invalid credentials'}), 401


@main.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({'message': 'Logged out successfully'})


@main.route('/profile', methods=['GET'])
@login_required
def get_profile():
    return jsonify({'user': current_user.to_dict()})


@main.route('/profile', methods=['PUT'])
@login_required
def update_profile():
    data = request.get_json(silent=True) or {}
    display_name = data.get('display_name')
    password = data.get('password')
    if display_name is None and password is None:
        return jsonify({'error': 'Nothing to update'}), 400
    if display_name is not None:
        display_name = str(display_name).strip()
        if not display_name:
            return jsonify({'error': 'Display name cannot be empty'}), 400
        current_user.display_name = display_name
    if password is not None:
        if not password:
            return jsonify({'error': 'Password cannot be empty'}), 400
        current_user.set_password(password)
    db.session.commit()
    return jsonify({'message': 'Profile updated', 'user': current_user.to_dict()})


@main.route('/profile', methods=['DELETE'])
@login_required
def delete_profile():
    user_id = current_user.id
    user = db.session.get(User, user_id)
    logout_user()
    db.session.delete(user)
    db.session.commit()
    current_app.logger.info(f"[profile-delete] user={user_id}")
    return jsonify({'message': 'Account deleted successfully'})
