from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user
import math
from numbers import Real
from gamezone import db
from gamezone.models import User
from gamezone.services.leaderboard.errors import LeaderboardError


stats = Blueprint('stats', __name__)


@stats.route('', methods=['POST'])
@login_required
def record_play():
    """Record one finished game for the current user."""
    data = request.get_json(silent=True) or {}
    reward = data.get('reward', 0)
    game_type = data.get('game_type')

    # Rewards only ever add to the running total
    if isinstance(reward, bool) or not isinstance(reward, Real) or not math.isfinite(reward) or reward < 0:
        return jsonify({'error': 'Reward must be a non-negative number'}), 400
    if not isinstance(game_type, str) or not game_type.strip():
        return jsonify({'error': 'Game type is required'}), 400

    user = db.session.get(User, current_user.id)
    store = current_app.extensions['leaderboard'].store
    try:
        store.record_play(user, reward, game_type.strip())
    except LeaderboardError as exc:
        current_app.logger.error(f"[stats] user={user.id} update failed: {exc}")
        return jsonify({'error': 'Could not save stats, try again later'}), 503
    return jsonify({'message': 'Stats updated successfully', 'stats': user.stats_dict()})


@stats.route('', methods=['GET'])
@login_required
def get_stats():
    return jsonify(current_user.stats_dict())
