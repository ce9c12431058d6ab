from flask import Blueprint, jsonify, current_app
from flask_login import login_required
from gamezone.api.admin import admin_required
from gamezone.services.leaderboard.errors import ConcurrentResetInProgress, LeaderboardError
from gamezone.services.leaderboard.service import to_iso


leaderboard = Blueprint('leaderboard', __name__)


def _service():
    return current_app.extensions['leaderboard']


@leaderboard.route('', methods=['GET'])
def get_leaderboard():
    service = _service()
    rows = service.get_leaderboard()
    end_time = service.get_epoch_end_time()
    return jsonify({
        'leaderboard': [row.to_dict() for row in rows],
        'end_time': end_time,
        'end_time_iso': to_iso(end_time),
    })


@leaderboard.route('/end-time', methods=['GET'])
def get_end_time():
    service = _service()
    end_time = service.get_epoch_end_time()
    return jsonify({
        'end_time': end_time,
        'end_time_iso': to_iso(end_time),
        'interval_sec': service.scheduler.interval_sec,
    })


@leaderboard.route('/reset', methods=['POST'])
@login_required
@admin_required
def reset_leaderboard():
    service = _service()
    try:
        service.trigger_manual_reset(raise_errors=True)
    except ConcurrentResetInProgress:
        return jsonify({'error': 'A leaderboard reset is already running'}), 409
    except LeaderboardError:
        return jsonify({'error': 'Leaderboard reset failed, try again later'}), 503
    end_time = service.scheduler.end_time
    return jsonify({
        'message': 'Leaderboard reset successfully',
        'end_time': end_time,
        'end_time_iso': to_iso(end_time),
    })
