from gamezone import db
from gamezone.models import LeaderboardEpoch, User


def login(client, username, password='password'):
    return client.post('/api/login', json={'username': username, 'password': password})


def test_signup_login_and_profile(client, signup):
    res = signup('alice', display_name='Alice A')
    assert res.status_code == 201
    assert res.get_json()['user']['display_name'] == 'Alice A'

    # duplicate username
    assert signup('alice').status_code == 400

    client.post('/api/logout')
    assert client.get('/api/profile').status_code == 401

    assert login(client, 'alice', 'wrong').status_code == 401
    res = login(client, 'alice')
    assert res.status_code == 200
    profile = client.get('/api/profile').get_json()['user']
    assert profile['username'] == 'alice'
    assert profile['is_admin'] is False


def test_signup_requires_username_and_password(client):
    assert client.post('/api/signup', json={'username': 'bob'}).status_code == 400
    assert client.post('/api/signup', json={'password': 'x'}).status_code == 400


def test_update_and_delete_profile(client, signup):
    signup('bob')
    res = client.put('/api/profile', json={'display_name': 'Bobby'})
    assert res.status_code == 200
    assert res.get_json()['user']['display_name'] == 'Bobby'
    assert client.put('/api/profile', json={}).status_code == 400

    assert client.delete('/api/profile').status_code == 200
    assert User.query.filter_by(username='bob').first() is None
    assert client.get('/api/profile').status_code == 401


def test_record_play_updates_counters(client, signup):
    signup('cara')
    assert client.post('/api/stats', json={'reward': 10, 'game_type': 'snake'}).status_code == 200
    assert client.post('/api/stats', json={'reward': 2.5, 'game_type': 'snake'}).status_code == 200
    res = client.post('/api/stats', json={'reward': 0, 'game_type': 'tetris'})
    assert res.status_code == 200

    stats = client.get('/api/stats').get_json()
    assert stats['games_played'] == 3
    assert stats['distinct_game_types'] == 2
    assert stats['total_reward'] == 12.5
    assert stats['game_types'] == ['snake', 'tetris']


def test_record_play_rejects_bad_input(client, signup):
    signup('dan')
    assert client.post('/api/stats', json={'reward': -1, 'game_type': 'snake'}).status_code == 400
    assert client.post('/api/stats', json={'reward': 'lots', 'game_type': 'snake'}).status_code == 400
    assert client.post('/api/stats', json={'reward': 3}).status_code == 400
    assert client.get('/api/stats').get_json()['games_played'] == 0


def test_stats_require_login(client):
    assert client.post('/api/stats', json={'reward': 1, 'game_type': 'snake'}).status_code == 401


def test_leaderboard_ranks_users(client, make_user):
    make_user('idle')
    make_user('alice', games_played=2, distinct_game_types=1, total_reward=50)
    make_user('bob', games_played=1, distinct_game_types=1, total_reward=30)
    make_user('cara', games_played=5, distinct_game_types=2, total_reward=50)

    data = client.get('/api/leaderboard').get_json()
    board = [(row['display_name'], row['rank']) for row in data['leaderboard']]
    assert board == [('Alice', 1), ('Cara', 2), ('Bob', 3), ('Idle', 4)]
    assert data['end_time'] is not None
    assert data['end_time_iso'].endswith('+00:00')


def test_leaderboard_all_inactive(client, make_user):
    make_user('x')
    make_user('y')
    rows = client.get('/api/leaderboard').get_json()['leaderboard']
    assert [row['rank'] for row in rows] == [1, 1]


def test_end_time_is_persisted_once(client, flask_app):
    first = client.get('/api/leaderboard/end-time').get_json()
    second = client.get('/api/leaderboard/end-time').get_json()
    assert first['end_time'] == second['end_time']
    assert first['interval_sec'] == flask_app.config['LEADERBOARD_RESET_INTERVAL_SEC']
    assert db.session.get(LeaderboardEpoch, 1).end_time == first['end_time']


def test_manual_reset_requires_admin(client, signup):
    assert client.post('/api/leaderboard/reset').status_code == 401
    signup('eve')
    assert client.post('/api/leaderboard/reset').status_code == 403


def test_manual_reset_zeroes_stats(client, make_user):
    make_user('root', is_admin=True)
    make_user('alice', games_played=2, distinct_game_types=1, total_reward=50)
    before = client.get('/api/leaderboard/end-time').get_json()['end_time']

    login(client, 'root')
    res = client.post('/api/leaderboard/reset')
    assert res.status_code == 200
    assert res.get_json()['end_time'] >= before

    rows = client.get('/api/leaderboard').get_json()['leaderboard']
    assert all(row['rank'] == 1 for row in rows)
    alice = User.query.filter_by(username='alice').first()
    assert (alice.games_played, alice.total_reward, alice.rank) == (0, 0, 1)


def test_manual_reset_reports_store_failure(client, flask_app, make_user, monkeypatch):
    from gamezone.services.leaderboard.errors import PersistenceWriteFailed

    make_user('root', is_admin=True)
    login(client, 'root')

    def broken(end_time):
        raise PersistenceWriteFailed('disk full')

    monkeypatch.setattr(flask_app.extensions['leaderboard'].store, 'reset_leaderboard', broken)
    assert client.post('/api/leaderboard/reset').status_code == 503


def test_leaderboard_read_falls_back_to_last_known(client, flask_app, make_user, monkeypatch):
    from gamezone.services.leaderboard.errors import StoreUnavailable

    make_user('alice', games_played=1, total_reward=5)
    service = flask_app.extensions['leaderboard']
    assert len(service.get_leaderboard()) == 1

    def down():
        raise StoreUnavailable('connection refused')

    monkeypatch.setattr(service.store, 'list_all_users', down)
    rows = service.get_leaderboard()
    assert [r.display_name for r in rows] == ['Alice']


def test_admin_user_management(client, make_user):
    make_user('root', is_admin=True)
    victim = make_user('mallory', total_reward=3)
    victim_id = victim.id
    login(client, 'root')

    users = client.get('/api/admin/users').get_json()
    assert {u['username'] for u in users} == {'root', 'mallory'}

    res = client.put(f'/api/admin/users/{victim_id}', json={'display_name': 'M', 'is_admin': True})
    assert res.status_code == 200
    assert res.get_json()['is_admin'] is True

    assert client.delete(f'/api/admin/users/{victim_id}').status_code == 200
    assert client.delete(f'/api/admin/users/{victim_id}').status_code == 404


def test_admin_routes_forbidden_for_players(client, signup):
    signup('player')
    assert client.get('/api/admin/users').status_code == 403


def test_record_play_rejects_non_finite_rewards(client, signup):
    signup('finn')
    for bad in (float('inf'), float('nan'), float('-inf')):
        assert client.post('/api/stats', json={'reward': bad, 'game_type': 'snake'}).status_code == 400
    assert client.get('/api/stats').get_json()['total_reward'] == 0
    board = client.get('/api/leaderboard').get_data(as_text=True)
    assert 'Infinity' not in board and 'NaN' not in board
