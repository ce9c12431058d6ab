from gamezone import create_app, socketio, start_leaderboard_scheduler

app = create_app()

if __name__ == '__main__':
    # Only the server process owns the reset timer; CLI commands that import
    # this module must not arm it. Other entry points start it lazily on the
    # first leaderboard read.
    start_leaderboard_scheduler(app)
    # Use SocketIO server to enable websockets in dev; the reloader would
    # start a second reset scheduler
    socketio.run(app, debug=True, use_reloader=False)
