from sociables.server import create_app

# One process per deployment: rooms live in memory.
app, socketio = create_app()
