import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    CORS_ALLOWED_ORIGINS = [
        origin.strip()
        for origin in os.environ.get(
            'CORS_ALLOWED_ORIGINS', 'http://localhost:3000,http://127.0.0.1:3000'
        ).split(',')
        if origin.strip()
    ]
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/ws')
    PORT = int(os.environ.get('PORT', '3001'))
    # Board geometry accepted in challenges
    MIN_BOARD_SIZE = int(os.environ.get('MIN_BOARD_SIZE', '3'))
    MAX_BOARD_SIZE = int(os.environ.get('MAX_BOARD_SIZE', '10'))
    MIN_WIN_CONDITION = int(os.environ.get('MIN_WIN_CONDITION', '3'))
    # Display names are trimmed before this limit is checked
    MAX_NAME_LENGTH = int(os.environ.get('MAX_NAME_LENGTH', '20'))
