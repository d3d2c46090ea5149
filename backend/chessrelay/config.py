import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '3000'))
    # Clock allowance per side when a match starts (seconds)
    STARTING_CLOCK_SECONDS = float(os.environ.get('STARTING_CLOCK_SECONDS', '600'))
    # Comma separated list of origins allowed to open sockets / call HTTP routes
    CORS_ORIGINS = [
        origin.strip()
        for origin in os.environ.get(
            'CORS_ORIGINS',
            'http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173',
        ).split(',')
        if origin.strip()
    ]
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
