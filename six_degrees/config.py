"""
Application configuration and environment variables
"""
import os
from pathlib import Path

# Data directory configuration
if os.environ.get('RAILWAY_ENVIRONMENT_NAME'):
    DATA_DIR = Path('/data')
else:
    DATA_DIR = Path(os.environ.get('DATA_DIR', './data'))

# Database configuration
DATABASE_PATH = DATA_DIR / 'six_degrees.db'

# TMDb configuration
TMDB_API_KEY = os.environ.get('TMDB_API_KEY', '')
TMDB_BASE_URL = os.environ.get('TMDB_BASE_URL', 'https://api.themoviedb.org/3')

# Search tunables
MOVIE_FANOUT_CAP = 20       # Most popular dated movies queried per expansion
CAST_PER_MOVIE_CAP = 30     # Top-billed cast members taken per movie
DEFAULT_MAX_DEGREES = 6
SEARCH_TIMEOUT_SECONDS = float(os.environ.get('SEARCH_TIMEOUT_SECONDS', '30'))

# API configuration
API_TITLE = "Six Degrees API"
API_VERSION = "1.0.0"

# Rate limits (slowapi syntax)
CONNECTION_RATE_LIMIT = "10/minute"
ACTOR_SEARCH_RATE_LIMIT = "60/minute"

# CORS origins
CORS_ORIGINS = [
    "http://localhost:8000",
    "http://127.0.0.1:8000",
    "http://localhost:5173",
]
