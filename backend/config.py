import os
from dotenv import load_dotenv

load_dotenv()

config = {
    'anthropic_api_key': os.getenv('ANTHROPIC_API_KEY'),
    'model': os.getenv('ANTHROPIC_MODEL', 'claude-sonnet-4-5'),
    'max_tokens': int(os.getenv('ANTHROPIC_MAX_TOKENS', 1024)),
    'temperature': float(os.getenv('ANTHROPIC_TEMPERATURE', 0.2)),
    'cors_origins': [o.strip() for o in os.getenv('CORS_ORIGINS', 'http://localhost:5173').split(',') if o.strip()],
    'log_level': os.getenv('LOG_LEVEL', 'INFO').upper(),
    'title_max_length': int(os.getenv('TITLE_MAX_LENGTH', 200)),
}
