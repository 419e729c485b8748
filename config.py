# config.py
import os
from dotenv import load_dotenv

# Load a local .env file if one exists
load_dotenv()

# Fetch Configuration
USER_AGENT = os.environ.get(
    'RECIPE_EXTRACTOR_USER_AGENT',
    'Mozilla/5.0 (compatible; RecipeExtractor/1.0; +https://github.com/recipe-extractor/recipe-extractor)'
)
ACCEPT = 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8'
ACCEPT_LANGUAGE = os.environ.get('RECIPE_EXTRACTOR_ACCEPT_LANGUAGE', 'en-US,en;q=0.9')
REQUEST_TIMEOUT = float(os.environ.get('RECIPE_EXTRACTOR_TIMEOUT', '15'))

# Extraction limits
MAX_NORMALIZED_STEPS = 60
HEURISTIC_MAX_STEPS = 30
HEURISTIC_SIBLING_GUARD = 50
HEURISTIC_STEP_SIBLING_GUARD = 30

# Logging
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_FILE = 'recipe_extractor.log'
LOG_DIR = os.getenv('LOG_DIR', 'logs')
