import os

from dotenv import load_dotenv

from config import get_config
from post_manager import create_app

load_dotenv()
# Served by gunicorn; FLASK_ENV=development lets `flask --app wsgi db ...` run locally
app = create_app(config_class=get_config(os.environ.get('FLASK_ENV', 'production')))
