from flask import Blueprint, current_app, render_template

bp = Blueprint('main', __name__)


@bp.route('/')
def index():
    """Post manager page; the list and form talk to the /posts API"""
    return render_template('index.html', app_version=current_app.config.get('VERSION', '1.0.0'))
