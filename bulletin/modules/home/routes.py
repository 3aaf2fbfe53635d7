import re

from flask import current_app, render_template
from markupsafe import Markup, escape

from bulletin.modules.auth import with_auth
from bulletin.modules.news import NewsDatabase
from . import home_bp


def format_content(content):
    """Escape article text and turn blank-line separated blocks into paragraphs"""
    if not content:
        return Markup('')
    blocks = re.split(r'\n\s*\n', str(escape(content)).strip())
    paragraphs = ['<p>{}</p>'.format(block.replace('\n', '<br>')) for block in blocks if block.strip()]
    return Markup(''.join(paragraphs))


@home_bp.app_template_filter('format_content')
def format_content_filter(content):
    return format_content(content)


@home_bp.route('/')
@with_auth
def index(auth):
    """Home page: news feed and API widgets"""
    news = NewsDatabase.get_all_articles()
    widgets = current_app.extensions['bulletin_apis'].widgets(auth.user)
    return render_template('home/index.html', news=news, widgets=widgets)
