from flask import request, redirect, url_for

from bulletin.core import logger
from bulletin.modules.auth import admin_required
from . import news_bp
from .database import NewsDatabase


@news_bp.route('/news', methods=['POST'])
@admin_required
def create_news(auth):
    """Post a news article (admin only)"""
    title = request.form.get('title', '')
    content = request.form.get('content', '')

    try:
        article = NewsDatabase.create_article(title, content, auth.user)
    except ValueError as e:
        # Import here to avoid circular imports
        from bulletin.modules.dashboard.routes import render_dashboard
        return render_dashboard(auth, error=str(e), form={'title': title, 'content': content}), 400

    logger.log_user_action('news', 'create article', details={'id': article.id, 'title': article.title})
    return redirect(url_for('home.index'))
