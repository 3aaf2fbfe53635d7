from flask import current_app, render_template

from bulletin.core import logger
from bulletin.modules.auth import admin_required
from . import dashboard_bp

RECENT_LOG_LIMIT = 25


def render_dashboard(auth, error=None, form=None):
    """Render the admin panel; shared with the news form's error path"""
    registry = current_app.extensions['bulletin_apis']
    return render_template(
        'dashboard/admin.html',
        user=auth.user,
        apis=registry.configs(),
        hot_reload=registry.hot_reload,
        logs=logger.recent(RECENT_LOG_LIMIT),
        error=error,
        form=form or {},
    )


@dashboard_bp.route('', methods=['GET'])
@admin_required
def dashboard(auth):
    """Admin panel"""
    return render_dashboard(auth)
