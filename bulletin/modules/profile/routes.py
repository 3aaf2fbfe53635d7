from flask import render_template, request

from bulletin.core import logger
from bulletin.modules.auth import AuthDatabase, login_required
from . import profile_bp


@profile_bp.route('/profile', methods=['GET'])
@login_required
def profile(auth):
    return render_template('profile/profile.html', user=auth.user, error=None)


@profile_bp.route('/profile', methods=['POST'])
@login_required
def update_profile(auth):
    """Replace the whole profile with the submitted fields"""
    user = AuthDatabase.update_profile(
        auth.user,
        name=request.form.get('name', '').strip(),
        bio=request.form.get('bio', '').strip(),
        avatar=request.form.get('avatar', '').strip(),
    )
    logger.log_user_action('profile', 'update profile')
    return render_template('profile/profile.html', user=user, error='Profile updated')
