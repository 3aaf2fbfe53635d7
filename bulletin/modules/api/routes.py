from flask import current_app, flash, jsonify, make_response, redirect, render_template, request, url_for

from bulletin.core import BulletinError, HandlerError, logger
from bulletin.modules.auth import admin_required, login_required
from . import api_bp, api_pages_bp
from .registry import QUERY_VERBS


def get_registry():
    return current_app.extensions['bulletin_apis']


def _params_for(verb):
    """Query string for GET/DELETE, parsed body for the rest"""
    if verb in QUERY_VERBS:
        return request.args.to_dict()
    if request.is_json:
        body = request.get_json(silent=True)
        return body if body is not None else {}
    return request.form.to_dict()


@api_bp.errorhandler(BulletinError)
def handle_api_error(e):
    if isinstance(e, HandlerError) and e.original is not None:
        logger.log_error_with_traceback('api', e.original, {'path': request.path})
    logger.log_api_call('api', request.path, request.method, e.status_code, {'error': e.message})
    return jsonify(e.to_dict()), e.status_code


# ===== JSON endpoints =====

@api_bp.route('', methods=['GET'])
def list_apis():
    """Every loaded API module with its config"""
    return jsonify(get_registry().configs())


@api_bp.route('/info.<apiname>', methods=['GET'])
def api_info(apiname):
    """Declared config of one API module ({} when it declares none)"""
    return jsonify(get_registry().get(apiname).config)


@api_bp.route('/config.<apiname>', methods=['GET', 'POST', 'PUT', 'PATCH', 'DELETE'])
def execute_api(apiname):
    """Dispatch the request verb to the module's handler"""
    verb = 'get' if request.method == 'HEAD' else request.method.lower()
    params = _params_for(verb)

    # Handlers may set headers or cookies on this response
    response = make_response()
    result = get_registry().dispatch(apiname, verb, params, request, response)

    try:
        body = current_app.json.dumps({'result': result})
    except (TypeError, ValueError) as e:
        raise HandlerError(f"API returned a non-JSON result: {e}", original=e) from e

    response.set_data(body)
    response.mimetype = 'application/json'
    response.status_code = 200

    logger.log_api_call('api', request.path, request.method, 200)
    return response


# ===== Pages =====

@api_pages_bp.route('/apitest')
@login_required
def apitest(auth):
    """List API modules with a small in-page client"""
    registry = get_registry()
    return render_template('api/apitest.html', apis=registry.names(), configs=registry.configs())


@api_pages_bp.route('/admin/apis/reload', methods=['POST'])
@admin_required
def reload_apis(auth):
    """Re-read every API module from disk"""
    names = get_registry().reload()
    logger.log_user_action('api', 'reload modules', details={'modules': names})
    flash(f"Reloaded {len(names)} API module(s)", 'success')
    return redirect(url_for('admin.dashboard'))
