"""
Dynamic API registry and the /api/config.<name> dispatch endpoint.
"""

import os

import pytest

from bulletin.core import NotFoundError, MethodNotAllowedError, BadRequestError, HandlerError
from bulletin.modules.api import ApiModule, ApiRegistry

from conftest import make_app, write_api_module

VERBS = ['get', 'post', 'put', 'patch', 'delete']


def _call(client, verb, path, **kwargs):
    return getattr(client, verb)(path, **kwargs)


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

def test_get_handler_result_is_wrapped(client):
    response = client.get('/api/config.echo')

    assert response.status_code == 200
    assert response.get_json() == {'result': {'x': 1}}


@pytest.mark.parametrize('verb', VERBS)
def test_unknown_module_is_404_for_every_verb(client, verb):
    response = _call(client, verb, '/api/config.zzz')

    assert response.status_code == 404
    assert response.get_json() == {'error': 'API not found'}


def test_method_allow_list_is_enforced_even_with_a_handler(client):
    response = client.post('/api/config.getonly')

    assert response.status_code == 405
    assert response.get_json() == {'error': 'Method POST not allowed for this API.'}
    assert client.get('/api/config.getonly').get_json() == {'result': 'got'}


def test_verb_handler_takes_priority_over_fallbacks(client):
    # echo only has get; the other verbs have nothing to fall back to
    assert client.get('/api/config.echo').status_code == 200
    response = client.post('/api/config.echo')
    assert response.status_code == 400
    assert response.get_json() == {'error': 'No post handler for this API.'}


@pytest.mark.parametrize('verb', VERBS)
def test_api_fallback_before_execute(client, verb):
    response = _call(client, verb, '/api/config.fallback')
    assert response.get_json() == {'result': {'via': 'api'}}


def test_execute_is_last_fallback(client):
    assert client.patch('/api/config.execonly').get_json() == {'result': {'via': 'execute'}}


def test_no_handler_is_400(client):
    response = client.get('/api/config.nohandler')

    assert response.status_code == 400
    assert response.get_json() == {'error': 'No get handler for this API.'}


def test_handler_exception_is_500_with_message_only(client):
    response = client.post('/api/config.boom')

    assert response.status_code == 500
    assert response.get_json() == {'error': 'kaboom'}
    assert b'Traceback' not in response.data


def test_unserialisable_result_is_json_500(app, client, apis_dir):
    write_api_module(apis_dir, 'setresult', '''
        def get(params, request, response):
            return {1, 2}
    ''')
    with app.app_context():
        app.extensions['bulletin'].apis.reload()

    response = client.get('/api/config.setresult')

    assert response.status_code == 500
    assert response.is_json
    assert response.get_json()['error'].startswith('API returned a non-JSON result')


def test_handler_exception_is_logged_with_traceback(app, client):
    client.post('/api/config.boom')

    from bulletin.core import logger
    with app.app_context():
        errors = logger.recent(level='ERROR')

    traced = [e for e in errors if e['message'] == 'Exception occurred: ValueError']
    assert traced
    assert 'Traceback' in traced[0]['details']


def test_query_params_for_get_and_delete(client):
    for verb in ('get', 'delete'):
        response = _call(client, verb, '/api/config.params?q=news&page=2', json={'ignored': True})
        assert response.get_json()['result']['params'] == {'q': 'news', 'page': '2'}


def test_body_params_for_post_put_patch(client):
    assert client.post('/api/config.params?q=ignored', json={'prompt': 'hi', 'n': 3}).get_json() == {
        'result': {'method': 'POST', 'params': {'prompt': 'hi', 'n': 3}},
    }
    assert client.put('/api/config.params', data={'a': '1'}).get_json()['result']['params'] == {'a': '1'}
    assert client.patch('/api/config.params').get_json()['result']['params'] == {}


def test_handler_can_set_response_headers(client):
    response = client.get('/api/config.headers')

    assert response.headers['X-Api-Module'] == 'headers'
    assert response.get_json() == {'result': 'ok'}


def test_head_is_treated_as_get(client):
    assert client.head('/api/config.echo').status_code == 200


def test_cors_headers_on_api(client):
    response = client.get('/api/config.echo', headers={'Origin': 'http://example.com'})
    assert response.headers.get('Access-Control-Allow-Origin') in ('*', 'http://example.com')


# ---------------------------------------------------------------------------
# Config endpoints
# ---------------------------------------------------------------------------

def test_info_returns_declared_config(client):
    response = client.get('/api/info.getonly')

    assert response.status_code == 200
    assert response.get_json() == {'name': 'getonly', 'methods': ['get']}


def test_info_without_config_is_empty_object(client):
    assert client.get('/api/info.echo').get_json() == {}


def test_info_unknown_module_is_404(client):
    assert client.get('/api/info.zzz').status_code == 404


def test_list_apis(client):
    data = client.get('/api').get_json()

    assert data['nohandler'] == {'name': 'nohandler', 'description': 'Metadata only'}
    assert data['echo'] == {}


# ---------------------------------------------------------------------------
# Reload behaviour
# ---------------------------------------------------------------------------

def test_edits_are_invisible_until_reload(app, client, apis_dir):
    write_api_module(apis_dir, 'echo', '''
        def get(params, request, response):
            return {'x': 2}
    ''')

    assert client.get('/api/config.echo').get_json() == {'result': {'x': 1}}

    with app.app_context():
        app.extensions['bulletin'].apis.reload()

    assert client.get('/api/config.echo').get_json() == {'result': {'x': 2}}


def test_modules_load_from_source_without_bytecode_cache(app, apis_dir):
    path = write_api_module(apis_dir, 'cached', '''
        VALUE = 'a'

        def get(params, request, response):
            return VALUE
    ''')
    first = ApiModule.load('cached', path)

    # Same size, same second: only a fresh compile sees the change
    write_api_module(apis_dir, 'cached', '''
        VALUE = 'b'

        def get(params, request, response):
            return VALUE
    ''')
    second = ApiModule.load('cached', path)

    assert first.handlers['get']({}, None, None) == 'a'
    assert second.handlers['get']({}, None, None) == 'b'
    assert not os.path.exists(os.path.join(apis_dir, '__pycache__'))


def test_hot_reload_reads_modules_on_every_request(tmp_db_dir, apis_dir):
    app = make_app(tmp_db_dir, apis_dir, API_HOT_RELOAD=True)
    client = app.test_client()

    write_api_module(apis_dir, 'fresh', '''
        def get(params, request, response):
            return 'v1'
    ''')
    assert client.get('/api/config.fresh').get_json() == {'result': 'v1'}

    write_api_module(apis_dir, 'fresh', '''
        def get(params, request, response):
            return 'v2'
    ''')
    assert client.get('/api/config.fresh').get_json() == {'result': 'v2'}

    os.remove(os.path.join(apis_dir, 'fresh.py'))
    assert client.get('/api/config.fresh').status_code == 404


def test_broken_module_is_skipped(app, apis_dir):
    write_api_module(apis_dir, 'broken', 'def get(:\n')

    with app.app_context():
        names = app.extensions['bulletin'].apis.reload()

    assert 'broken' not in names
    assert 'echo' in names


def test_discover_ignores_private_and_non_python_files(app, apis_dir):
    write_api_module(apis_dir, '_helpers', 'x = 1\n')
    with open(os.path.join(apis_dir, 'notes.txt'), 'w') as fh:
        fh.write('not a module')

    registry = app.extensions['bulletin'].apis
    names = registry.discover()

    assert '_helpers' not in names
    assert 'notes' not in names
    assert names == sorted(names)


# ---------------------------------------------------------------------------
# Registry units
# ---------------------------------------------------------------------------

def _handler(tag):
    return lambda params, request, response: tag


def test_resolution_order():
    module = ApiModule('m', handlers={
        'post': _handler('post'), 'api': _handler('api'), 'execute': _handler('execute'),
    })

    assert module.resolve_handler('post')(None, None, None) == 'post'
    assert module.resolve_handler('get')(None, None, None) == 'api'

    module = ApiModule('m', handlers={'execute': _handler('execute')})
    assert module.resolve_handler('delete')(None, None, None) == 'execute'

    assert ApiModule('m').resolve_handler('get') is None


def test_non_callable_handlers_are_ignored():
    module = ApiModule('m', handlers={'get': 'not callable'})
    assert module.resolve_handler('get') is None


def test_allow_list_is_case_insensitive():
    module = ApiModule('m', config={'methods': ['GET', 'Post']})

    assert module.allows('get')
    assert module.allows('post')
    assert not module.allows('delete')
    assert ApiModule('m').allows('delete')


def test_dispatch_errors(app):
    registry = app.extensions['bulletin'].apis

    with app.test_request_context('/'):
        with pytest.raises(NotFoundError):
            registry.dispatch('zzz', 'get', {}, None, None)
        with pytest.raises(MethodNotAllowedError):
            registry.dispatch('getonly', 'post', {}, None, None)
        with pytest.raises(BadRequestError):
            registry.dispatch('nohandler', 'get', {}, None, None)
        with pytest.raises(HandlerError) as exc_info:
            registry.dispatch('boom', 'post', {}, None, None)

    assert isinstance(exc_info.value.original, ValueError)
    assert exc_info.value.status_code == 500


def test_invalid_names_are_not_found(app):
    registry = app.extensions['bulletin'].apis

    for name in ('', '../echo', '.echo', 'echo.py'):
        with pytest.raises(NotFoundError):
            registry.get(name)


def test_registry_without_directory_is_empty(app, tmp_db_dir):
    registry = ApiRegistry(apis_dir=os.path.join(tmp_db_dir, 'missing'))

    with app.app_context():
        assert registry.reload() == []
    assert registry.names() == []


def test_widget_rendering(app):
    assert ApiModule('m', home_page='<b>hi</b>').render_widget() == '<b>hi</b>'
    assert ApiModule('m', home_page=lambda user: f'<i>{user}</i>').render_widget('u') == '<i>u</i>'
    assert ApiModule('m').render_widget() == ''

    registry = app.extensions['bulletin'].apis
    with app.app_context():
        widgets = registry.widgets(None)

    assert '<div class="widget">static widget</div>' in widgets
    assert len(widgets) == 2
