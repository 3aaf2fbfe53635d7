"""
API Module Registry
===================

API modules are plain Python files in the configured APIS_DIR. The file
stem is the API name, exposed as ``/api/config.<name>``. A module may
define:

    config      dict: name, description, params, usage, methods
    get, post, put, patch, delete
                verb handlers, called as handler(params, request, response)
    api         generic fallback handler
    execute     second generic fallback handler
    home_page   widget markup for the home page, or a callable(user)
                returning it

The registry is populated once at startup and refreshed with reload().
With hot reload enabled every lookup re-reads the file from disk.
"""

import importlib
import importlib.machinery
import importlib.util
import os
import re
from typing import Callable, Dict, List, Optional

from bulletin.core import (
    logger, NotFoundError, MethodNotAllowedError, BadRequestError, HandlerError,
)

VERBS = ('get', 'post', 'put', 'patch', 'delete')

# Handler lookup order after the verb-named handler
FALLBACK_HANDLERS = ('api', 'execute')

# Parameters come from the query string for these verbs, from the body otherwise
QUERY_VERBS = ('get', 'delete')

_VALID_NAME = re.compile(r'^[A-Za-z0-9][A-Za-z0-9_-]*$')


class _SourceOnlyLoader(importlib.machinery.SourceFileLoader):
    """Compiles straight from the .py file; never reads or writes __pycache__."""

    def get_code(self, fullname):
        return self.source_to_code(self.get_data(self.path), self.path)


class ApiModule:
    """Handler set loaded from one API module file."""

    def __init__(self, name, path=None, config=None, handlers=None, home_page=None):
        self.name = name
        self.path = path
        self.config = config if isinstance(config, dict) else {}
        self.handlers: Dict[str, Callable] = {
            key: fn for key, fn in (handlers or {}).items() if callable(fn)
        }
        self.home_page = home_page

    @classmethod
    def load(cls, name, path):
        """Import the module file from scratch (never from sys.modules)"""
        module_name = f"bulletin_api_{name.replace('-', '_')}"
        spec = importlib.util.spec_from_file_location(
            module_name, path, loader=_SourceOnlyLoader(module_name, path),
        )
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot load API module from {path}")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)

        handlers = {}
        for key in VERBS + FALLBACK_HANDLERS:
            fn = getattr(module, key, None)
            if callable(fn):
                handlers[key] = fn

        return cls(
            name,
            path=path,
            config=getattr(module, 'config', None),
            handlers=handlers,
            home_page=getattr(module, 'home_page', None),
        )

    @property
    def allowed_methods(self) -> Optional[List[str]]:
        methods = self.config.get('methods')
        if methods is None:
            return None
        return [str(m).lower() for m in methods]

    def allows(self, verb):
        allowed = self.allowed_methods
        return allowed is None or verb in allowed

    def resolve_handler(self, verb):
        """Verb-named handler, then ``api``, then ``execute``, else None"""
        for key in (verb,) + FALLBACK_HANDLERS:
            handler = self.handlers.get(key)
            if handler is not None:
                return handler
        return None

    def render_widget(self, user=None):
        """Widget markup; may raise if the module's generator fails"""
        if callable(self.home_page):
            return self.home_page(user) or ''
        if isinstance(self.home_page, str):
            return self.home_page
        return ''

    def __repr__(self):
        return f"<ApiModule {self.name} handlers={sorted(self.handlers)}>"


class ApiRegistry:
    """Name -> ApiModule mapping backed by a directory of module files."""

    def __init__(self, apis_dir=None, hot_reload=False):
        self.apis_dir = apis_dir
        self.hot_reload = hot_reload
        self._modules: Dict[str, ApiModule] = {}

    def init_app(self, app):
        self.apis_dir = app.config.get('APIS_DIR', self.apis_dir)
        self.hot_reload = bool(app.config.get('API_HOT_RELOAD', self.hot_reload))
        app.extensions['bulletin_apis'] = self
        self.reload()

    # ----- Discovery -----

    def _path_for(self, name):
        return os.path.join(self.apis_dir, f"{name}.py")

    def discover(self):
        """Module names present on disk, sorted"""
        if not self.apis_dir or not os.path.isdir(self.apis_dir):
            return []
        names = []
        for filename in os.listdir(self.apis_dir):
            stem, ext = os.path.splitext(filename)
            if ext == '.py' and not stem.startswith('_') and _VALID_NAME.match(stem):
                names.append(stem)
        return sorted(names)

    def _load(self, name):
        try:
            return ApiModule.load(name, self._path_for(name))
        except Exception as e:
            logger.log_error_with_traceback('api', e, {'module': name})
            return None

    def reload(self):
        """Re-read every module from disk; returns the names now loaded"""
        importlib.invalidate_caches()
        modules = {}
        for name in self.discover():
            api_module = self._load(name)
            if api_module is not None:
                modules[name] = api_module
        self._modules = modules
        logger.info('api', f"Loaded {len(modules)} API module(s)", {'modules': sorted(modules)})
        return sorted(modules)

    # ----- Lookup -----

    def names(self):
        if self.hot_reload:
            return self.discover()
        return sorted(self._modules)

    def get(self, name) -> ApiModule:
        if not name or not _VALID_NAME.match(name):
            raise NotFoundError('API not found')

        if self.hot_reload:
            if not os.path.isfile(self._path_for(name)):
                self._modules.pop(name, None)
                raise NotFoundError('API not found')
            api_module = self._load(name)
            if api_module is None:
                raise NotFoundError('API not found')
            self._modules[name] = api_module
            return api_module

        api_module = self._modules.get(name)
        if api_module is None:
            raise NotFoundError('API not found')
        return api_module

    def modules(self):
        loaded = []
        for name in self.names():
            try:
                loaded.append(self.get(name))
            except NotFoundError:
                continue
        return loaded

    def configs(self):
        return {m.name: m.config for m in self.modules()}

    # ----- Dispatch -----

    def dispatch(self, name, verb, params, request, response):
        """
        Run the handler for ``verb`` on API ``name``.

        Raises NotFoundError, MethodNotAllowedError, BadRequestError, or
        HandlerError wrapping whatever the handler raised.
        """
        verb = verb.lower()
        api_module = self.get(name)
        handler = api_module.resolve_handler(verb)

        if not api_module.allows(verb):
            raise MethodNotAllowedError(f"Method {verb.upper()} not allowed for this API.")
        if handler is None:
            raise BadRequestError(f"No {verb} handler for this API.")

        try:
            return handler(params, request, response)
        except Exception as e:
            raise HandlerError(str(e) or type(e).__name__, original=e) from e

    # ----- Widgets -----

    def widgets(self, user=None):
        """Markup from every module's home_page; a failing widget contributes nothing"""
        rendered = []
        for api_module in self.modules():
            if api_module.home_page is None:
                continue
            try:
                markup = api_module.render_widget(user)
            except Exception as e:
                logger.log_error_with_traceback('api', e, {'widget': api_module.name})
                continue
            if markup:
                rendered.append(markup)
        return rendered
