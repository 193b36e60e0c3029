"""Common utilities for ``swfini``."""

import sys
import inspect
import threading
import typing as T
import logging as lg
import functools as ft
from collections import abc

import boto3
from botocore import client as botocore_client

_logger = lg.getLogger(__name__)
lg.getLogger("botocore").setLevel(lg.WARNING)
MAX_NAME_LENGTH = 256
INVALID_NAME_CHARACTERS = "\n\t:/|"
DEBUG = "pytest" in sys.modules
JSONable = T.Union[None, bool, str, int, float, list, T.Dict[str, T.Any]]


def setup_logging(level: int = None):
    """Setup logging for ``swfini``, if logs would otherwise be ignored.

    Args:
        level: logging level (see ``logging``), default: leave unchanged
    """

    lg.basicConfig(
        format="%(asctime)s [%(levelname)8s] %(name)s: %(message)s",
        level=level)
    if level is not None:
        lg.getLogger().setLevel(level)
        [h.setLevel(level) for h in lg.getLogger().handlers]


def cached_property(fn: T.Callable) -> property:
    """Decorate a method as a cached property.

    The wrapped method's result is stored in the instance's ``__cache__``
    dictionary, with the method's name as key.

    Args:
        fn: method to decorate

    Returns:
        cached property
    """

    name = fn.__name__

    def _ensure_cache(self):
        if not hasattr(self, "__cache__"):
            self.__cache__ = {}

    @ft.wraps(fn)
    def wrapped(self):
        _ensure_cache(self)
        if name not in self.__cache__:
            self.__cache__[name] = fn(self)
        return self.__cache__[name]

    if DEBUG:  # for testing
        def fset(self, value):
            _ensure_cache(self)
            self.__cache__[name] = value

        def fdel(self):
            _ensure_cache(self)
            del self.__cache__[name]

        return property(wrapped, fset=fset, fdel=fdel)

    return property(wrapped)


def assert_valid_name(name: str):
    """Ensure a valid name of domain, task-list, activity or workflow.

    Args:
        name: name to analyse

    Raises:
        ValueError: name is invalid
    """

    if not name:
        raise ValueError("Name is empty")
    if len(name) > MAX_NAME_LENGTH:
        raise ValueError("Name is too long: '%s'" % name)
    if any(c in name for c in INVALID_NAME_CHARACTERS):
        raise ValueError("Name contains invalid characters: '%s'" % name)
    if "arn" in name:
        raise ValueError("Name contains reserved string 'arn': '%s'" % name)


def collect_paginated(
        fn: T.Callable[..., T.Dict[str, JSONable]],
        token_key: str = "nextPageToken",
        **kwargs
) -> T.Dict[str, JSONable]:
    """Call SWF API paginated endpoint.

    Calls ``fn`` until ``token_key`` isn't in the return value, collating
    results: list values of later pages are appended to the first page's.

    Args:
        fn: SWF API function
        token_key: name of pagination token in requests and responses
        **kwargs: arguments to ``fn``

    Returns:
        combined results of paginated API calls
    """

    result = fn(**kwargs)
    while result.get(token_key):
        kwargs[token_key] = result.pop(token_key)
        page = fn(**kwargs)
        [result[k].extend(v) for k, v in page.items() if isinstance(v, list)]
        if token_key in page:
            result[token_key] = page[token_key]
    return result


def truncate(text: str, length: int) -> str:
    """Shorten text to fit an API field.

    Args:
        text: text to shorten
        length: maximum length

    Returns:
        text, with its end replaced by an ellipsis if too long
    """

    if len(text) <= length:
        return text
    return text[:length - 3] + "..."


def easy_repr(instance) -> str:
    """Use attributes to generate a string representation.

    Set class ``__repr__ = easy_repr``.

    Args:
        instance: object to get representation of

    Returns:
        object representation
    """

    sig = inspect.signature(type(instance))
    params = sig.parameters.values()

    # Can't yet process var-args
    has_var_pos = any(p.kind == p.VAR_POSITIONAL for p in params)
    has_var_kw = any(p.kind == p.VAR_KEYWORD for p in params)
    if has_var_pos or has_var_kw:
        raise RuntimeError("Can't use `easy_repr` with var-args yet")

    # Separate difference kinds of parameters
    params_pos = [p for p in params if p.kind == p.POSITIONAL_ONLY]
    params_any = [p for p in params if p.kind == p.POSITIONAL_OR_KEYWORD]
    params_kw = [p for p in params if p.kind == p.KEYWORD_ONLY]

    params_any_required = [p for p in params_any if p.default == p.empty]
    params_any_optional = [p for p in params_any if p.default != p.empty]
    params_unnamed = params_pos + params_any_required
    params_named = params_any_optional + params_kw

    arg_strs = []
    for param in params_unnamed:
        attr_val = getattr(instance, param.name)
        arg_str = repr(attr_val)
        if len(arg_str) > 80 and isinstance(attr_val, abc.Sized):
            arg_str = "len %d" % len(attr_val)
        arg_strs.append(arg_str)
    for param in params_named:
        attr_val = getattr(instance, param.name)
        if param.default != param.empty and attr_val == param.default:
            continue
        arg_str = repr(attr_val)
        if len(arg_str) > 80 and isinstance(attr_val, abc.Sized):
            arg_str = "len(%s)=%d" % (param.name, len(attr_val))
        else:
            arg_str = "%s=%s" % (param.name, arg_str)
        arg_strs.append(arg_str)

    args_str = ", ".join(arg_strs)
    type_name = type(instance).__name__
    return "%s(%s)" % (type_name, args_str)


class AWSSession:
    """AWS session, for preconfigure communication with AWS.

    Client creation is serialised, as ``boto3.Session`` can't be shared
    between threads creating clients.

    Args:
        session: session to use
    """

    def __init__(self, session: boto3.Session = None):
        self.session = session or boto3.Session()
        self._client_lock = threading.Lock()

    def __str__(self):
        return "<region: %s>" % self.region

    __repr__ = easy_repr

    def client(
            self,
            service_name: str,
            **kwargs
    ) -> botocore_client.BaseClient:
        """Create a service client.

        Args:
            service_name: AWS service name
            **kwargs: client creation keyword arguments, eg ``config``

        Returns:
            new client
        """

        with self._client_lock:
            return self.session.client(service_name, **kwargs)

    @cached_property
    def swf(self) -> botocore_client.BaseClient:
        """Simple Workflow Service client."""
        return self.client("swf")

    @cached_property
    def cloudwatch(self) -> botocore_client.BaseClient:
        """CloudWatch client."""
        return self.client("cloudwatch")

    @cached_property
    def region(self) -> str:
        """Session AWS region."""
        return self.session.region_name
