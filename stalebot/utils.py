"""
Generic utilities.
"""

import functools
import hmac
import os
import time
from functools import wraps
from hashlib import sha1, sha256
from time import sleep as retry_sleep   # so that we can patch it for tests.

import requests
from flask import jsonify, request, Response, url_for
from urlobject import URLObject

from stalebot import logger
from stalebot.auth import get_github_session


def _check_auth(username, password):
    """
    Checks if a username / password combination is valid.
    """
    return (
        username == os.environ.get('HTTP_BASIC_AUTH_USERNAME') and
        password == os.environ.get('HTTP_BASIC_AUTH_PASSWORD')
    )

def _authenticate():
    """
    Sends a 401 response that enables basic auth
    """
    return Response(
        'Could not verify your access level for that URL.\n'
        'You have to login with proper credentials', 401,
        {'WWW-Authenticate': 'Basic realm="Login Required"'}
    )

def requires_auth(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        auth = request.authorization
        if not auth or not _check_auth(auth.username, auth.password):
            return _authenticate()
        return f(*args, **kwargs)
    return decorated


class RequestFailed(Exception):
    pass

def log_check_response(response, raise_for_status=True):
    """
    Logs HTTP request and response at debug level and checks if it succeeded.

    Arguments:
        response (requests.Response)
        raise_for_status (bool): if True, call raise_for_status on the response
            also.
    """
    msg = "Request: {0.method} {0.url}: {0.body!r}".format(response.request)
    logger.debug(msg)
    msg = "Response: {0.status_code} {0.reason!r} for {0.url}: {0.content!r}".format(response)
    logger.debug(msg)
    if raise_for_status:
        try:
            response.raise_for_status()
        except Exception as exc:
            req = response.request
            raise RequestFailed(f"HTTP request failed: {req.method} {req.url}. Response body: {response.content}") from exc


def log_rate_limit():
    """Get stats from GitHub about the current rate limit, and log them."""
    rate = get_github_session().get("/rate_limit").json()['rate']
    reset = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(rate['reset']))
    logger.info(f"Rate limit: {rate['limit']}, used {rate['used']}, remaining {rate['remaining']}. Reset is at {reset}")


SIGNATURE_DIGESTS = {
    "sha1": sha1,
    "sha256": sha256,
}

def is_valid_payload(secret: str, signature: str, payload: bytes) -> bool:
    """
    Ensure payload is valid according to signature.

    Make sure the payload hashes to the signature as calculated using
    the shared secret.  GitHub sends "sha1=..." in X-Hub-Signature and
    "sha256=..." in X-Hub-Signature-256; either is accepted.

    Arguments:
        secret (str): The shared secret
        signature (str): Signature as calculated by the server, sent in
            the request
        payload (bytes): The request payload

    Returns:
        bool: Is the payload legit?
    """
    if not secret or not signature:
        return False
    algorithm, _, _ = signature.partition("=")
    digestmod = SIGNATURE_DIGESTS.get(algorithm)
    if digestmod is None:
        return False
    mac = hmac.new(secret.encode(), msg=payload, digestmod=digestmod)
    digest = f"{algorithm}={mac.hexdigest()}"
    return hmac.compare_digest(digest.encode(), signature.encode())


def retry_get(session, url, **kwargs):
    """
    Get a URL, but retry if it returns a 404.

    GitHub has been known to send us an event about an issue, and then return
    a 404 when we ask for the comments on it.  This will retry with a pause to
    get the real answer.

    """
    tries = 10
    while True:
        resp = session.get(url, **kwargs)
        if resp.status_code == 404:
            tries -= 1
            if tries == 0:
                break
            retry_sleep(.5)
            continue
        else:
            break
    return resp


def paginated_get(url, session=None, limit=None, per_page=100, **kwargs):
    """
    Retrieve all objects from a paginated API.

    Assumes that the pagination is specified in the "link" header, like
    Github's v3 API.

    The `limit` describes how many results you'd like returned.  You might get
    more than this, but you won't make more requests to the server once this
    limit has been exceeded.  For example, paginating by 100, if you set a
    limit of 250, three requests will be made, and you'll get 300 objects.

    """
    url = URLObject(url).set_query_param('per_page', str(per_page))
    limit = limit or 999999999
    session = session or requests.Session()
    returned = 0
    while url:
        resp = retry_get(session, url, **kwargs)
        log_check_response(resp)
        for item in resp.json():
            yield item
            returned += 1
        url = None
        if resp.links and returned < limit:
            url = resp.links.get("next", {}).get("url", "")


def _page_number(url):
    return int(URLObject(url).query_dict.get("page", 1))


def reverse_paginated_get(url, session=None, per_page=100, **kwargs):
    """
    Like ``paginated_get``, but produce the objects last-to-first.

    GitHub lists issue comments oldest first.  After the first request, this
    jumps to the "last" page and follows "prev" links back toward the start,
    so a caller looking for a recent object can stop early without fetching
    the whole list.
    """
    url = URLObject(url).set_query_param('per_page', str(per_page))
    session = session or requests.Session()
    resp = retry_get(session, url, **kwargs)
    log_check_response(resp)
    first_page = resp.json()
    last = resp.links.get("last") if resp.links else None
    if last:
        page_url = last["url"]
        while page_url:
            resp = retry_get(session, page_url, **kwargs)
            log_check_response(resp)
            yield from reversed(resp.json())
            prev_url = resp.links.get("prev", {}).get("url")
            if not prev_url or _page_number(prev_url) <= 1:
                break
            page_url = prev_url
    yield from reversed(first_page)


# A list of all the memoized functions, so that `clear_memoized_values` can
# clear them all.
_memoized_functions = []

def memoize(func):
    """Cache the value returned by a function call forever."""
    func = functools.lru_cache()(func)
    _memoized_functions.append(func)
    return func

def clear_memoized_values():
    """Clear all the values saved by @memoize, to ensure isolated tests."""
    for func in _memoized_functions:
        func.cache_clear()


def minimal_wsgi_environ():
    values = {
        "HTTP_HOST", "SERVER_NAME", "SERVER_PORT", "REQUEST_METHOD",
        "SCRIPT_NAME", "PATH_INFO", "QUERY_STRING", "wsgi.url_scheme",
    }
    return {key: value for key, value in request.environ.items()
            if key in values}


def queue_task(task, *args, **kwargs):
    """
    Queue a task to run in the background via Celery.

    Returns the HTTP response to return from a view.
    """
    result = task.delay(*args, wsgi_environ=minimal_wsgi_environ(), **kwargs)
    status_url = url_for("tasks.status", task_id=result.id, _external=True)
    logger.info(f"Job status URL: {status_url}")
    resp = jsonify({"message": "queued", "status_url": status_url})
    resp.status_code = 202
    resp.headers["Location"] = status_url
    return resp


def sentry_extra_context(data_dict):
    """Apply the keys and values from data_dict to the Sentry extra context."""
    from sentry_sdk import get_current_scope
    scope = get_current_scope()
    for key, value in data_dict.items():
        scope.set_extra(key, value)
