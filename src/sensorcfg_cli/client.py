import logging
from typing import Optional, Union

import requests
from urllib3.exceptions import NameResolutionError

from sensorcfg_cli.utils import Config, SensorConfig, SubmitResult

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}

# Exit statuses curl reports for the same failures.
EXIT_FAILED = 1
EXIT_MALFORMED_URL = 3
EXIT_RESOLVE_HOST = 6
EXIT_CONNECT = 7
EXIT_TIMEOUT = 28
EXIT_SSL = 35


class TransportError(Exception):
    """The request never produced an HTTP response."""

    def __init__(self, message: str, exit_code: int = EXIT_FAILED):
        super().__init__(message)
        self.exit_code = exit_code


def normalize_url(endpoint: str) -> str:
    """Prepend http:// to scheme-less endpoints like ``localhost:3000/path``."""
    endpoint = endpoint.strip()
    if "://" not in endpoint:
        endpoint = "http://" + endpoint
    return endpoint


def _is_dns_failure(exc: requests.exceptions.ConnectionError) -> bool:
    # requests wraps urllib3's MaxRetryError, whose reason is the real cause
    cause = exc.args[0] if exc.args else None
    reason = getattr(cause, "reason", cause)
    return isinstance(reason, NameResolutionError)


def _translate(exc: requests.RequestException, url: str) -> TransportError:
    if isinstance(exc, (requests.exceptions.MissingSchema,
                        requests.exceptions.InvalidSchema,
                        requests.exceptions.InvalidURL)):
        return TransportError(f"Malformed URL {url}: {exc}", EXIT_MALFORMED_URL)
    if isinstance(exc, requests.exceptions.Timeout):
        return TransportError(f"Request to {url} timed out: {exc}", EXIT_TIMEOUT)
    if isinstance(exc, requests.exceptions.SSLError):
        return TransportError(f"TLS handshake with {url} failed: {exc}", EXIT_SSL)
    if isinstance(exc, requests.exceptions.ConnectionError):
        if _is_dns_failure(exc):
            return TransportError(f"Could not resolve host for {url}: {exc}", EXIT_RESOLVE_HOST)
        return TransportError(f"Failed to connect to {url}: {exc}", EXIT_CONNECT)
    return TransportError(f"Request to {url} failed: {exc}", EXIT_FAILED)


class HttpClient:
    def __init__(self, cfg: Config):
        self.cfg = cfg

    def submit(self, config: Union[SensorConfig, str], endpoint: Optional[str] = None) -> SubmitResult:
        """
        PUT a sensor configuration to the config endpoint.

        ``config`` is either a SensorConfig or an already serialized JSON body,
        which is sent as-is. Any HTTP status counts as a completed exchange;
        only transport failures raise TransportError. One attempt, no retries.
        """
        body = config.to_json() if isinstance(config, SensorConfig) else config
        return self._request("PUT", endpoint if endpoint is not None else self.cfg.endpoint, body)

    def fetch_status(self, endpoint: Optional[str] = None) -> SubmitResult:
        return self._request("GET", endpoint if endpoint is not None else self.cfg.status_endpoint)

    def _request(self, method: str, endpoint: str, body: Optional[str] = None) -> SubmitResult:
        url = normalize_url(endpoint)
        data = body.encode("utf-8") if body is not None else None
        headers = JSON_HEADERS if data is not None else None
        logger.debug("%s %s (%d bytes)", method, url, len(data or b""))

        with requests.Session() as session:
            try:
                resp = session.request(
                    method,
                    url,
                    data=data,
                    headers=headers,
                    timeout=self.cfg.request_timeout,
                    verify=self.cfg.verify_tls,
                )
            except requests.RequestException as e:
                err = _translate(e, url)
                logger.debug("%s %s failed: %r", method, url, e)
                raise err from e

        logger.debug("%s %s -> %s", method, url, resp.status_code)
        return SubmitResult(
            method=method,
            url=url,
            status_code=resp.status_code,
            text=resp.text,
            content=resp.content,
            headers=dict(resp.headers),
        )
