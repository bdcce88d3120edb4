"""Base class for service integrations.

It provides a http client with default headers, and requests that retry automatically and come with error handling
"""

import time
from typing import Any, Awaitable, Callable, Optional, Union

from aiohttp import ClientConnectionError, ClientResponse, ClientSession, ClientTimeout, InvalidURL
from yarl import URL

from ..helpers.logger import LOG
from ..helpers.retry import retry
from ..models.health import Health


class ServiceError(Exception):
    """Base class for errors returned by an external service."""

    status_code: int = 500

    def __init__(self, reason: str, status_code: Optional[int] = None) -> None:
        """Class to raise for http errors.

        :param reason: Error message
        :param status_code: HTTP status code
        """
        if status_code is not None:
            self.status_code = status_code
        self.reason = reason
        super().__init__(reason)


class ServiceServerError(ServiceError):
    """Service server errors are retried and reported as a bad gateway."""

    status_code = 502


class ServiceClientError(ServiceError):
    """Service client errors should be raised unmodified."""

    status_code = 400


class ServiceHandler:
    """General service class handler to have similar implementation between services.

    Classes inheriting should provide the service_name and base_url
    """

    def __init__(
        self,
        service_name: str,
        base_url: URL,
        http_client_timeout: Optional[ClientTimeout] = None,
        http_client_headers: Optional[dict[str, str]] = None,
        healthcheck_url: Optional[URL] = None,
        healthcheck_callback: Optional[Callable[[ClientResponse], Awaitable[bool]]] = None,
    ) -> None:
        """Create an instance with an aiohttp client attached.

        :param service_name: Service name used in logs and error messages
        :param base_url: Service base URL
        :param http_client_timeout: Default request timeout
        :param http_client_headers: Headers sent with every request
        :param healthcheck_url: URL that answers with 200 when the service is healthy
        :param healthcheck_callback: Optional check of the health response content
        """
        self.service_name = service_name
        self.base_url = base_url
        self.http_client_timeout = http_client_timeout
        self.http_client_headers = http_client_headers
        self.healthcheck_url = healthcheck_url
        self.healthcheck_callback = healthcheck_callback
        self._http_client: Optional[ClientSession] = None

    @property
    def _client(self) -> ClientSession:
        """Singleton http client, customized for the service."""
        if self._http_client is None or self._http_client.closed:
            self._http_client = ClientSession(
                timeout=self.http_client_timeout,
                headers=self.http_client_headers,
            )
        return self._http_client

    async def http_client_close(self) -> None:
        """Close http client."""
        if self._http_client is not None:
            await self._http_client.close()

    async def get_health(self) -> Health:
        """Check service health.

        :returns: UP if the health check URL answers with 200 and the callback accepts the response
        """
        if self.healthcheck_url is None:
            return Health.UP
        try:
            start = time.time()
            async with self._client.request(
                method="GET", url=self.healthcheck_url, timeout=ClientTimeout(total=10)
            ) as response:
                LOG.debug("%s health status is: %s.", self.service_name, response.status)
                if response.status != 200:
                    return Health.DOWN
                if self.healthcheck_callback is not None and not await self.healthcheck_callback(response):
                    return Health.DOWN
                return Health.UP if (time.time() - start) < 1 else Health.DEGRADED
        except ClientConnectionError as e:
            LOG.exception("%s is down with error %r.", self.service_name, e)
            return Health.DOWN
        except TimeoutError:
            LOG.error("%s health check timed out.", self.service_name)
            return Health.DOWN
        except InvalidURL as e:
            LOG.exception("%s health retrieval failed with %r.", self.service_name, e)
            return Health.ERROR

    @staticmethod
    def _process_error(error: str) -> str:
        """Override in subclass and return formatted error message."""
        return error

    @retry(exceptions=(ServiceServerError, ClientConnectionError), total_tries=5)
    async def _request(
        self,
        method: str = "GET",
        url: Optional[URL] = None,
        path: str = "",
        params: Union[str, dict[str, str], None] = None,
        json_data: Any = None,
        timeout: int = 10,
    ) -> Any:
        """Request to service REST API.

        :param method: HTTP method
        :param url: Full service url. Uses self.base_url by default
        :param path: When requesting to self.base_url, provide only the path (shortcut).
        :param params: URL parameters, must be url encoded
        :param json_data: Dict with request data
        :param timeout: Request timeout
        :returns: Response body parsed as JSON
        """

        LOG.debug("%s request to '%s' path '%s', params '%s'", method, url or self.base_url, path, params)
        if url is None:
            url = self.base_url
            if path and path.startswith("/"):
                path = path[1:]
            if path:
                url = url / path
        try:
            async with self._client.request(
                method=method,
                url=url,
                params=params,
                json=json_data,
                timeout=ClientTimeout(total=timeout),
            ) as response:
                if not response.ok:
                    content = await response.text()
                    LOG.error(
                        "%s request to %s '%s' returned a %s: '%s'",
                        method,
                        self.service_name,
                        url,
                        response.status,
                        content,
                    )
                    if content:
                        content = self._process_error(content)
                    raise self.make_exception(reason=content, status=response.status)

                if response.content_type.endswith("json"):
                    content = await response.json()
                else:
                    content = await response.text()
                    # We should get a JSON response in most requests.
                    if method in {"GET", "POST", "PUT", "PATCH"}:
                        message = (
                            f"{method} request to {self.service_name} '{url}' "
                            f"returned an unexpected answer: '{content}'."
                        )
                        LOG.error(message)
                        raise ServiceServerError(message)

            return content

        except TimeoutError:
            LOG.exception("%s request to %s '%s' timed out.", method, self.service_name, url)
            raise ServiceServerError(f"{self.service_name} error: Could not reach service provider.", status_code=504)
        except (ServiceError, ClientConnectionError):
            # These are expected
            raise
        except Exception:
            LOG.exception("%s request to %s '%s' raised an unexpected exception.", method, self.service_name, url)
            message = f"{self.service_name} error 502: Unexpected issue when connecting to service provider."
            raise ServiceServerError(message)

    def make_exception(self, reason: str, status: int) -> ServiceError:
        """Create a Client or Server exception, according to status code.

        :param reason: Error message
        :param status: HTTP status code
        :returns: ServiceServerError or ServiceClientError. ServiceServerError on invalid input
        """
        if status < 400:
            LOG.error("HTTP status code must be an error code, >400 received %s.", status)
            return ServiceServerError("Server encountered an unexpected situation.", status_code=500)
        reason = f"{self.service_name} error: {reason}"
        if status >= 500:
            return ServiceServerError(reason, status_code=status)
        return ServiceClientError(reason, status_code=status)
