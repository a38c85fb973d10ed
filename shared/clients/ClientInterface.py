from abc import ABC, abstractmethod

import httpx
from typing import Any
from shared.models.config import EnvConfig

from shared.helper.HelperConfig import HelperConfig


class ClientInterface(ABC):
    def __init__(self, helper_config: HelperConfig, verify_tls: bool = True, transport: httpx.AsyncBaseTransport | None = None):
        self.logging = helper_config.get_logger()
        self._helper_config = helper_config
        self.timeout = helper_config.get_number_val(f"{self.get_client_type().upper()}_TIMEOUT", default=30.0)

        # TLS verification belongs to this client's own connection pool only
        self._verify_tls = verify_tls
        self._transport = transport

        # client and config
        self._client: httpx.AsyncClient | None = None
        self.validate_full_configuration()

    ##########################################
    ############### CHECKER ##################
    ##########################################

    def validate_full_configuration(self) -> None:
        """
        Validates that all required configuration values for the client are set and valid.

        Raises:
            ValueError: If any required configuration value is missing or invalid.
        """
        req_config = self._get_required_config()
        for config in req_config:
            _ = self.get_config_val(raw_key=config.env_key, default=config.default, val_type=config.val_type)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def get_client_type(self) -> str:
        """
        Returns the type of the client in lowercase. E.g. "livelink"
        """
        return self._get_client_type().lower()

    @abstractmethod
    def _get_client_type(self) -> str:
        """
        Returns the type of the client. E.g. "livelink"
        """
        pass

    @abstractmethod
    def _get_user_agent(self) -> str:
        """
        Returns the user agent sent with every request.
        """
        pass

    ################ CONFIG ##################
    @abstractmethod
    def _get_required_config(self) -> list[EnvConfig]:
        """
        Returns all required configurations for the client.

        Returns:
            list[EnvConfig]: A list containing the details of each required configuration key.
        """
        pass

    def _get_config_key_name(self, raw_key: str) -> str:
        """
        Returns:
            str: The full configuration key name for the client. E.g. "LIVELINK_TIMEOUT"
        """
        return f"{self.get_client_type().upper()}_{raw_key.upper()}"

    def get_config_val(self, raw_key: str, default: Any = None, val_type: str = "string") -> Any:
        """
        Retrieves the value of a configuration key for the client.

        Args:
            raw_key (str): The raw configuration key name
            default (Any): The default value to return if the configuration key is not set
            val_type (str): The type of the configuration value ("string", "number", "bool")
        """
        key = self._get_config_key_name(raw_key)
        if val_type == "string":
            return self._helper_config.get_string_val(key, default=default)
        elif val_type == "number":
            return self._helper_config.get_number_val(key, default=default)
        elif val_type == "bool":
            return self._helper_config.get_bool_val(key, default=default)
        else:
            raise ValueError(f"Unsupported config value type '{val_type}' for env key '{raw_key}' in {self.get_client_type().upper()} client.")

    ################ AUTH ##################
    @abstractmethod
    def _get_auth_header(self) -> dict:
        """
        Returns the authentication header for the backend server, if any is forwarded.

        Returns:
            dict: A dictionary containing the auth data
        """
        pass

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_base_url(self) -> str:
        """
        Returns the base URL of the backend server

        Returns:
            str: The base URL of the backend server (e.g. "http://myserver/livelink/llisapi.dll")
        """
        pass

    def get_cookie_count(self) -> int:
        """Returns the count of cookies received by this client so far."""
        if self._client is None:
            return 0
        return len(self._client.cookies.jar)

    ##########################################
    ############ CORE REQUESTS ###############
    ##########################################

    async def boot(self) -> None:
        """Initialise the HTTP client with its own cookie jar and TLS settings."""
        kwargs: dict = {
            "timeout": self.timeout,
            "verify": self._verify_tls,
            "follow_redirects": True,
            "headers": {"User-Agent": self._get_user_agent()},
        }
        if self._transport is not None:
            kwargs["transport"] = self._transport
        self._client = httpx.AsyncClient(**kwargs)

    async def close(self) -> None:
        """Close the HTTP client and any other resources."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ClientInterface":
        await self.boot()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def get_url(self, query: str = "") -> str:
        """Returns the base URL with the URL query appended."""
        base = self._get_base_url()
        return f"{base}?{query}" if query else base

    async def do_request(
        self,
        method: str = "GET",
        content: bytes | None = None,
        query: str = "",
        additional_headers: dict | None = None,
    ) -> httpx.Response:
        """Send an HTTP request to the backend and read the whole response.

        Args:
            method: HTTP method (GET, POST, …).
            content: Raw bytes body; the caller passes its Content-Type via additional_headers.
            query: Already encoded URL query to append to the base URL.
            additional_headers: Extra headers that override the defaults.

        Returns:
            The httpx.Response with its content already read.

        Raises:
            Exception: If the client is not initialised.
            httpx.RequestError: If the server cannot be reached or does not answer in time.
        """
        if self._client is None:
            raise Exception("HTTP client not initialised. Call boot() before making requests.")

        headers: dict = {}
        headers.update(self._get_auth_header())
        if additional_headers:
            headers.update(additional_headers)

        url = self.get_url(query)
        self.logging.debug("%s %s", method, url)
        # the stream context releases the connection on every exit path
        async with self._client.stream(method, url, content=content, headers=headers) as response:
            await response.aread()
        return response
