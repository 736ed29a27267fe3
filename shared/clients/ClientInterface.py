from abc import ABC, abstractmethod
from typing import Any, Callable, TypeVar

import httpx
from httpx._types import QueryParamTypes, RequestContent
from pydantic import BaseModel, ValidationError

from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig
from shared.models.errors import MalformedResponseError, RemoteCallError

M = TypeVar("M", bound=BaseModel)


class ClientInterface(ABC):
    """Base of every remote client: env driven configuration plus one shared httpx.AsyncClient."""

    def __init__(self, helper_config: HelperConfig):
        self.logging = helper_config.get_logger()
        self._helper_config = helper_config
        self.timeout = helper_config.get_number_val(f"{self.get_client_type().upper()}_TIMEOUT", default=60.0)

        # created by boot()
        self._client: httpx.AsyncClient | None = None
        self.validate_full_configuration()

    ##########################################
    ############### CHECKER ##################
    ##########################################

    def validate_full_configuration(self) -> None:
        """Read every required setting once so a misconfigured client fails at construction.

        Raises:
            ValueError: Listing every required key that is missing or unparsable.
        """
        problems: list[str] = []
        for config in self._get_required_config():
            try:
                self.get_config_val(raw_key=config.env_key, default=config.default, val_type=config.val_type)
            except ValueError as e:
                problems.append(str(e))
        if problems:
            raise ValueError(
                f"{self.get_client_type().upper()} client '{self.get_engine_name()}' is misconfigured: " + " ".join(problems)
            )

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def get_client_type(self) -> str:
        """Lowercase client type, the first segment of its env keys (e.g. "filesearch")."""
        return self._get_client_type().lower()

    @abstractmethod
    def _get_client_type(self) -> str:
        pass

    def get_engine_name(self) -> str:
        """Lowercase engine name, the second segment of its env keys (e.g. "gemini")."""
        return self._get_engine_name().lower()

    @abstractmethod
    def _get_engine_name(self) -> str:
        pass

    ################ CONFIG ##################
    @abstractmethod
    def _get_required_config(self) -> list[EnvConfig]:
        """Settings the engine cannot run without. A None default marks the setting as mandatory."""
        pass

    def _get_config_key_name(self, raw_key: str) -> str:
        # "API_KEY" -> "LLM_GEMINI_API_KEY"
        return "_".join((self.get_client_type(), self.get_engine_name(), raw_key)).upper()

    def _get_config_reader(self, val_type: str) -> Callable[..., Any]:
        readers = {
            "string": self._helper_config.get_string_val,
            "number": self._helper_config.get_number_val,
            "bool": self._helper_config.get_bool_val,
            "list": self._helper_config.get_list_val,
        }
        if val_type not in readers:
            raise ValueError(f"Unsupported config value type '{val_type}', expected one of {sorted(readers)}.")
        return readers[val_type]

    def get_config_val(self, raw_key: str, default: Any = None, val_type: str = "string") -> Any:
        """Read an engine scoped setting.

        Args:
            raw_key (str): Key without the "<TYPE>_<ENGINE>_" prefix.
            default (Any): Used when the variable is unset. None makes the setting mandatory.
            val_type (str): "string", "number", "bool" or "list".
        """
        return self._get_config_reader(val_type)(self._get_config_key_name(raw_key), default=default)

    ################ AUTH ##################
    @abstractmethod
    def _get_auth_header(self) -> dict:
        """
        Returns the authentication header for the backend, if an API key is set.
        """
        pass

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_base_url(self) -> str:
        """
        Returns the base URL of the backend (e.g. "https://generativelanguage.googleapis.com").
        """
        pass

    @abstractmethod
    def _get_endpoint_healthcheck(self) -> str:
        """
        Returns the endpoint path for healthcheck requests.
        """
        pass

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    def _parse_model(self, model: type[M], data: Any) -> M:
        """Validate a raw response payload against its schema.

        Args:
            model (type[M]): The pydantic model describing the payload.
            data (Any): The decoded JSON body.

        Returns:
            M: The validated model instance.

        Raises:
            MalformedResponseError: If the payload does not match the schema.
        """
        try:
            return model.model_validate(data)
        except ValidationError as e:
            self.logging.error("Malformed %s response from %s: %s", model.__name__, self._get_engine_name(), e)
            raise MalformedResponseError(model.__name__, str(e)) from e

    def _decode_json(self, response: httpx.Response) -> Any:
        """Decode a JSON body. An empty body decodes to an empty dict.

        Raises:
            MalformedResponseError: If the body is not valid JSON.
        """
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError("JSON", f"invalid body from {response.request.url}: {e}") from e

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_healthcheck(self) -> httpx.Response:
        """Check if the backend is reachable by sending a test request."""
        return await self.do_request(method="GET", endpoint=self._get_endpoint_healthcheck())

    ##########################################
    ############ CORE REQUESTS ###############
    ##########################################

    async def boot(self) -> None:
        """Initialise the HTTP client."""
        self._client = httpx.AsyncClient(timeout=self.timeout)

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def do_request(
        self,
        method: str = "GET",
        content: RequestContent | None = None,
        json: dict | None = None,
        params: QueryParamTypes | None = None,
        endpoint: str = "",
        base_url: str | None = None,
        additional_headers: dict | None = None,
        raise_on_error: bool = False,
    ) -> httpx.Response:
        """Send an HTTP request to the backend.

        Args:
            method: HTTP method (GET, POST, DELETE, …).
            content: Raw bytes body.
            json: JSON-serialisable body.
            params: URL query parameters.
            endpoint: Path to append to the base URL (leading slash optional), or an absolute URL.
            base_url: Overrides the client base URL for this request.
            additional_headers: Extra headers that override the defaults.
            raise_on_error: Raise RemoteCallError on a non-2xx status.

        Returns:
            The raw httpx.Response.

        Raises:
            RuntimeError: If the client has not been booted.
            RemoteCallError: If raise_on_error is set and the status is not 2xx.
            httpx.HTTPError: On transport failures.
        """
        if self._client is None:
            raise RuntimeError("HTTP client not initialised. Call boot() before making requests.")

        if endpoint.startswith("http://") or endpoint.startswith("https://"):
            url = endpoint
        else:
            endpoint = "/" + endpoint.strip().lstrip("/") if endpoint.strip() else ""
            url = f"{(base_url or self._get_base_url()).rstrip('/')}{endpoint}"

        headers = {**self._get_auth_header(), **(additional_headers or {})}

        # raw content wins over json, httpx accepts only one body
        body: dict = {"content": content} if content is not None else {"json": json} if json is not None else {}

        response = await self._client.request(method, url, headers=headers, params=params, timeout=self.timeout, **body)

        if raise_on_error and not response.is_success:
            self.logging.error(
                "Request %s %s failed with status %d: %s",
                method,
                url,
                response.status_code,
                response.text[:500],
            )
            raise RemoteCallError(url=url, status_code=response.status_code, body=response.text)

        return response
