"""Core ParseClient facade.

This module defines the main entry point used by applications and tests.
The facade owns one RequestDispatcher and the current AuthContext, and
passes that context explicitly to the query executor and the endpoints.

Session flows (signup, login, logout, become) replace the stored context
when they succeed. Running two of them concurrently on the same client
races: whichever finishes last decides the stored session.
"""

import logging
from typing import Any

import httpx
from dotenv import load_dotenv

from parse_rest.core.auth.context import AuthContext, RequestOptions
from parse_rest.core.dispatcher.dispatcher import DEFAULT_TIMEOUT, RequestDispatcher
from parse_rest.core.dto.auth_dto import SessionResult
from parse_rest.core.dto.endpoint_dto import FileResult, FunctionResult, ObjectResult
from parse_rest.core.dto.query_dto import CountResult, DistinctResult, FindResult, FirstResult
from parse_rest.core.dto.request_dto import ResponseResult
from parse_rest.core.endpoints.files import FilesEndpoint
from parse_rest.core.endpoints.functions import FunctionsEndpoint
from parse_rest.core.endpoints.objects import ObjectsEndpoint
from parse_rest.core.endpoints.schemas import SchemasEndpoint
from parse_rest.core.endpoints.users import UsersEndpoint
from parse_rest.core.query.executor import QueryExecutor
from parse_rest.core.query.query import Query
from parse_rest.core.settings.settings import ParseSettings

logger = logging.getLogger(__name__)


class ParseClient:
    """Async client for one Parse Server application.

    Example:
        >>> async with ParseClient("http://localhost:1337/parse", "myAppId") as client:
        ...     result = await client.find(client.query("GameScore").greater_than("score", 1000))
        ...     for row in result.raise_for_error().results:
        ...         print(row["playerName"])
    """

    def __init__(
        self,
        server_url: str,
        application_id: str,
        *,
        master_key: str | None = None,
        javascript_key: str | None = None,
        rest_api_key: str | None = None,
        session_token: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Create a client.

        Args:
            server_url: Server URL, with or without the "/parse" root.
            application_id: Application identifier.
            master_key: Optional master key.
            javascript_key: Optional JavaScript key.
            rest_api_key: Optional REST API key.
            session_token: Optional session to start with.
            timeout: Request timeout in seconds.
            http_client: Optional preconfigured httpx.AsyncClient.
        """
        auth = AuthContext(
            application_id=application_id,
            master_key=master_key,
            javascript_key=javascript_key,
            rest_api_key=rest_api_key,
            session_token=session_token,
        )
        self._initialize(
            auth, RequestDispatcher(server_url, timeout=timeout, http_client=http_client)
        )

    def _initialize(self, auth: AuthContext, dispatcher: RequestDispatcher) -> None:
        self._auth = auth
        self.settings: ParseSettings | None = None
        self.dispatcher = dispatcher
        self.executor = QueryExecutor(dispatcher)
        self.objects = ObjectsEndpoint(dispatcher)
        self.users = UsersEndpoint(dispatcher)
        self.files = FilesEndpoint(dispatcher)
        self.functions = FunctionsEndpoint(dispatcher)
        self.schemas = SchemasEndpoint(dispatcher)
        logger.debug("ParseClient instance created for %s: %r", dispatcher.server_url, auth)

    @classmethod
    async def create(
        cls,
        *,
        config_path: str | None = None,
        config: dict[str, Any] | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> "ParseClient":
        """Factory method building a client from configuration.

        Loads a .env file into the environment, then merges the optional
        JSON file, the optional dict and the environment (see ParseSettings).

        Args:
            config_path: Path to JSON configuration file
            config: Optional configuration dictionary
            http_client: Optional preconfigured httpx.AsyncClient

        Raises:
            ConfigurationError: If server_url or application_id is missing or invalid.
        """
        load_dotenv()
        settings = ParseSettings(config_path=config_path)
        settings.load(config=config)

        instance = cls.__new__(cls)  # bypass __init__
        dispatcher = RequestDispatcher(
            settings.server_url, timeout=settings.timeout, http_client=http_client
        )
        instance._initialize(settings.to_auth_context(), dispatcher)
        instance.settings = settings
        return instance

    # =========================================================================
    # AUTH STATE
    # =========================================================================

    @property
    def auth(self) -> AuthContext:
        """Current credentials and session."""
        return self._auth

    @property
    def session_token(self) -> str | None:
        """Current session token, if any."""
        return self._auth.session_token

    def use_auth(self, auth: AuthContext) -> None:
        """Replace the stored AuthContext."""
        self._auth = auth
        logger.debug("ParseClient switched auth context: %r", auth)

    def _adopt(self, result: SessionResult) -> SessionResult:
        if result.is_ok():
            self.use_auth(result.auth)
        return result

    # =========================================================================
    # QUERIES
    # =========================================================================

    def query(self, class_name: str, *, use_master_key: bool = False) -> Query:
        """Start a query on class_name."""
        return Query(class_name, use_master_key=use_master_key)

    async def find(self, query: Query, *, decode: bool = False) -> FindResult:
        """All objects matching the query."""
        return await self.executor.find(query, self._auth, decode=decode)

    async def first(self, query: Query, *, decode: bool = False) -> FirstResult:
        """First object matching the query, if any."""
        return await self.executor.first(query, self._auth, decode=decode)

    async def get(self, query: Query, object_id: str, *, decode: bool = False) -> ObjectResult:
        """Object of the query's class with the given id."""
        return await self.executor.get(query, object_id, self._auth, decode=decode)

    async def count(self, query: Query) -> CountResult:
        """Number of objects matching the query."""
        return await self.executor.count(query, self._auth)

    async def distinct(self, query: Query, field: str) -> DistinctResult:
        """Distinct values of field among matching objects (master key)."""
        return await self.executor.distinct(query, field, self._auth)

    async def aggregate(
        self, query: Query | str, pipeline: list[dict[str, Any]], *, decode: bool = False
    ) -> FindResult:
        """Run an aggregation pipeline (master key)."""
        return await self.executor.aggregate(query, pipeline, self._auth, decode=decode)

    # =========================================================================
    # OBJECTS, FILES, FUNCTIONS
    # =========================================================================

    async def create_object(
        self, class_name: str, data: dict[str, Any], *, use_master_key: bool = False
    ) -> ObjectResult:
        return await self.objects.create_object(
            self._auth, class_name, data, options=RequestOptions(use_master_key=use_master_key)
        )

    async def retrieve_object(
        self,
        class_name: str,
        object_id: str,
        *,
        include: list[str] | None = None,
        decode: bool = False,
        use_master_key: bool = False,
    ) -> ObjectResult:
        return await self.objects.retrieve_object(
            self._auth,
            class_name,
            object_id,
            include=include,
            decode=decode,
            options=RequestOptions(use_master_key=use_master_key),
        )

    async def update_object(
        self, class_name: str, object_id: str, data: dict[str, Any], *, use_master_key: bool = False
    ) -> ObjectResult:
        return await self.objects.update_object(
            self._auth, class_name, object_id, data, options=RequestOptions(use_master_key=use_master_key)
        )

    async def delete_object(
        self, class_name: str, object_id: str, *, use_master_key: bool = False
    ) -> ObjectResult:
        return await self.objects.delete_object(
            self._auth, class_name, object_id, options=RequestOptions(use_master_key=use_master_key)
        )

    async def upload_file(self, name: str, data: bytes, mime_type: str) -> FileResult:
        return await self.files.upload_file(self._auth, name, data, mime_type)

    async def run_function(self, name: str, params: dict[str, Any] | None = None) -> FunctionResult:
        return await self.functions.run_function(self._auth, name, params)

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: list[tuple[str, str]] | None = None,
        body: Any = None,
        use_master_key: bool = False,
        session_token: str | None = None,
    ) -> ResponseResult:
        """Send a raw request for endpoints without a dedicated wrapper."""
        options = RequestOptions(use_master_key=use_master_key, session_token_override=session_token)
        return await self.dispatcher.send(
            method, path, self._auth, params=tuple(params or ()), body=body, options=options
        )

    # =========================================================================
    # USER SESSIONS
    # =========================================================================

    async def signup(
        self,
        username: str,
        password: str,
        *,
        email: str | None = None,
        fields: dict[str, Any] | None = None,
    ) -> SessionResult:
        """Create a user and adopt its session."""
        return self._adopt(
            await self.users.signup(self._auth, username, password, email=email, fields=fields)
        )

    async def login(self, username: str, password: str) -> SessionResult:
        """Log in and adopt the new session."""
        return self._adopt(await self.users.login(self._auth, username, password))

    async def logout(self) -> SessionResult:
        """Log out and clear the stored session."""
        return self._adopt(await self.users.logout(self._auth))

    async def become(self, session_token: str) -> SessionResult:
        """Switch to an existing session once the server accepts it."""
        return self._adopt(await self.users.become(self._auth, session_token))

    async def me(self) -> SessionResult:
        """User owning the current session."""
        return await self.users.me(self._auth)

    async def request_password_reset(self, email: str) -> ResponseResult:
        return await self.users.request_password_reset(self._auth, email)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def aclose(self) -> None:
        """Release the HTTP client owned by this client."""
        await self.dispatcher.aclose()

    async def __aenter__(self) -> "ParseClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


__all__ = ["ParseClient"]
