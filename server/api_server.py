"""FastAPI application entry point for the Great Library client."""

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shared.logging.logging_setup import setup_logging
from shared.helper.HelperConfig import HelperConfig
from shared.cache.KeyValueStoreFile import KeyValueStoreFile
from shared.cache.LibraryCache import LibraryCache
from shared.clients.filesearch.FileSearchClientInterface import FileSearchClientInterface
from shared.clients.filesearch.FileSearchClientManager import FileSearchClientManager
from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.clients.llm.LLMClientManager import LLMClientManager
from shared.models.errors import (
    InvalidInputError,
    LibraryError,
    OperationTimeoutError,
)
from services.library.AskService import AskService
from services.library.ConversationService import ConversationService, SessionBusyError
from services.library.DocumentService import DocumentService
from services.library.NoteService import NoteService
from services.library.StoreResolver import StoreResolver
from services.library.UploadService import UploadService
from server.routers.AskRouter import router as ask_router
from server.routers.DocumentRouter import router as document_router
from server.routers.NoteRouter import router as note_router
from server.routers.UploadRouter import router as upload_router

logging = setup_logging()
app_version = os.getenv("APP_VERSION", "unknown")


def wire_services(
    state,
    helper_config: HelperConfig,
    filesearch_client: FileSearchClientInterface,
    llm_client: LLMClientInterface,
    cache: LibraryCache,
) -> None:
    """Build all services from booted clients and attach them to the app state."""
    state.helper_config = helper_config
    state.logging = helper_config.get_logger()
    state.cache = cache

    store_resolver = StoreResolver(helper_config=helper_config, filesearch_client=filesearch_client, cache=cache)
    upload_service = UploadService(
        helper_config=helper_config,
        filesearch_client=filesearch_client,
        store_resolver=store_resolver,
        cache=cache,
    )
    ask_service = AskService(helper_config=helper_config, llm_client=llm_client, store_resolver=store_resolver, cache=cache)

    state.store_resolver = store_resolver
    state.upload_service = upload_service
    state.document_service = DocumentService(
        helper_config=helper_config,
        filesearch_client=filesearch_client,
        store_resolver=store_resolver,
        cache=cache,
    )
    state.note_service = NoteService(helper_config=helper_config, upload_service=upload_service)
    state.ask_service = ask_service
    state.conversation_service = ConversationService(helper_config=helper_config, ask_service=ask_service)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # when the app starts
    helper_config = HelperConfig(logger=logging)
    filesearch_client = FileSearchClientManager(helper_config=helper_config).get_client()
    llm_client = LLMClientManager(helper_config=helper_config).get_client()
    cache = LibraryCache(helper_config=helper_config, store=KeyValueStoreFile(helper_config=helper_config))

    logging.info("Booting all clients...")
    for client in [filesearch_client, llm_client]:
        await client.boot()
    logging.info("All clients booted successfully.")

    wire_services(app.state, helper_config, filesearch_client, llm_client, cache)
    await check_connections(filesearch_client, llm_client)

    # while the app is running...
    yield

    # when the app shuts down, close all client connections
    logging.info("Shutting down, closing all clients...")
    for client in [filesearch_client, llm_client]:
        await client.close()
    logging.info("All clients closed.")


async def check_connections(filesearch_client: FileSearchClientInterface, llm_client: LLMClientInterface) -> None:
    """Check connectivity to both Gemini APIs on startup.

    Raises:
        Exception: If either backend is not reachable.
    """
    for client in [filesearch_client, llm_client]:
        result: httpx.Response = await client.do_healthcheck()
        if not result.is_success:
            raise Exception(
                f"{client.__class__.__name__} is not reachable "
                f"(status {result.status_code}). Check the API key and base URL."
            )


def register_exception_handlers(app: FastAPI) -> None:
    """Map library errors onto HTTP status codes."""

    @app.exception_handler(InvalidInputError)
    async def handle_invalid_input(request: Request, exc: InvalidInputError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(SessionBusyError)
    async def handle_busy_session(request: Request, exc: SessionBusyError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(OperationTimeoutError)
    async def handle_timeout(request: Request, exc: OperationTimeoutError) -> JSONResponse:
        return JSONResponse(status_code=504, content={"detail": str(exc)})

    @app.exception_handler(LibraryError)
    async def handle_library_error(request: Request, exc: LibraryError) -> JSONResponse:
        request.app.state.logging.error("Request %s failed: %s", request.url.path, exc)
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    @app.exception_handler(httpx.HTTPError)
    async def handle_transport_error(request: Request, exc: httpx.HTTPError) -> JSONResponse:
        request.app.state.logging.error("Request %s failed: %s", request.url.path, exc)
        return JSONResponse(status_code=502, content={"detail": str(exc) or exc.__class__.__name__})


def create_app(lifespan_handler=lifespan) -> FastAPI:
    app = FastAPI(
        title="great_library",
        description=(
            "Personal knowledge base on top of Google Gemini File Search. "
            "Upload files and notes into a file search store, keep a local metadata cache "
            "and ask grounded questions with citations via POST /ask."
        ),
        version=app_version,
        lifespan=lifespan_handler,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(note_router)
    app.include_router(upload_router)
    app.include_router(document_router)
    app.include_router(ask_router)
    register_exception_handlers(app)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logging.info(
        "Starting great_library API Server v%s from root dir: %s on port 8000...",
        app_version,
        os.environ.get("ROOT_DIR", "unknown"),
    )
    uvicorn.run(app, host="0.0.0.0", port=8000)
