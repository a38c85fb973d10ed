"""FastAPI application entry point for the Livelink OpenSearch connector."""

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from server.core.DescriptorService import DescriptorService
from server.core.SearchService import SearchService
from server.routers.SearchRouter import router as search_router
from shared.credentials.CredentialStore import CredentialStore
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import setup_logging

logging = setup_logging()
app_version = os.getenv("APP_VERSION", "unknown")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # when the app starts
    app.state.logging = logging
    app.state.helper_config = HelperConfig(logger=logging)

    # Livelink clients are created per request; each search gets its own
    # cookie jar and TLS settings.
    app.state.search_service = SearchService(
        helper_config=app.state.helper_config,
        credential_store=CredentialStore(helper_config=app.state.helper_config),
    )
    app.state.descriptor_service = DescriptorService(helper_config=app.state.helper_config)
    logging.info("Livelink OpenSearch connector v%s ready.", app_version, color="green")

    # while the app is running...
    yield

    logging.info("Livelink OpenSearch connector shut down.")


app = FastAPI(
    title="livelink_opensearch",
    description=(
        "Federated search connector exposing the Livelink XML Search API as "
        "OpenSearch RSS and HTML. Search via GET /ExecuteQuery.aspx, the "
        "OpenSearch descriptor via GET /GetOSDX.aspx."
    ),
    version=app_version,
    lifespan=lifespan,
)

app.include_router(search_router)


if __name__ == "__main__":
    import uvicorn

    logging.info(
        "Starting livelink_opensearch API Server v%s from root dir: %s on port 8000...",
        app_version,
        os.environ.get("ROOT_DIR", "unknown"),
    )
    uvicorn.run(app, host="0.0.0.0", port=8000)
