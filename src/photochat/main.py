import asyncio
import logging
from contextlib import asynccontextmanager

from dishka import make_async_container
from dishka.integrations.fastapi import setup_dishka
from fastapi import FastAPI
import uvicorn

from photochat.config import Config, load_config
from photochat.providers.dishka_app import AdaptersProvider, GatewaysProvider, ServicesProvider
from photochat.services import AuthAPI, UserAPI, ConversationAPI, MessageAPI, HealthAPI
from photochat.services.handlers import register_exception_handlers

@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await app.state.dishka_container.close()

async def create_app(config: Config | None = None) -> FastAPI:
    container = make_async_container(
        AdaptersProvider(config),
        GatewaysProvider(),
        ServicesProvider(),
    )

    app = FastAPI(title="photochat", lifespan=lifespan)
    setup_dishka(container, app)
    register_exception_handlers(app)

    # resolving the APIs also creates the schema
    auth_api = await container.get(AuthAPI)
    user_api = await container.get(UserAPI)
    conversation_api = await container.get(ConversationAPI)
    message_api = await container.get(MessageAPI)
    health_api = await container.get(HealthAPI)

    app.include_router(auth_api.get_router())
    app.include_router(user_api.get_router())
    app.include_router(conversation_api.get_router())
    app.include_router(message_api.get_router())
    app.include_router(health_api.get_router())

    return app

async def serve(config: Config):
    app = await create_app(config)
    # same event loop as create_app, the engine's connections belong to it
    server = uvicorn.Server(
        uvicorn.Config(app, host=config.app.host, port=config.app.port, log_level=config.app.log_level.lower())
    )
    await server.serve()

def main():
    config = load_config(".env")
    logging.basicConfig(
        level=config.app.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    asyncio.run(serve(config))

if __name__ == "__main__":
    main()
