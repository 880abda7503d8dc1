"""ASGI entry point: ``uvicorn file_receiver.api.asgi:app``."""

from .main import create_app

app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = app.state.bridge.settings
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
