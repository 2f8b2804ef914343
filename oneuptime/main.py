import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from oneuptime.api.router import api_router
from oneuptime.core.config import get_settings
from oneuptime.core.errors import register_exception_handlers
from oneuptime.core.logging_config import configure_logging

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    debug=settings.app_debug,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)
app.include_router(api_router, prefix=settings.api_prefix)
logger.info("%s started in %s mode", settings.app_name, settings.app_env)


@app.get("/")
def root() -> dict[str, str]:
    return {"message": "OneUptime backend is running"}
