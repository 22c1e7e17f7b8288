from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from . import settings
from .routers import pages
from .services import chart_data, markdown_loader


app = FastAPI(title="Blog")

app.mount("/static", StaticFiles(directory=str(settings.STATIC_DIR)), name="static")


@app.on_event("startup")
def startup() -> None:
    settings.refresh()
    markdown_loader.refresh_cache()
    chart_data.refresh()


@app.get("/health")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


app.include_router(pages.router)
