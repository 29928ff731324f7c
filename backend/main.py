import logging
from datetime import datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import config
from filtering import ListOptions, filter_tasks, library_list_options, today_list
from intent import interpret
from legacy import LegacyTask, migrate_tasks
from models import FilterRequest, IntentRequest, IntentResponse, ServiceError, Task
from vocabulary import TAG_CATEGORIES, TagMetadata, get_tag_metadata

logging.basicConfig(level=config["log_level"])
logger = logging.getLogger(__name__)

app = FastAPI(title="taskfacets")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config["cors_origins"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/tags")
def get_tags() -> dict:
    """Tag vocabulary grouped by category."""
    return {
        category.value: [
            {"tag": tag, **get_tag_metadata(tag).model_dump(mode="json")}
            for tag in tags
        ]
        for category, tags in TAG_CATEGORIES.items()
    }


@app.get("/tags/{tag}")
def get_tag(tag: str) -> TagMetadata:
    return get_tag_metadata(tag)


@app.post("/intent")
async def parse_intent(intent_request: IntentRequest) -> IntentResponse:
    """Interpret free text as a command. Service failures are reported in-band."""
    result = await interpret(intent_request)
    if isinstance(result, ServiceError):
        logger.warning("Intent request failed (%s): %s", result.kind, result.message)
        return IntentResponse(error=result)
    return IntentResponse(command=result)


@app.post("/tasks/filter")
def filter_task_list(filter_request: FilterRequest) -> list[Task]:
    now = filter_request.now or datetime.now().astimezone()
    return filter_tasks(filter_request.tasks, filter_request.filters, now, ListOptions(search=filter_request.search))


@app.post("/tasks/today")
def filter_today_list(filter_request: FilterRequest) -> list[Task]:
    now = filter_request.now or datetime.now().astimezone()
    return today_list(filter_request.tasks, filter_request.filters, now, filter_request.search)


@app.post("/tasks/search")
def search_library(filter_request: FilterRequest) -> list[Task]:
    now = filter_request.now or datetime.now().astimezone()
    options = library_list_options(filter_request.search)
    return filter_tasks(filter_request.tasks, filter_request.filters, now, options)


@app.post("/legacy/migrate")
def migrate_legacy_tasks(legacy_tasks: list[LegacyTask]) -> list[Task]:
    return migrate_tasks(legacy_tasks)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
