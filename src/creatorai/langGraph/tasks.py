import asyncio
import logging
from typing import Any, Callable, Dict, Optional

from celery import Celery

from src.creatorai.config import CELERY_BROKER_URL
from src.creatorai.file_tree import update_file_content
from src.creatorai.langGraph.producer import ContentProducer, GeminiContentProducer
from src.creatorai.langGraph.session import FileEvent, StructureEvent, generate_environment

app = Celery('tasks', broker=CELERY_BROKER_URL, backend=CELERY_BROKER_URL)
app.conf.update(
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    timezone='UTC',
    enable_utc=True,
    task_time_limit=3600,
    task_soft_time_limit=3000,
    broker_transport_options={
        'socket_timeout': 60,
        'socket_connect_timeout': 60,
        'visibility_timeout': 3600,
    }
)

logger = logging.getLogger(__name__)


@app.task(bind=True)
def generate_environment_task(self, project: Dict[str, Any], api_key: Optional[str] = None):
    """Whole environment generation for one project, off the request path. Not retried."""
    def report(fraction: float, message: str) -> None:
        self.update_state(state="PROGRESS", meta={"progress": fraction, "message": message})

    try:
        return asyncio.run(_run_environment_generation(project, GeminiContentProducer(api_key=api_key), report))
    except Exception as e:
        logger.error(f"Error in generate_environment_task: {e}", exc_info=True)
        raise


async def _run_environment_generation(project: Dict[str, Any], producer: ContentProducer,
                                      on_progress: Optional[Callable[[float, str], None]] = None) -> Dict[str, Any]:
    tree = []
    async for event in generate_environment(producer, project, on_progress=on_progress):
        if isinstance(event, StructureEvent):
            tree = event.tree
        elif isinstance(event, FileEvent):
            tree = update_file_content(tree, event.path, event.content)

    return {"status": "completed", "fileStructure": tree}
