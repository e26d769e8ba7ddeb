from celery import Celery
import os
from dotenv import load_dotenv

load_dotenv()

# Celery worker entry point: celery -A worker worker --loglevel=info
app = Celery(
    'worker',
    broker=os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0"),
    backend=os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0"),
    include=['src.creatorai.langGraph.tasks']
)
app.config_from_object('celeryconfig')

if __name__ == '__main__':
    app.start()
