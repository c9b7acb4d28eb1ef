# backend/setup_reporter/__main__.py
from .main_worker import run

run()
