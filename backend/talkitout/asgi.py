# talkitout/asgi.py
# Server entry point: uvicorn talkitout.asgi:app
from .main import create_app

app = create_app()
