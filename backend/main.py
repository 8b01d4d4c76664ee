# backend/main.py
import logging

import socketio
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from database import init_db
from utils.errors import register_exception_handlers
from utils.events import SocketIOPublisher, create_socket_server

# Router imports
from routes.auth import router as auth_router
from routes.users import router as users_router
from routes.reports import router as reports_router
from routes.help_requests import router as help_requests_router
from routes.volunteers import router as volunteers_router
from routes.logs import router as logs_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Initialization
init_db()

app = FastAPI(title="Rapid Relief API", version="1.0.0")

# CORS configuration: local Vite dev server plus the deployed frontend
origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
if settings.FRONTEND_URL and settings.FRONTEND_URL not in origins:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Real-time updates: handlers receive the publisher through utils.events.get_publisher
sio = create_socket_server(origins)
app.state.publisher = SocketIOPublisher(sio)

# Router registration
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(reports_router)
app.include_router(help_requests_router)
app.include_router(volunteers_router)
app.include_router(logs_router)

@app.get("/")
def read_root():
    return {"message": "Rapid Relief API is running!"}

# Entry point for uvicorn: Socket.IO on /socket.io, everything else goes to FastAPI
asgi_app = socketio.ASGIApp(sio, other_asgi_app=app)
