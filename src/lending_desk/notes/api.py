"""
REST service for notes and reminders.

Routes:
- GET    /api/notes            all notes and reminders
- GET    /api/next-id          the ID the next created item will get
- POST   /api/notes            create a note (or a reminder, if it has a time)
- PUT    /api/notes/{id}       partial update, returns the merged item
- PUT    /api/notes            bulk partial update
- DELETE /api/notes/{id}       delete an item
- POST   /api/reminders/check  run the alert rules and return fired alerts
- POST   /api/reminders/{id}/toggle-done
- POST   /api/reminders/{id}/reschedule
- GET    /health
"""

import logging
import sys
from datetime import datetime
from typing import Any

import uvicorn
from fastapi import Body, Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from ..config import AppConfig, get_config
from ..models.note import dump_item
from .reminders import ReminderAlert, order_reminders
from .storage import NoteNotFoundError, NotesFileError, NotesStorage

logger = logging.getLogger(__name__)


class RescheduleRequest(BaseModel):
    reminder: datetime = Field(..., description="New due time for the reminder")


class ReminderCheckResponse(BaseModel):
    checked_at: datetime
    alerts: list[ReminderAlert]


def get_storage(request: Request) -> NotesStorage:
    return request.app.state.storage


def _not_found(exc: NoteNotFoundError) -> HTTPException:
    return HTTPException(status_code=404, detail="Note not found")


def _unprocessable(exc: Exception) -> HTTPException:
    return HTTPException(status_code=422, detail=str(exc))


def create_app(config: AppConfig | None = None) -> FastAPI:
    """Build the notes service bound to the configured data file."""
    config = config or get_config()

    app = FastAPI(title="Lending Desk Notes API", version=config.server_version)
    app.state.storage = NotesStorage(config.notes_data_file)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(NotesFileError)
    def notes_file_unreadable(request: Request, exc: NotesFileError) -> JSONResponse:
        logger.error("Refusing to overwrite %s: %s", exc.path, exc)
        return JSONResponse(status_code=503, content={"detail": "Notes file is unreadable"})

    @app.get("/health")
    def health(storage: NotesStorage = Depends(get_storage)) -> dict[str, Any]:
        return {
            "status": "healthy",
            "timestamp": datetime.now().isoformat(),
            "data_file": str(storage.path),
        }

    @app.get("/api/notes")
    def list_notes(storage: NotesStorage = Depends(get_storage)) -> dict[str, Any]:
        document = storage.list_items()
        return {
            "notes": [dump_item(note) for note in document.notes],
            "reminders": [dump_item(r) for r in order_reminders(document.reminders)],
        }

    @app.get("/api/next-id")
    def next_id(storage: NotesStorage = Depends(get_storage)) -> dict[str, int]:
        return {"nextId": storage.peek_next_id()}

    @app.post("/api/notes", status_code=201)
    def create_note(
        payload: dict[str, Any] = Body(...),
        storage: NotesStorage = Depends(get_storage),
    ) -> dict[str, Any]:
        try:
            item = storage.create(payload)
        except (PydanticValidationError, ValueError) as e:
            logger.info("Rejected note: %s", e)
            raise _unprocessable(e) from e
        return dump_item(item)

    @app.put("/api/notes/{item_id}")
    def update_note(
        item_id: int,
        updates: dict[str, Any] = Body(...),
        storage: NotesStorage = Depends(get_storage),
    ) -> dict[str, Any]:
        try:
            item = storage.update(item_id, updates)
        except NoteNotFoundError as e:
            raise _not_found(e) from e
        except (PydanticValidationError, ValueError) as e:
            raise _unprocessable(e) from e
        return dump_item(item)

    @app.put("/api/notes")
    def bulk_update_notes(
        updates: list[dict[str, Any]] = Body(...),
        storage: NotesStorage = Depends(get_storage),
    ) -> list[dict[str, Any]]:
        try:
            items = storage.bulk_update(updates)
        except (PydanticValidationError, ValueError) as e:
            raise _unprocessable(e) from e
        return [dump_item(item) for item in items]

    @app.delete("/api/notes/{item_id}")
    def delete_note(
        item_id: int, storage: NotesStorage = Depends(get_storage)
    ) -> dict[str, str]:
        try:
            storage.delete(item_id)
        except NoteNotFoundError as e:
            raise _not_found(e) from e
        return {"message": "Note deleted successfully"}

    @app.post("/api/reminders/check")
    def check_reminders(storage: NotesStorage = Depends(get_storage)) -> ReminderCheckResponse:
        now = datetime.now()
        return ReminderCheckResponse(checked_at=now, alerts=storage.check_reminders(now))

    @app.post("/api/reminders/{item_id}/toggle-done")
    def toggle_reminder(
        item_id: int, storage: NotesStorage = Depends(get_storage)
    ) -> dict[str, Any]:
        try:
            reminder = storage.toggle_done(item_id)
        except NoteNotFoundError as e:
            raise _not_found(e) from e
        except ValueError as e:
            raise _unprocessable(e) from e
        return dump_item(reminder)

    @app.post("/api/reminders/{item_id}/reschedule")
    def reschedule_reminder(
        item_id: int,
        body: RescheduleRequest,
        storage: NotesStorage = Depends(get_storage),
    ) -> dict[str, Any]:
        try:
            reminder = storage.reschedule(item_id, body.reminder)
        except NoteNotFoundError as e:
            raise _not_found(e) from e
        except ValueError as e:
            raise _unprocessable(e) from e
        return dump_item(reminder)

    logger.info("Notes API using data file %s", config.notes_data_file)
    return app


def main() -> None:
    """Entry point for ``lending-desk-notes``."""
    config = get_config()
    logging.basicConfig(
        level=logging.DEBUG if config.debug else config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    logger.info("Starting notes service on %s:%d", config.notes_host, config.notes_port)
    uvicorn.run(create_app(config), host=config.notes_host, port=config.notes_port)


if __name__ == "__main__":
    main()
