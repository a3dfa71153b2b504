"""
Web interface for the board (JSON API used by the browser front end)
"""

from typing import Any, Dict, Optional
from fastapi import FastAPI, Request, Body
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from taskboard.config.settings import settings
from taskboard.main import BoardSession
from taskboard.models.contact import Contact
from taskboard.models.response import BoardResponse
from taskboard.models.task import Task
from taskboard.services.notification_service import NotificationChannel
from taskboard.utils.error_handler import (
    handle_error,
    StoreError,
    ValidationError,
    DocumentExistsError,
    DocumentNotFoundError,
)
from taskboard.utils.formatters import format_task_created, format_contact_created, palette_color
from taskboard.utils.logger import logger

app = FastAPI(title="Task Board API")


class MoveRequest(BaseModel):
    """Drop of a task card onto a board column"""

    model_config = ConfigDict(populate_by_name=True)

    task_id: str = Field(alias="taskId")
    from_stage: str = Field(alias="from")
    to_stage: str = Field(alias="to")
    index: int = 0


@app.on_event("startup")
async def startup():
    """Create the board session"""
    try:
        logger.info("[Startup] Creating board session...")
        app.state.session = BoardSession()
        logger.info("[Startup] Board session created")
    except Exception as e:
        logger.error(f"[Startup] Error creating board session: {e}", exc_info=True)
        raise


@app.on_event("shutdown")
async def shutdown():
    """Close the board session"""
    session: Optional[BoardSession] = getattr(app.state, "session", None)
    if session is not None:
        await session.close()
        app.state.session = None


def get_session(request: Request) -> BoardSession:
    return request.app.state.session


def error_response(
    error: Exception,
    notifications: Optional[NotificationChannel] = None,
    title: Optional[str] = None,
) -> JSONResponse:
    """Translate a board error into a JSON error response (and an error notification)"""
    response = handle_error(error)
    if notifications is not None:
        notifications.show_error(response.message, title=title)
    if isinstance(error, ValidationError):
        status = 400
    elif isinstance(error, DocumentNotFoundError):
        status = 404
    elif isinstance(error, DocumentExistsError):
        status = 409
    elif isinstance(error, StoreError):
        status = 502
    else:
        status = 500
    body = BoardResponse(
        success=False,
        message=response.message,
        data={"error_code": response.error_code},
    )
    return JSONResponse(status_code=status, content=body.model_dump())


def task_payload(session: BoardSession, task: Task) -> Dict[str, Any]:
    data = task.model_dump(mode="json", by_alias=True)
    data["displayColor"] = palette_color(task.color, task.id)
    data["progress"] = task.subtask_progress
    data["assignees"] = [
        contact_payload(contact) for contact in session.contact_mirror.resolve(task.assigned_contacts)
    ]
    return data


def contact_payload(contact: Contact) -> Dict[str, Any]:
    data = contact.model_dump(mode="json")
    data["displayColor"] = palette_color(contact.color, contact.id)
    return data


def board_payload(session: BoardSession) -> Dict[str, Any]:
    return {
        stage.value: [task_payload(session, task) for task in column]
        for stage, column in session.board.columns.items()
    }


def notification_payload(session: BoardSession) -> Optional[Dict[str, Any]]:
    current = session.notifications.current
    return current.public() if current is not None else None


# ── Tasks ────────────────────────────────────────────────────────────────────

@app.get("/api/tasks")
async def list_tasks(request: Request):
    """All mirrored tasks"""
    session = get_session(request)
    return [task_payload(session, task) for task in session.task_mirror.items]


@app.get("/api/tasks/{task_id}")
async def get_task(task_id: str, request: Request):
    session = get_session(request)
    task = session.task_mirror.get(task_id)
    if task is None:
        return error_response(DocumentNotFoundError(f"Task {task_id} not found", "not-found"))
    return task_payload(session, task)


@app.post("/api/tasks")
async def create_task(request: Request, payload: Dict[str, Any] = Body(...)):
    """Create a task from form data"""
    session = get_session(request)
    try:
        task_id = await session.task_service.add_task(payload)
    except Exception as e:
        return error_response(e, session.notifications, "Task could not be created")
    session.notifications.show_success(format_task_created(str(payload.get("title", "")).strip()))
    return BoardResponse(message="Task created", data={"id": task_id})


@app.patch("/api/tasks/{task_id}")
async def update_task(task_id: str, request: Request, payload: Dict[str, Any] = Body(...)):
    session = get_session(request)
    try:
        await session.task_service.update_task(task_id, payload)
    except Exception as e:
        return error_response(e, session.notifications, "Task could not be updated")
    return BoardResponse(message="Task updated", data={"id": task_id})


@app.post("/api/tasks/{task_id}/subtasks/{subtask_id}/toggle")
async def toggle_subtask(task_id: str, subtask_id: str, request: Request):
    session = get_session(request)
    try:
        completed = await session.task_service.toggle_subtask(task_id, subtask_id)
    except Exception as e:
        return error_response(e, session.notifications, "Subtask could not be updated")
    return BoardResponse(message="Subtask updated", data={"completed": completed})


@app.post("/api/tasks/{task_id}/delete")
async def request_task_delete(task_id: str, request: Request):
    """First call asks for confirmation, a second call for the same task deletes it"""
    session = get_session(request)
    deleted = await session.task_deletion.request(task_id)
    return BoardResponse(
        message="Task deleted" if deleted else "Confirmation required",
        data={"deleted": deleted, "pending": session.task_deletion.pending_target},
    )


@app.post("/api/tasks/delete/confirm")
async def confirm_task_delete(request: Request):
    session = get_session(request)
    deleted = await session.task_deletion.confirm()
    return BoardResponse(message="Task deleted" if deleted else "Nothing deleted", success=deleted)


@app.post("/api/tasks/delete/cancel")
async def cancel_task_delete(request: Request):
    get_session(request).task_deletion.cancel()
    return BoardResponse(message="Deletion cancelled")


# ── Board ────────────────────────────────────────────────────────────────────

@app.get("/api/board")
async def get_board(request: Request, search: Optional[str] = None):
    """Columns of the board; ?search= changes the filter"""
    session = get_session(request)
    if search is not None:
        session.board.apply_search(search)
    return board_payload(session)


@app.post("/api/board/move")
async def move_task(request: Request, move: MoveRequest):
    """Drop a task on a column"""
    session = get_session(request)
    task = session.task_mirror.get(move.task_id)
    if task is None:
        return error_response(DocumentNotFoundError(f"Task {move.task_id} not found", "not-found"))
    moved = await session.board.move(task, move.from_stage, move.to_stage, move.index)
    return BoardResponse(
        message="Task moved" if moved else "Task not moved",
        success=moved or move.from_stage == move.to_stage,
        data={"board": board_payload(session), "notification": notification_payload(session)},
    )


@app.get("/api/summary")
async def get_summary(request: Request):
    return get_session(request).task_mirror.summary.value.model_dump(mode="json")


# ── Contacts ─────────────────────────────────────────────────────────────────

@app.get("/api/contacts")
async def list_contacts(request: Request):
    return [contact_payload(contact) for contact in get_session(request).contact_mirror.items]


@app.get("/api/contacts/directory")
async def contact_directory(request: Request):
    """Contacts grouped by first letter"""
    directory = get_session(request).contact_mirror.directory.value
    return {
        letter: [contact_payload(contact) for contact in contacts]
        for letter, contacts in directory.items()
    }


@app.post("/api/contacts")
async def create_contact(request: Request, payload: Dict[str, Any] = Body(...)):
    session = get_session(request)
    try:
        contact_id = await session.contact_service.add_contact(payload)
    except Exception as e:
        return error_response(e, session.notifications, "Contact could not be saved")
    session.notifications.show_success(format_contact_created(str(payload.get("name", "")).strip()))
    return BoardResponse(message="Contact created", data={"id": contact_id})


@app.patch("/api/contacts/{contact_id}")
async def update_contact(contact_id: str, request: Request, payload: Dict[str, Any] = Body(...)):
    session = get_session(request)
    try:
        await session.contact_service.update_contact(contact_id, payload)
    except Exception as e:
        return error_response(e, session.notifications, "Contact could not be saved")
    return BoardResponse(message="Contact updated", data={"id": contact_id})


@app.post("/api/contacts/{contact_id}/delete")
async def request_contact_delete(contact_id: str, request: Request):
    session = get_session(request)
    deleted = await session.contact_deletion.request(contact_id)
    return BoardResponse(
        message="Contact deleted" if deleted else "Confirmation required",
        data={"deleted": deleted, "pending": session.contact_deletion.pending_target},
    )


@app.post("/api/contacts/delete/confirm")
async def confirm_contact_delete(request: Request):
    session = get_session(request)
    deleted = await session.contact_deletion.confirm()
    return BoardResponse(message="Contact deleted" if deleted else "Nothing deleted", success=deleted)


@app.post("/api/contacts/delete/cancel")
async def cancel_contact_delete(request: Request):
    get_session(request).contact_deletion.cancel()
    return BoardResponse(message="Deletion cancelled")


# ── Notifications ────────────────────────────────────────────────────────────

@app.get("/api/notification")
async def get_notification(request: Request):
    """Active notification, or null"""
    return notification_payload(get_session(request))


@app.post("/api/notification/actions/{index}")
async def run_notification_action(index: int, request: Request):
    session = get_session(request)
    try:
        await session.notifications.run_action(index)
    except IndexError as e:
        return JSONResponse(status_code=404, content=BoardResponse(success=False, message=str(e)).model_dump())
    return BoardResponse(message="Action executed", data={"notification": notification_payload(session)})


@app.post("/api/notification/dismiss")
async def dismiss_notification(request: Request):
    get_session(request).notifications.hide()
    return BoardResponse(message="Notification dismissed")


@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.WEB_PORT)
