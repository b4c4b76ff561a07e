# --- include all imports here ---
import uuid
from typing import Optional

from fastapi import APIRouter, HTTPException, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import HTMLResponse, Response

from studio import storage
from studio.agent import ChatTurn, require
from studio.errors import CapabilityDisabledError, MalformedProjectError
from studio.extractor import extract
from studio.llm import generate_image
from studio.logger import get_logger
from studio.models import (
    ApplyArtifactsRequest,
    Bot,
    Capability,
    ChatRequest,
    CreateBotRequest,
    EditFileRequest,
    ExtractRequest,
    FileContentResponse,
    FileSetResponse,
    ImageRequest,
    ReplaceAllRequest,
    SearchRequest,
    SearchResponse,
)
from studio.preview import preview_registry, sandbox_policy
from studio.store import DocumentStore
from studio.websocket_manager import ws_manager
from studio.workspace import workspace

logger = get_logger(__name__)


router = APIRouter()


def _file_set_response(store: DocumentStore) -> FileSetResponse:
    handle = store.preview_handle
    return FileSetResponse(
        project_id=store.project_id,
        files=dict(store.files),
        active_file=store.active_file,
        preview_url=f"/preview/{handle}" if handle else None,
    )


def _file_response(store: DocumentStore, name: str) -> FileContentResponse:
    return FileContentResponse(
        name=name,
        content=store.select(name),
        can_undo=store.can_undo(name),
        can_redo=store.can_redo(name),
    )


def _target_file(store: DocumentStore, name: Optional[str]) -> str:
    name = name or store.active_file
    if not name:
        raise HTTPException(status_code=400, detail="No file selected")
    return name


def _get_bot(bot_id: str) -> Bot:
    bot = storage.get_bot(bot_id)
    if not bot:
        raise HTTPException(status_code=404, detail="Bot not found")
    return bot


def _get_store(project_id: str) -> DocumentStore:
    store = workspace.find(project_id)
    if store is None:
        raise HTTPException(status_code=404, detail="Project not found")
    return store


@router.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "message": "Artifact Studio API is running"}


# --- bots ---


@router.get("/bots")
async def list_bots():
    return [bot.model_dump(mode="json") for bot in storage.list_bots()]


@router.post("/bots", response_model=Bot)
async def create_bot(request: CreateBotRequest):
    """Create a new bot profile"""
    bot = Bot(id=str(uuid.uuid4()), **request.model_dump())
    storage.save_bot(bot)
    logger.info(f"Created bot {bot.id} ({bot.name})")
    return bot


@router.get("/bots/{bot_id}", response_model=Bot)
async def get_bot(bot_id: str):
    return _get_bot(bot_id)


@router.put("/bots/{bot_id}", response_model=Bot)
async def update_bot(bot_id: str, request: CreateBotRequest):
    bot = _get_bot(bot_id)
    updated = bot.model_copy(update=request.model_dump())
    storage.save_bot(updated)
    return updated


@router.delete("/bots/{bot_id}")
async def delete_bot(bot_id: str):
    if not storage.delete_bot(bot_id):
        raise HTTPException(status_code=404, detail="Bot not found")
    workspace.discard(bot_id)
    return {"success": True}


@router.post("/bots/{bot_id}/images")
async def create_image(bot_id: str, request: ImageRequest):
    """Generate an image for a bot with image generation enabled"""
    bot = _get_bot(bot_id)
    try:
        require(bot, Capability.IMAGE_GEN)
        return {"success": True, "url": generate_image(request.prompt)}
    except CapabilityDisabledError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except Exception as e:
        logger.error(f"Image generation failed for bot {bot_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Image generation failed: {str(e)}")


# --- artifacts ---


@router.post("/extract")
async def extract_artifacts(request: ExtractRequest):
    """Extract named file artifacts from raw text"""
    try:
        files = extract(request.text)
        return {"files": files, "count": len(files)}
    except Exception as e:
        logger.error(f"Error extracting artifacts: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@router.post("/projects/{project_id}/artifacts", response_model=FileSetResponse)
async def apply_artifacts(project_id: str, request: ApplyArtifactsRequest):
    """Extract artifacts from text and open them in the project"""
    try:
        store = _get_store(project_id)
        files = extract(request.text)
        if not files:
            raise HTTPException(status_code=422, detail="No artifact found in text")
        store.apply_artifacts(files, replace=request.replace)
        return _file_set_response(store)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error applying artifacts to project {project_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


# --- projects ---


@router.post("/projects/{project_id}/select", response_model=FileSetResponse)
async def select_project(project_id: str):
    """Make a project the active context, creating it from the seed files on first use"""
    try:
        return _file_set_response(workspace.switch(project_id))
    except Exception as e:
        logger.error(f"Error selecting project {project_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@router.get("/projects/{project_id}/files", response_model=FileSetResponse)
async def get_files(project_id: str):
    try:
        return _file_set_response(_get_store(project_id))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error listing files of project {project_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@router.get("/projects/{project_id}/files/{name:path}", response_model=FileContentResponse)
async def get_file(project_id: str, name: str):
    try:
        store = _get_store(project_id)
        store.set_active(name)
        return _file_response(store, name)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error reading {name} in project {project_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@router.put("/projects/{project_id}/files/{name:path}", response_model=FileContentResponse)
async def edit_file(project_id: str, name: str, request: EditFileRequest):
    try:
        store = _get_store(project_id)
        store.edit(name, request.content)
        return _file_response(store, name)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error editing {name} in project {project_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@router.post("/projects/{project_id}/clear", response_model=FileContentResponse)
async def clear_file(project_id: str, file: Optional[str] = None):
    return _history_action(project_id, file, "clear")


@router.post("/projects/{project_id}/undo", response_model=FileContentResponse)
async def undo(project_id: str, file: Optional[str] = None):
    return _history_action(project_id, file, "undo")


@router.post("/projects/{project_id}/redo", response_model=FileContentResponse)
async def redo(project_id: str, file: Optional[str] = None):
    return _history_action(project_id, file, "redo")


def _history_action(project_id: str, file: Optional[str], action: str) -> FileContentResponse:
    try:
        store = _get_store(project_id)
        name = _target_file(store, file)
        getattr(store, action)(name)
        return _file_response(store, name)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error running {action} in project {project_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@router.post("/projects/{project_id}/search", response_model=SearchResponse)
async def search(project_id: str, request: SearchRequest):
    try:
        store = _get_store(project_id)
        if request.direction == "prev":
            match = store.find_prev(request.query, request.position, request.file)
        else:
            match = store.find_next(request.query, request.position, request.file)
        if match is None:
            return SearchResponse(found=False)
        return SearchResponse(found=True, start=match.start, end=match.end)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error searching project {project_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@router.post("/projects/{project_id}/replace", response_model=FileContentResponse)
async def replace(project_id: str, request: ReplaceAllRequest):
    try:
        store = _get_store(project_id)
        name = _target_file(store, request.file)
        store.replace_all(request.query, request.replacement, name)
        return _file_response(store, name)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error replacing in project {project_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@router.get("/projects/{project_id}/export")
async def export_project(project_id: str):
    try:
        store = _get_store(project_id)
        return Response(
            content=store.export_project(),
            media_type="application/json",
            headers={"Content-Disposition": f'attachment; filename="project_{project_id}.json"'},
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error exporting project {project_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@router.post("/projects/{project_id}/import", response_model=FileSetResponse)
async def import_project(project_id: str, request: Request):
    """Replace the project's files with an uploaded project document"""
    try:
        store = _get_store(project_id)
        store.import_project(await request.body())
        return _file_set_response(store)
    except MalformedProjectError as e:
        logger.warning(f"Rejected import for project {project_id}: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error importing project {project_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@router.get("/projects/{project_id}/preview", response_model=FileSetResponse)
async def get_project_preview(project_id: str):
    try:
        return _file_set_response(_get_store(project_id))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting preview of project {project_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@router.post("/projects/{project_id}/chat")
async def chat(project_id: str, request: ChatRequest):
    """Run one chat turn; live events go to the project's WebSocket"""
    bot = _get_bot(project_id)
    store = workspace.get(project_id)

    async def on_event(event: dict):
        await ws_manager.broadcast(project_id, event)

    try:
        result = await ChatTurn(bot, store).run(request.message, on_event)
    except Exception as e:
        logger.error(f"Error in chat for project {project_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")

    if result.status == "error":
        raise HTTPException(status_code=502, detail=result.message)

    return {
        "success": True,
        "text": result.text,
        "artifacts": result.artifacts,
        "media_url": result.media_url,
        "preview_url": f"/preview/{store.preview_handle}" if store.preview_handle else None,
    }


# --- preview serving ---


@router.get("/preview/{handle}")
async def serve_preview(handle: str):
    """Serve a live preview document inside a sandbox"""
    html = preview_registry.resolve(handle)
    if html is None:
        raise HTTPException(status_code=410, detail="Preview has been released")
    return HTMLResponse(
        content=html,
        headers={
            "Content-Security-Policy": sandbox_policy(),
            "Cache-Control": "no-store",
        },
    )


@router.websocket("/ws/{project_id}")
async def project_events(websocket: WebSocket, project_id: str):
    await ws_manager.connect(project_id, websocket)
    try:
        while True:
            # clients only listen; drain anything they send
            await websocket.receive_text()
    except WebSocketDisconnect:
        await ws_manager.disconnect(project_id, websocket)
